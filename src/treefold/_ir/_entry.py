"""Entries of the flat intermediate representation."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Any, Final

# A child reference is a node id, or for structural argument positions a
# record (dict of field name to reference) or tuple of references.
type ChildRef = str | dict[str, ChildRef] | tuple[ChildRef, ...]


class _Unset:
    """Marker for entries that carry no literal value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()

ALIAS_KIND = "@alias"
ALIAS_PREFIX = "@"

# Projection of one field or index out of a record- or tuple-valued node;
# the field name or index is the entry's ``out``.
ACCESS_KIND = "core/access"


def iter_child_ids(ref: ChildRef) -> Iterator[str]:
    """Yield every node id in a child reference, depth-first in declaration order."""
    stack: list[ChildRef] = [ref]
    while stack:
        current = stack.pop()
        if isinstance(current, str):
            yield current
        elif isinstance(current, Mapping):
            stack.extend(reversed(list(current.values())))
        else:
            stack.extend(reversed(current))


def map_child_ids(ref: ChildRef, fn: Callable[[str], str]) -> ChildRef:
    """Return a copy of ``ref`` with every node id replaced by ``fn(id)``."""
    if isinstance(ref, str):
        return fn(ref)
    if isinstance(ref, Mapping):
        return {key: map_child_ids(value, fn) for key, value in ref.items()}
    return tuple(map_child_ids(item, fn) for item in ref)


@dataclass(frozen=True, slots=True)
class Entry:
    """A single node of the flat representation.

    Attributes:
        kind: Concrete kind name. Traits are already resolved.
        children: One reference per argument, in argument order.
        out: Literal value for literal kinds, the name or index for kinds
            that take a payload argument, UNSET otherwise.
        type: Output type discovered during elaboration.

    """

    kind: str
    children: tuple[ChildRef, ...] = ()
    out: Any = UNSET
    type: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    @property
    def child_ids(self) -> tuple[str, ...]:
        """All referenced node ids, structural references flattened."""
        return tuple(child_id for ref in self.children for child_id in iter_child_ids(ref))

    @property
    def has_value(self) -> bool:
        return self.out is not UNSET

    @property
    def is_alias(self) -> bool:
        return self.kind == ALIAS_KIND

    def with_kind(self, kind: str) -> Entry:
        return replace(self, kind=kind)

    def with_children(self, children: tuple[ChildRef, ...]) -> Entry:
        return replace(self, children=children)

    def rewired(self, old_id: str, new_id: str) -> Entry:
        """Return a copy with every reference to ``old_id`` pointing at ``new_id``."""
        if old_id not in self.child_ids:
            return self
        return replace(
            self,
            children=tuple(
                map_child_ids(ref, lambda child_id: new_id if child_id == old_id else child_id)
                for ref in self.children
            ),
        )
