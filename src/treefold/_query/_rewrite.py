"""Selection and rewriting of IR entries by predicate."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import reduce
from typing import TYPE_CHECKING

from treefold._dirty import Dirty, commit
from treefold._errors import IRError
from treefold._ir import ALIAS_KIND, ALIAS_PREFIX, IR, ChildRef, Entry

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._predicates import Predicate

logger = logging.getLogger(__name__)


def select_where(ir: IR, pred: Predicate) -> frozenset[str]:
    """Get the ids of all entries matching ``pred`` in a single pass."""
    return frozenset(node_id for node_id, entry in ir.entries.items() if pred.test(entry, node_id, ir.entries))


def map_where(ir: IR, pred: Predicate, transform: Callable[[Entry], Entry]) -> IR:
    """Rewrite every matching entry with ``transform``.

    Non-matching entries are carried over unchanged. If the root is
    rewritten the program's output type becomes the new root entry's type.

    Raises:
        MissingChildError: If a transformed entry references a missing id.

    """
    matched = select_where(ir, pred)
    entries = {node_id: transform(entry) if node_id in matched else entry for node_id, entry in ir.entries.items()}
    logger.debug("map_where rewrote %d of %d entries", len(matched), len(entries))
    return commit(Dirty(ir.root_id, entries, ir.counter))


def replace_where(ir: IR, pred: Predicate, new_kind: str) -> IR:
    """Change the kind of every matching entry, keeping children, value and type."""
    return map_where(ir, pred, lambda entry: entry.with_kind(new_kind))


def _splice_refs(
    refs: tuple[ChildRef, ...],
    entries: Mapping[str, Entry],
    matched: frozenset[str],
) -> list[ChildRef]:
    """Replace matched ids in an argument list by their own (spliced) children."""
    result: list[ChildRef] = []
    pending = list(reversed(refs))
    while pending:
        ref = pending.pop()
        if isinstance(ref, str) and ref in matched:
            entry = entries.get(ref)
            if entry is not None:
                pending.extend(reversed(entry.children))
        elif isinstance(ref, str):
            result.append(ref)
        else:
            result.append(_splice_nested(ref, entries, matched))
    return result


def _splice_nested(ref: ChildRef, entries: Mapping[str, Entry], matched: frozenset[str]) -> ChildRef:
    # A structural slot holds exactly one reference, so a matched id there is
    # replaced by the first surviving reference below it.
    if isinstance(ref, str):
        if ref not in matched:
            return ref
        spliced = _splice_refs((ref,), entries, matched)
        if not spliced:
            msg = f"splice_where: leaf '{ref}' in a structural argument cannot be removed"
            raise IRError(msg)
        return spliced[0]
    if isinstance(ref, dict):
        return {key: _splice_nested(value, entries, matched) for key, value in ref.items()}
    return tuple(_splice_nested(item, entries, matched) for item in ref)


def splice_where(ir: IR, pred: Predicate) -> IR:
    """Remove matching entries and reconnect their children to their parents.

    A removed entry's children take its place in the parent's argument list,
    recursively through chains of removed entries. If the root is removed
    the first surviving child becomes the root.

    Raises:
        IRError: If the root is removed and has no surviving children.

    Example:
        >>> # mul(add(3, 4), 5) with add spliced out -> mul(3, 4, 5)
        >>> splice_where(ir, by_kind("num/add"))["e"].children
        ('a', 'b', 'd')

    """
    matched = select_where(ir, pred)
    entries = {
        node_id: entry.with_children(tuple(_splice_refs(entry.children, ir.entries, matched)))
        for node_id, entry in ir.entries.items()
        if node_id not in matched
    }
    root_id = ir.root_id
    if root_id in matched:
        survivors = _splice_refs(ir.root.children, ir.entries, matched)
        first = next((ref for ref in survivors if isinstance(ref, str)), None)
        if first is None:
            msg = f"splice_where: root '{root_id}' was removed and has no surviving child"
            raise IRError(msg)
        root_id = first
    logger.debug("splice_where removed %d entries", len(matched))
    return commit(Dirty(root_id, entries, ir.counter))


def name(ir: IR, alias: str, target_id: str) -> IR:
    """Attach the name ``alias`` to ``target_id``.

    Adds an ``@alias`` entry under the key ``"@<alias>"`` whose only child is
    the target. The counter is not consumed. ``gc`` drops such entries and
    ``gc_preserving_aliases`` keeps them.

    Raises:
        IRError: If ``target_id`` does not exist.

    """
    target = ir.entries.get(target_id)
    if target is None:
        msg = f"name: '{target_id}' does not exist"
        raise IRError(msg)
    entries = {
        **ir.entries,
        ALIAS_PREFIX + alias: Entry(ALIAS_KIND, (target_id,), out=target.out, type=target.type),
    }
    return IR(root_id=ir.root_id, entries=entries, counter=ir.counter)


def pipe(ir: IR, *transforms: Callable[[IR], IR]) -> IR:
    """Apply IR transforms left to right.

    Example:
        >>> pipe(ir, lambda x: replace_where(x, by_kind("num/add"), "num/sub"), lambda x: name(x, "root", x.root_id))

    """
    return reduce(lambda acc, transform: transform(acc), transforms, ir)
