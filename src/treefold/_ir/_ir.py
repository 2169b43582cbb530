"""The flat, validated program representation."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from ._entry import Entry
from ._ids import FIRST_ID, id_sort_key


@dataclass(frozen=True, slots=True)
class IR:
    """An elaborated program: a root id and a flat map of entries.

    Produced by ``elaborate`` or by committing a dirty working copy. Every
    child reference resolves to a present entry, so an IR is always safe to
    evaluate. Transforms never mutate an IR; they return a new one.

    Attributes:
        root_id: Id of the node whose value is the program's result.
        entries: Node id to entry. Read-only.
        counter: Next unused id. Advances only when new ids are handed out.

    """

    root_id: str
    entries: Mapping[str, Entry]
    counter: str = FIRST_ID

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @property
    def root(self) -> Entry:
        return self.entries[self.root_id]

    @property
    def output_type(self) -> Any:
        """Type of the value the program produces."""
        return self.root.type

    def ordered_ids(self) -> list[str]:
        """All entry ids in creation order."""
        return sorted(self.entries, key=id_sort_key)

    def __getitem__(self, node_id: str) -> Entry:
        return self.entries[node_id]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
