"""Intermediate Representation (IR) module for treefold.

The IR is the flat form every later stage consumes: a root id plus a map
from short sequential ids to entries. Nested construction trees become IRs
through the elaborator; edited IRs come back through ``commit``.

Key types:
- Entry: one node (kind, child references, optional literal, type)
- IR: root id, entry map and id counter
- increment_id: base-26 id sequence shared by elaboration and edits
"""

from ._entry import ACCESS_KIND, ALIAS_KIND, ALIAS_PREFIX, UNSET, ChildRef, Entry, iter_child_ids, map_child_ids
from ._ids import FIRST_ID, id_sort_key, increment_id
from ._ir import IR

__all__ = [
    "ACCESS_KIND",
    "ALIAS_KIND",
    "ALIAS_PREFIX",
    "FIRST_ID",
    "IR",
    "UNSET",
    "ChildRef",
    "Entry",
    "id_sort_key",
    "increment_id",
    "iter_child_ids",
    "map_child_ids",
]
