"""Query module: predicates and predicate-driven IR rewrites.

- Predicate primitives: by_kind, by_kind_prefix, is_leaf, has_child_count, by_name
- Combinators: not_, and_, or_ (also ``~``, ``&`` and ``|``)
- Rewrites: select_where, map_where, replace_where, splice_where, name, pipe
"""

from ._predicates import (
    Predicate,
    and_,
    by_kind,
    by_kind_prefix,
    by_name,
    has_child_count,
    is_leaf,
    not_,
    or_,
)
from ._rewrite import map_where, name, pipe, replace_where, select_where, splice_where

__all__ = [
    "Predicate",
    "and_",
    "by_kind",
    "by_kind_prefix",
    "by_name",
    "has_child_count",
    "is_leaf",
    "map_where",
    "name",
    "not_",
    "or_",
    "pipe",
    "replace_where",
    "select_where",
    "splice_where",
]
