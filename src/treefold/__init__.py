"""Embedded expression trees compiled to a flat IR and folded by plugin handlers."""

__all__ = [
    "ACCESS_KIND",
    "ALIAS_KIND",
    "ANY",
    "DEFAULT_VOLATILE_KINDS",
    "IR",
    "UNSET",
    "And",
    "ArityError",
    "ByKind",
    "ByKindPrefix",
    "ByName",
    "CellError",
    "ChildRef",
    "CommitError",
    "CyclicIRError",
    "Dirty",
    "DirtyError",
    "DocumentError",
    "DocumentFormat",
    "ElaborationError",
    "Entry",
    "EvalChild",
    "FieldAccessError",
    "FoldError",
    "GuardFailedError",
    "Handler",
    "HandlerCoroutine",
    "HasChildCount",
    "IRError",
    "IsLeaf",
    "KindSpec",
    "LiftError",
    "MemoScope",
    "MissingChildError",
    "MissingRootError",
    "Node",
    "Not",
    "Or",
    "PayloadError",
    "Perform",
    "Plugin",
    "Predicate",
    "Registry",
    "RegistryConflictError",
    "RegistryError",
    "SameAs",
    "TraitOperandMismatchError",
    "TraitResolutionError",
    "TraitSpec",
    "TreefoldError",
    "TypeMismatchError",
    "TypeSpec",
    "UnknownHandlerError",
    "UnknownKindError",
    "add_entry",
    "and_",
    "by_kind",
    "by_kind_prefix",
    "by_name",
    "commit",
    "compose_handlers",
    "constructors",
    "dirty",
    "dump_ir",
    "elaborate",
    "fold",
    "gc",
    "gc_preserving_aliases",
    "has_child_count",
    "is_leaf",
    "is_node",
    "live_entries",
    "load_ir",
    "load_tree",
    "map_where",
    "name",
    "next_id",
    "node",
    "not_",
    "or_",
    "pipe",
    "reachable",
    "remove_entry",
    "replace_where",
    "rewire_children",
    "select_where",
    "set_root",
    "splice_where",
    "swap_entry",
    "transaction",
    "wrap_by_id",
]

from ._construct import Node, constructors, is_node, node
from ._dirty import (
    Dirty,
    add_entry,
    commit,
    dirty,
    gc,
    gc_preserving_aliases,
    next_id,
    remove_entry,
    rewire_children,
    set_root,
    swap_entry,
    wrap_by_id,
)
from ._elaborate import elaborate
from ._errors import (
    ArityError,
    CellError,
    CommitError,
    CyclicIRError,
    DirtyError,
    DocumentError,
    ElaborationError,
    FieldAccessError,
    FoldError,
    GuardFailedError,
    IRError,
    LiftError,
    MissingChildError,
    MissingRootError,
    PayloadError,
    RegistryConflictError,
    RegistryError,
    TraitOperandMismatchError,
    TraitResolutionError,
    TreefoldError,
    TypeMismatchError,
    UnknownHandlerError,
    UnknownKindError,
)
from ._eval_engine import (
    DEFAULT_VOLATILE_KINDS,
    EvalChild,
    Handler,
    HandlerCoroutine,
    MemoScope,
    Perform,
    fold,
    transaction,
)
from ._graph import live_entries, reachable
from ._io import DocumentFormat, dump_ir, load_ir, load_tree
from ._ir import ACCESS_KIND, ALIAS_KIND, IR, UNSET, ChildRef, Entry
from ._query import (
    Predicate,
    and_,
    by_kind,
    by_kind_prefix,
    by_name,
    has_child_count,
    is_leaf,
    map_where,
    name,
    not_,
    or_,
    pipe,
    replace_where,
    select_where,
    splice_where,
)
from ._query._predicates import And, ByKind, ByKindPrefix, ByName, HasChildCount, IsLeaf, Not, Or
from ._registry import ANY, KindSpec, Plugin, Registry, SameAs, TraitSpec, TypeSpec, compose_handlers
