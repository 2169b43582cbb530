"""Registry module for treefold.

The registry is the static table the elaborator validates against. It is
composed from independently authored plugins:

- KindSpec: expected argument types and output type of a concrete kind
- TraitSpec: abstract operation resolved to a concrete kind by operand type
- Plugin: a namespaced kind set with lift rules and default handlers
- Registry: the merged, conflict-checked lookup tables
"""

from ._plugin import Plugin, compose_handlers
from ._registry import Registry
from ._spec import (
    ANY,
    KindSpec,
    SameAs,
    TraitSpec,
    TypeSpec,
    format_type,
    is_record_shape,
    is_shape,
    is_tuple_shape,
    normalize_type,
)

__all__ = [
    "ANY",
    "KindSpec",
    "Plugin",
    "Registry",
    "SameAs",
    "TraitSpec",
    "TypeSpec",
    "compose_handlers",
    "format_type",
    "is_record_shape",
    "is_shape",
    "is_tuple_shape",
    "normalize_type",
]
