"""The ``bool`` plugin: boolean literals and connectives."""

import operator
from typing import Any

from treefold._construct import Node
from treefold._eval_engine import Handler, HandlerCoroutine
from treefold._ir import Entry
from treefold._registry import KindSpec, Plugin, TraitSpec

from ._num import BOOLEAN, STRING, binary, literal, unary

_BINARY = (BOOLEAN, BOOLEAN)


# The connectives only request the right operand when the left one does not
# decide the result.
def _and(entry: Entry) -> HandlerCoroutine:
    if not (yield 0):
        return False
    return bool((yield 1))


def _or(entry: Entry) -> HandlerCoroutine:
    if (yield 0):
        return True
    return bool((yield 1))


def _implies(entry: Entry) -> HandlerCoroutine:
    if not (yield 0):
        return True
    return bool((yield 1))


def _show(value: bool) -> str:  # noqa: FBT001
    return "true" if value else "false"


def _handlers() -> dict[str, Handler]:
    return {
        "bool/literal": literal,
        "bool/and": _and,
        "bool/or": _or,
        "bool/not": unary(operator.not_),
        "bool/implies": _implies,
        "bool/eq": binary(operator.eq),
        "bool/neq": binary(operator.ne),
        "bool/show": unary(_show),
    }


bool_plugin = Plugin(
    name="bool",
    kinds={
        "bool/literal": KindSpec((), BOOLEAN),
        "bool/and": KindSpec(_BINARY, BOOLEAN),
        "bool/or": KindSpec(_BINARY, BOOLEAN),
        "bool/not": KindSpec((BOOLEAN,), BOOLEAN),
        "bool/implies": KindSpec(_BINARY, BOOLEAN),
        "bool/eq": KindSpec(_BINARY, BOOLEAN),
        "bool/neq": KindSpec(_BINARY, BOOLEAN),
        "bool/show": KindSpec((BOOLEAN,), STRING),
    },
    traits={
        "eq": TraitSpec(BOOLEAN, {BOOLEAN: "bool/eq"}),
        "neq": TraitSpec(BOOLEAN, {BOOLEAN: "bool/neq"}),
        "show": TraitSpec(STRING, {BOOLEAN: "bool/show"}),
    },
    lifts={bool: "bool/literal"},
    handlers=_handlers,
)


def and_(a: Any, b: Any) -> Node:
    return Node("bool/and", (a, b))


def or_(a: Any, b: Any) -> Node:
    return Node("bool/or", (a, b))


def not_(a: Any) -> Node:
    return Node("bool/not", (a,))


def implies(a: Any, b: Any) -> Node:
    return Node("bool/implies", (a, b))
