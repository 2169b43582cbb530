"""The ``num`` plugin: numeric literals, arithmetic and comparison."""

import operator
from collections.abc import Callable
from typing import Any

from treefold._construct import Node
from treefold._eval_engine import Handler, HandlerCoroutine
from treefold._ir import Entry
from treefold._registry import KindSpec, Plugin, TraitSpec

NUMBER = "number"
BOOLEAN = "boolean"
STRING = "string"

_BINARY = (NUMBER, NUMBER)


def literal(entry: Entry) -> Any:
    return entry.out


def unary(op: Callable[[Any], Any]) -> Handler:
    """Build a handler applying ``op`` to child 0."""

    def handler(entry: Entry) -> HandlerCoroutine:
        return op((yield 0))

    return handler


def binary(op: Callable[[Any, Any], Any]) -> Handler:
    """Build a handler applying ``op`` to children 0 and 1, evaluated in that order."""

    def handler(entry: Entry) -> HandlerCoroutine:
        left = yield 0
        right = yield 1
        return op(left, right)

    return handler


def _show(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _handlers() -> dict[str, Handler]:
    return {
        "num/literal": literal,
        "num/add": binary(operator.add),
        "num/sub": binary(operator.sub),
        "num/mul": binary(operator.mul),
        "num/div": binary(operator.truediv),
        "num/mod": binary(operator.mod),
        "num/neg": unary(operator.neg),
        "num/abs": unary(abs),
        "num/min": binary(min),
        "num/max": binary(max),
        "num/eq": binary(operator.eq),
        "num/neq": binary(operator.ne),
        "num/lt": binary(operator.lt),
        "num/le": binary(operator.le),
        "num/gt": binary(operator.gt),
        "num/ge": binary(operator.ge),
        "num/show": unary(_show),
    }


num_plugin = Plugin(
    name="num",
    kinds={
        "num/literal": KindSpec((), NUMBER),
        "num/add": KindSpec(_BINARY, NUMBER),
        "num/sub": KindSpec(_BINARY, NUMBER),
        "num/mul": KindSpec(_BINARY, NUMBER),
        "num/div": KindSpec(_BINARY, NUMBER),
        "num/mod": KindSpec(_BINARY, NUMBER),
        "num/neg": KindSpec((NUMBER,), NUMBER),
        "num/abs": KindSpec((NUMBER,), NUMBER),
        "num/min": KindSpec(_BINARY, NUMBER),
        "num/max": KindSpec(_BINARY, NUMBER),
        "num/eq": KindSpec(_BINARY, BOOLEAN),
        "num/neq": KindSpec(_BINARY, BOOLEAN),
        "num/lt": KindSpec(_BINARY, BOOLEAN),
        "num/le": KindSpec(_BINARY, BOOLEAN),
        "num/gt": KindSpec(_BINARY, BOOLEAN),
        "num/ge": KindSpec(_BINARY, BOOLEAN),
        "num/show": KindSpec((NUMBER,), STRING),
    },
    traits={
        "eq": TraitSpec(BOOLEAN, {NUMBER: "num/eq"}),
        "neq": TraitSpec(BOOLEAN, {NUMBER: "num/neq"}),
        "lt": TraitSpec(BOOLEAN, {NUMBER: "num/lt"}),
        "show": TraitSpec(STRING, {NUMBER: "num/show"}),
    },
    lifts={int: "num/literal", float: "num/literal"},
    handlers=_handlers,
)


def add(a: Any, b: Any) -> Node:
    return Node("num/add", (a, b))


def sub(a: Any, b: Any) -> Node:
    return Node("num/sub", (a, b))


def mul(a: Any, b: Any) -> Node:
    return Node("num/mul", (a, b))


def div(a: Any, b: Any) -> Node:
    return Node("num/div", (a, b))


def mod(a: Any, b: Any) -> Node:
    return Node("num/mod", (a, b))


def neg(a: Any) -> Node:
    return Node("num/neg", (a,))


def num_abs(a: Any) -> Node:
    return Node("num/abs", (a,))


def num_min(a: Any, b: Any) -> Node:
    return Node("num/min", (a, b))


def num_max(a: Any, b: Any) -> Node:
    return Node("num/max", (a, b))


def le(a: Any, b: Any) -> Node:
    return Node("num/le", (a, b))


def gt(a: Any, b: Any) -> Node:
    return Node("num/gt", (a, b))


def ge(a: Any, b: Any) -> Node:
    return Node("num/ge", (a, b))
