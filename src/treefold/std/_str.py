"""The ``str`` plugin: string literals and text operations."""

import operator
from typing import Any

from treefold._construct import Node
from treefold._eval_engine import Handler
from treefold._registry import KindSpec, Plugin, TraitSpec

from ._num import BOOLEAN, NUMBER, STRING, binary, literal, unary

_BINARY = (STRING, STRING)


def _handlers() -> dict[str, Handler]:
    return {
        "str/literal": literal,
        "str/concat": binary(operator.add),
        "str/upper": unary(str.upper),
        "str/lower": unary(str.lower),
        "str/trim": unary(str.strip),
        "str/len": unary(len),
        "str/includes": binary(operator.contains),
        "str/eq": binary(operator.eq),
        "str/neq": binary(operator.ne),
        "str/lt": binary(operator.lt),
        "str/show": unary(str),
    }


str_plugin = Plugin(
    name="str",
    kinds={
        "str/literal": KindSpec((), STRING),
        "str/concat": KindSpec(_BINARY, STRING),
        "str/upper": KindSpec((STRING,), STRING),
        "str/lower": KindSpec((STRING,), STRING),
        "str/trim": KindSpec((STRING,), STRING),
        "str/len": KindSpec((STRING,), NUMBER),
        "str/includes": KindSpec(_BINARY, BOOLEAN),
        "str/eq": KindSpec(_BINARY, BOOLEAN),
        "str/neq": KindSpec(_BINARY, BOOLEAN),
        "str/lt": KindSpec(_BINARY, BOOLEAN),
        "str/show": KindSpec((STRING,), STRING),
    },
    traits={
        "eq": TraitSpec(BOOLEAN, {STRING: "str/eq"}),
        "neq": TraitSpec(BOOLEAN, {STRING: "str/neq"}),
        "lt": TraitSpec(BOOLEAN, {STRING: "str/lt"}),
        "show": TraitSpec(STRING, {STRING: "str/show"}),
    },
    lifts={str: "str/literal"},
    handlers=_handlers,
)


def concat(a: Any, b: Any) -> Node:
    return Node("str/concat", (a, b))


def upper(a: Any) -> Node:
    return Node("str/upper", (a,))


def lower(a: Any) -> Node:
    return Node("str/lower", (a,))


def trim(a: Any) -> Node:
    return Node("str/trim", (a,))


def str_len(a: Any) -> Node:
    return Node("str/len", (a,))


def includes(haystack: Any, needle: Any) -> Node:
    return Node("str/includes", (haystack, needle))
