"""Kind and trait specifications."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# A type is a string tag ("number"), a record shape ({"x": "number"}), a
# tuple shape (("number", "number")), ANY, or SameAs(i).
type TypeSpec = Any

ANY = "any"
"""Type accepting every argument. As an output it only flows into ANY positions."""


@dataclass(frozen=True, slots=True)
class SameAs:
    """Type equal to the discovered type of argument ``index``.

    In ``KindSpec.inputs`` it constrains an argument to the type of an earlier
    argument. In ``KindSpec.output`` it makes the node's output type follow
    one of its arguments.
    """

    index: int


def normalize_type(type_: TypeSpec) -> TypeSpec:
    """Normalize a type spec so that equal shapes compare equal.

    Lists become tuples and mappings become plain dicts, recursively.
    """
    if isinstance(type_, Mapping):
        return {key: normalize_type(value) for key, value in type_.items()}
    if isinstance(type_, (list, tuple)):
        return tuple(normalize_type(item) for item in type_)
    return type_


def is_record_shape(type_: TypeSpec) -> bool:
    return isinstance(type_, dict)


def is_tuple_shape(type_: TypeSpec) -> bool:
    return isinstance(type_, tuple)


def is_shape(type_: TypeSpec) -> bool:
    """Check if a type describes a nested record or tuple."""
    return is_record_shape(type_) or is_tuple_shape(type_)


def format_type(type_: TypeSpec) -> str:
    """Render a type for error messages and CLI output.

    Example:
        >>> format_type({"x": "number", "y": ("number", "string")})
        '{x: number, y: [number, string]}'

    """
    if is_record_shape(type_):
        fields = ", ".join(f"{key}: {format_type(value)}" for key, value in type_.items())
        return f"{{{fields}}}"
    if is_tuple_shape(type_):
        return "[" + ", ".join(format_type(item) for item in type_) + "]"
    if isinstance(type_, SameAs):
        return f"same-as({type_.index})"
    return str(type_)


@dataclass(frozen=True, slots=True)
class KindSpec:
    """Fixed specification of a node kind.

    Attributes:
        inputs: Expected type of each positional argument.
        output: Type of the value the node produces.
        payload: Whether the node takes one extra trailing argument, a raw
            name or index that is stored in the entry's ``out`` instead of
            becoming a child.

    Example:
        >>> KindSpec(inputs=("number", "number"), output="number")  # num/add
        >>> KindSpec(inputs=({"x": "number", "y": "number"},), output="point")
        >>> KindSpec(inputs=(), output=ANY, payload=True)  # st/get("counter")

    """

    inputs: tuple[TypeSpec, ...] = ()
    output: TypeSpec = ANY
    payload: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", normalize_type(self.inputs))
        object.__setattr__(self, "output", normalize_type(self.output))

    @property
    def arity(self) -> int:
        """Number of child references of an entry of this kind."""
        return len(self.inputs)

    @property
    def argument_count(self) -> int:
        """Number of arguments a construction node of this kind takes."""
        return self.arity + 1 if self.payload else self.arity


@dataclass(frozen=True, slots=True)
class TraitSpec:
    """Specification of a trait: an abstract operation dispatched on operand type.

    Attributes:
        output: Output type shared by every instance of the trait.
        mapping: Operand type tag to concrete kind.

    Example:
        >>> TraitSpec(output="boolean", mapping={"number": "num/eq", "string": "str/eq"})

    """

    output: TypeSpec
    mapping: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "output", normalize_type(self.output))
        object.__setattr__(self, "mapping", dict(self.mapping))
