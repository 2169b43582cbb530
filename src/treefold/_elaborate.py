"""Elaborator: validates a construction tree and flattens it into an IR.

Elaboration walks the tree depth-first, children before parents, and gives
every node it emits the next id from a single counter. Along the way it

- lifts raw values into literal entries using the registry's lift rules,
- checks every argument against the kind's declared input type,
- resolves trait applications to a concrete kind by operand type,
- walks into records and tuples at structural argument positions, and
- stores the trailing name or index of payload kinds in the entry's ``out``.

``core/access`` is typed here rather than by its spec: its output is the
type of the selected field of its operand's record or tuple type.

The walk is written as nested generators driven by an explicit stack, so
arbitrarily deep trees do not exhaust the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Mapping
from typing import TYPE_CHECKING, Any

from ._construct import Node
from ._errors import (
    ArityError,
    ElaborationError,
    FieldAccessError,
    LiftError,
    PayloadError,
    TraitOperandMismatchError,
    TraitResolutionError,
    TypeMismatchError,
    UnknownKindError,
)
from ._ir import ACCESS_KIND, FIRST_ID, IR, UNSET, ChildRef, Entry, increment_id
from ._registry import ANY, SameAs, format_type, is_record_shape, is_tuple_shape

if TYPE_CHECKING:
    from ._registry import KindSpec, Registry, TraitSpec, TypeSpec

logger = logging.getLogger(__name__)

# A visit yields sub-visits and returns (child reference, discovered type).
type _Visit = Generator[_Visit, tuple[ChildRef, Any], tuple[ChildRef, Any]]


def _drive(visit: _Visit) -> tuple[ChildRef, Any]:
    """Run a visit and all the sub-visits it requests without recursion."""
    stack: list[_Visit] = [visit]
    value: Any = None
    while True:
        try:
            request = stack[-1].send(value)
        except StopIteration as stop:
            stack.pop()
            if not stack:
                return stop.value
            value = stop.value
            continue
        stack.append(request)
        value = None


def _accepts(expected: TypeSpec | None, actual: TypeSpec) -> bool:
    return expected is None or expected == ANY or expected == actual


def _resolve(type_: TypeSpec, discovered: list[TypeSpec]) -> TypeSpec:
    """Substitute ``SameAs`` references with the types discovered so far."""
    if isinstance(type_, SameAs):
        if type_.index >= len(discovered):
            return ANY
        return discovered[type_.index]
    if is_record_shape(type_):
        return {key: _resolve(value, discovered) for key, value in type_.items()}
    if is_tuple_shape(type_):
        return tuple(_resolve(item, discovered) for item in type_)
    return type_


def _project(kind: str, type_: TypeSpec, key: str | int) -> TypeSpec:
    """Get the type of field ``key`` of a record or tuple type."""
    if type_ == ANY:
        return ANY
    if is_record_shape(type_) and key in type_:
        return type_[key]
    if is_tuple_shape(type_) and isinstance(key, int) and 0 <= key < len(type_):
        return type_[key]
    raise FieldAccessError(kind, key, format_type(type_))


def _describe(value: Any) -> str:
    if isinstance(value, Mapping):
        return "{" + ", ".join(str(key) for key in value) + "}"
    if isinstance(value, (list, tuple)):
        return f"tuple of {len(value)}"
    return type(value).__name__


class _Elaborator:
    def __init__(self, registry: Registry) -> None:
        self.registry = registry
        self.entries: dict[str, Entry] = {}
        self.counter = FIRST_ID

    def emit(self, entry: Entry) -> str:
        node_id = self.counter
        self.counter = increment_id(self.counter)
        self.entries[node_id] = entry
        return node_id

    def visit_node(self, tree: Node) -> _Visit:
        if tree.kind in self.registry.traits:
            return (yield self.visit_trait(tree, self.registry.traits[tree.kind]))
        spec = self.registry.kind_spec(tree.kind)
        if spec is None:
            raise UnknownKindError(tree.kind)
        return (yield self.visit_kind(tree, spec))

    def visit_kind(self, tree: Node, spec: KindSpec) -> _Visit:
        if len(tree.args) != spec.argument_count:
            raise ArityError(tree.kind, spec.argument_count, len(tree.args))
        args = tree.args
        payload: Any = UNSET
        if spec.payload:
            args, payload = args[:-1], args[-1]
            if isinstance(payload, bool) or not isinstance(payload, (str, int)):
                raise PayloadError(tree.kind, payload)
        children: list[ChildRef] = []
        discovered: list[TypeSpec] = []
        for index, (arg, expected) in enumerate(zip(args, spec.inputs, strict=True)):
            ref, type_ = yield self.visit_arg(tree.kind, str(index), arg, _resolve(expected, discovered))
            children.append(ref)
            discovered.append(type_)
        if tree.kind == ACCESS_KIND:
            output = _project(tree.kind, discovered[0], payload)
        else:
            output = _resolve(spec.output, discovered)
        node_id = self.emit(Entry(tree.kind, tuple(children), out=payload, type=output))
        return node_id, output

    def visit_trait(self, tree: Node, trait: TraitSpec) -> _Visit:
        operands = len(tree.args)
        if operands not in (1, 2):
            raise ArityError(tree.kind, 2, operands)
        first, first_type = yield self.visit_arg(tree.kind, "0", tree.args[0], None)
        children: list[ChildRef] = [first]
        discovered: list[TypeSpec] = [first_type]
        if operands == 2:  # noqa: PLR2004
            second, second_type = yield self.visit_arg(tree.kind, "1", tree.args[1], None)
            if second_type != first_type:
                raise TraitOperandMismatchError(tree.kind, format_type(first_type), format_type(second_type))
            children.append(second)
            discovered.append(second_type)

        target = trait.mapping.get(first_type) if isinstance(first_type, str) else None
        if target is None:
            raise TraitResolutionError(tree.kind, format_type(first_type))
        target_spec = self.registry.kinds[target]
        if target_spec.arity != operands:
            raise ArityError(target, target_spec.arity, operands)
        for index, expected in enumerate(target_spec.inputs):
            resolved = _resolve(expected, discovered[:index])
            if not _accepts(resolved, discovered[index]):
                raise TypeMismatchError(target, str(index), format_type(resolved), format_type(discovered[index]))

        output = _resolve(trait.output, discovered)
        logger.debug("Resolved trait '%s' on %s to '%s'", tree.kind, format_type(first_type), target)
        node_id = self.emit(Entry(target, tuple(children), type=output))
        return node_id, output

    def visit_arg(self, kind: str, position: str, arg: Any, expected: TypeSpec | None) -> _Visit:
        if isinstance(arg, Node):
            node_id, type_ = yield self.visit_node(arg)
            if not _accepts(expected, type_):
                raise TypeMismatchError(kind, position, format_type(expected), format_type(type_))
            return node_id, type_

        if is_record_shape(expected) or (expected in (None, ANY) and isinstance(arg, Mapping)):
            return (yield self.visit_record(kind, position, arg, expected))
        if is_tuple_shape(expected) or (expected in (None, ANY) and isinstance(arg, (list, tuple))):
            return (yield self.visit_tuple(kind, position, arg, expected))

        literal_kind = self.registry.lift_kind(arg)
        if literal_kind is None:
            raise LiftError(kind, position, arg)
        tag = self.registry.kinds[literal_kind].output
        if not _accepts(expected, tag):
            raise TypeMismatchError(kind, position, format_type(expected), format_type(tag))
        node_id = self.emit(Entry(literal_kind, (), out=arg, type=tag))
        return node_id, tag

    def visit_record(self, kind: str, position: str, arg: Any, expected: TypeSpec | None) -> _Visit:
        if not isinstance(arg, Mapping):
            raise TypeMismatchError(kind, position, format_type(expected), _describe(arg))
        if is_record_shape(expected):
            if set(arg) != set(expected):
                raise TypeMismatchError(kind, position, format_type(expected), _describe(arg))
            fields = expected
        else:
            fields = dict.fromkeys(arg)
        refs: dict[str, ChildRef] = {}
        types: dict[str, TypeSpec] = {}
        for key, field_type in fields.items():
            refs[key], types[key] = yield self.visit_arg(kind, f"{position}.{key}", arg[key], field_type)
        return refs, types

    def visit_tuple(self, kind: str, position: str, arg: Any, expected: TypeSpec | None) -> _Visit:
        if not isinstance(arg, (list, tuple)):
            raise TypeMismatchError(kind, position, format_type(expected), _describe(arg))
        if is_tuple_shape(expected):
            if len(arg) != len(expected):
                raise TypeMismatchError(kind, position, format_type(expected), _describe(arg))
            item_types = expected
        else:
            item_types = (None,) * len(arg)
        refs: list[ChildRef] = []
        types: list[TypeSpec] = []
        for index, (item, item_type) in enumerate(zip(arg, item_types, strict=True)):
            ref, type_ = yield self.visit_arg(kind, f"{position}.{index}", item, item_type)
            refs.append(ref)
            types.append(type_)
        return tuple(refs), tuple(types)


def elaborate(tree: Node, registry: Registry) -> IR:
    """Validate a construction tree and flatten it into an IR.

    The result depends only on ``tree`` and ``registry``; elaborating the
    same tree twice yields equal IRs.

    Args:
        tree: Root node of the construction tree.
        registry: Composed registry to validate against.

    Returns:
        The flat IR. Its counter is the next unused id.

    Raises:
        UnknownKindError: If a kind is neither registered nor a trait.
        ArityError: If a node has the wrong number of arguments.
        TypeMismatchError: If an argument's type differs from the expected type.
        LiftError: If a raw value has no lift rule.
        TraitOperandMismatchError: If trait operands have differing types.
        TraitResolutionError: If a trait has no instance for the operand type.
        PayloadError: If a payload argument is not a name or index.
        FieldAccessError: If ``core/access`` selects a field its operand lacks.

    Example:
        >>> ir = elaborate(node("num/add", 3, 4), Registry.compose(num_plugin))
        >>> ir.root_id, ir.counter
        ('c', 'd')
        >>> ir["a"].out, ir["c"].kind
        (3, 'num/add')

    """
    if not isinstance(tree, Node):
        msg = f"Cannot elaborate {type(tree).__name__}: the root of a construction tree must be a Node"
        raise ElaborationError(msg)
    elaborator = _Elaborator(registry)
    root_id, _ = _drive(elaborator.visit_node(tree))
    logger.debug("Elaborated '%s' into %d entries (root '%s')", tree.kind, len(elaborator.entries), root_id)
    return IR(root_id=root_id, entries=elaborator.entries, counter=elaborator.counter)
