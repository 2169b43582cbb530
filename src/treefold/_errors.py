"""Exception hierarchy for treefold.

Every failure raised by the library derives from ``TreefoldError``. The
subclasses mirror the pipeline stages:

- RegistryError: plugin sets that cannot be composed
- ElaborationError: construction trees rejected before any evaluation
- IRError: invalid edits and failed commits on the flat representation
- FoldError: failures while evaluating a validated IR
- DocumentError: input files that cannot be turned into trees or IRs

``GuardFailedError`` and ``CellError`` are raised by standard handlers
while folding, so they reach the parent handler like any other handler
failure. The CLI's ``ConfigError`` derives from ``TreefoldError`` too.
"""

from __future__ import annotations

from typing import Any


class TreefoldError(Exception):
    """Base class for all treefold errors."""


# --- Registry ----------------------------------------------------------------


class RegistryError(TreefoldError):
    """A plugin set is malformed or cannot provide what was asked of it."""


class RegistryConflictError(RegistryError):
    """Two plugins define overlapping names."""


# --- Elaboration -------------------------------------------------------------


class ElaborationError(TreefoldError):
    """A construction tree was rejected by the elaborator."""


class UnknownKindError(ElaborationError):
    """The kind is neither a registered kind nor a trait."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unknown kind '{kind}'")


class ArityError(ElaborationError):
    """A node was given the wrong number of arguments."""

    def __init__(self, kind: str, expected: int, actual: int) -> None:
        self.kind = kind
        self.expected = expected
        self.actual = actual
        super().__init__(f"{kind}: expected {expected} argument(s), got {actual}")


class TypeMismatchError(ElaborationError):
    """An argument's type does not match what the registry expects."""

    def __init__(self, kind: str, position: str, expected: str, actual: str) -> None:
        self.kind = kind
        self.position = position
        self.expected = expected
        self.actual = actual
        super().__init__(f"{kind}: expected {expected} for arg {position}, got {actual}")


class LiftError(ElaborationError):
    """A raw value has no lift rule."""

    def __init__(self, kind: str, position: str, value: Any) -> None:
        self.kind = kind
        self.position = position
        self.value = value
        type_name = type(value).__name__
        super().__init__(f"{kind}: cannot lift value of type '{type_name}' for arg {position} ({value!r})")


class TraitResolutionError(ElaborationError):
    """A trait has no instance for the discovered operand type."""

    def __init__(self, trait: str, type_: str) -> None:
        self.trait = trait
        self.type = type_
        super().__init__(f"No trait '{trait}' instance for type {type_}")


class TraitOperandMismatchError(ElaborationError):
    """The operands of a binary trait have differing types."""

    def __init__(self, trait: str, left: str, right: str) -> None:
        self.trait = trait
        self.left = left
        self.right = right
        super().__init__(f"Trait '{trait}': operands have differing types ({left} vs {right})")


class PayloadError(ElaborationError):
    """A payload argument is not a raw name or index."""

    def __init__(self, kind: str, value: Any) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"{kind}: expected a name or index as last argument, got {value!r}")


class FieldAccessError(ElaborationError):
    """A field or index is read from a type that does not have it."""

    def __init__(self, kind: str, key: str | int, type_: str) -> None:
        self.kind = kind
        self.key = key
        self.type = type_
        super().__init__(f"{kind}: type {type_} has no field {key!r}")


# --- IR ----------------------------------------------------------------------


class IRError(TreefoldError):
    """An invalid operation on the flat representation."""


class DirtyError(IRError):
    """An edit on a dirty working copy referenced the wrong id."""


class CommitError(IRError):
    """A dirty working copy failed validation."""


class MissingRootError(CommitError):
    """The root id is not present in the entry map."""

    def __init__(self, root_id: str) -> None:
        self.root_id = root_id
        super().__init__(f"commit: missing root '{root_id}'")


class MissingChildError(CommitError):
    """An entry references a child id that is not present in the entry map."""

    def __init__(self, node_id: str, child_id: str) -> None:
        self.node_id = node_id
        self.child_id = child_id
        super().__init__(f"commit: missing child '{child_id}' referenced by '{node_id}'")


# --- Evaluation --------------------------------------------------------------


class FoldError(TreefoldError):
    """Evaluation of an IR failed inside the evaluator itself."""


class UnknownHandlerError(FoldError):
    """No handler is registered for a node kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"fold: no handler for '{kind}'")


class CyclicIRError(FoldError):
    """A node was reached again while its own evaluation was still running."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"fold: cycle through '{node_id}'")


# --- Evaluation failures raised by handlers ---------------------------------


class GuardFailedError(TreefoldError):
    """A ``core/guard`` node found its condition false."""


class CellError(TreefoldError):
    """A state cell was read or updated before ``st/let`` bound it."""

    def __init__(self, kind: str, cell: str) -> None:
        self.kind = kind
        self.cell = cell
        super().__init__(f"{kind}: cell '{cell}' is not bound")


# --- Documents ---------------------------------------------------------------


class DocumentError(TreefoldError):
    """An input document could not be read."""
