"""Reading construction trees and reading/writing IR documents.

Construction trees are written as TOML or JSON under a top-level ``expr``
key. A table with a string ``kind`` key (and optionally an ``args`` array,
and nothing else) is a call node; any other table is a record and any
array is a tuple:

    [expr]
    kind = "num/add"
    args = [3, { kind = "num/neg", args = [4] }]

IR documents hold the root id, the counter and the entry map, and can be
loaded back into a validated IR.
"""

from __future__ import annotations

import logging
import tomllib
from enum import StrEnum
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._construct import Node
from ._dirty import Dirty, commit
from ._errors import DocumentError
from ._ir import IR, UNSET, ChildRef, Entry
from ._registry import normalize_type

logger = logging.getLogger(__name__)

_NODE_KEYS = frozenset({"kind", "args"})


class DocumentFormat(StrEnum):
    TOML = "toml"
    JSON = "json"

    @classmethod
    def from_path(cls, path: Path) -> DocumentFormat:
        """Infer the format from a file suffix.

        Raises:
            DocumentError: If the suffix is neither ``.toml`` nor ``.json``.

        """
        suffix = path.suffix.lower().lstrip(".")
        try:
            return cls(suffix)
        except ValueError:
            msg = f"Unsupported document type '{path.suffix}' for {path} (expected .toml or .json)"
            raise DocumentError(msg) from None


class ExprDocument(BaseModel):
    """A file holding one construction tree."""

    model_config = ConfigDict(extra="forbid")

    expr: Any


class EntryDocument(BaseModel):
    """One IR entry. ``out`` is omitted for entries without a literal value."""

    model_config = ConfigDict(extra="forbid")

    kind: str
    children: list[Any] = Field(default_factory=list)
    out: Any = None
    type: Any = None


class IRDocument(BaseModel):
    """A serialized IR."""

    model_config = ConfigDict(extra="forbid")

    root: str
    counter: str
    entries: dict[str, EntryDocument]


# =============================================================================
# Construction trees
# =============================================================================


def tree_from_data(data: Any) -> Any:
    """Convert parsed document data into a construction tree.

    Example:
        >>> tree_from_data({"kind": "num/add", "args": [3, 4]})
        Node(kind='num/add', args=(3, 4))

    """
    if isinstance(data, dict):
        if isinstance(data.get("kind"), str) and set(data) <= _NODE_KEYS:
            args = data.get("args", [])
            if not isinstance(args, list):
                msg = f"'args' of node '{data['kind']}' must be an array, got {type(args).__name__}"
                raise DocumentError(msg)
            return Node(data["kind"], tuple(tree_from_data(arg) for arg in args))
        return {key: tree_from_data(value) for key, value in data.items()}
    if isinstance(data, list):
        return tuple(tree_from_data(item) for item in data)
    return data


def _read(path: Path) -> tuple[DocumentFormat, bytes]:
    fmt = DocumentFormat.from_path(path)
    try:
        return fmt, path.read_bytes()
    except OSError as e:
        msg = f"Cannot read {path}: {e}"
        raise DocumentError(msg) from e


def _validate[M: BaseModel](model: type[M], fmt: DocumentFormat, raw: bytes, path: Path) -> M:
    try:
        if fmt == DocumentFormat.TOML:
            return model.model_validate(tomllib.loads(raw.decode()))
        return model.model_validate_json(raw)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise DocumentError(msg) from e
    except ValidationError as e:
        msg = f"Invalid document {path}: {e}"
        raise DocumentError(msg) from e


def load_tree(path: Path | str) -> Node:
    """Load a construction tree from a TOML or JSON file.

    Raises:
        DocumentError: If the file cannot be read or parsed, or its ``expr``
            is not a call node.

    """
    path = Path(path)
    fmt, raw = _read(path)
    document = _validate(ExprDocument, fmt, raw, path)
    tree = tree_from_data(document.expr)
    if not isinstance(tree, Node):
        msg = f"'expr' in {path} must be a node table with a 'kind' key"
        raise DocumentError(msg)
    logger.debug("Loaded construction tree '%s' from %s", tree.kind, path)
    return tree


# =============================================================================
# IR documents
# =============================================================================


def _ref_to_data(ref: ChildRef) -> Any:
    if isinstance(ref, str):
        return ref
    if isinstance(ref, dict):
        return {key: _ref_to_data(value) for key, value in ref.items()}
    return [_ref_to_data(item) for item in ref]


def _ref_from_data(data: Any, node_id: str) -> ChildRef:
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        return {key: _ref_from_data(value, node_id) for key, value in data.items()}
    if isinstance(data, list):
        return tuple(_ref_from_data(item, node_id) for item in data)
    msg = f"Entry '{node_id}' has an invalid child reference {data!r}"
    raise DocumentError(msg)


def _type_to_data(type_: Any) -> Any:
    if isinstance(type_, tuple):
        return [_type_to_data(item) for item in type_]
    if isinstance(type_, dict):
        return {key: _type_to_data(value) for key, value in type_.items()}
    return type_


def _entry_to_document(entry: Entry) -> EntryDocument:
    return EntryDocument(
        kind=entry.kind,
        children=[_ref_to_data(ref) for ref in entry.children],
        out=entry.out if entry.has_value else None,
        type=_type_to_data(entry.type),
    )


def ir_to_document(ir: IR) -> IRDocument:
    return IRDocument(
        root=ir.root_id,
        counter=ir.counter,
        entries={node_id: _entry_to_document(ir[node_id]) for node_id in ir.ordered_ids()},
    )


def document_to_ir(document: IRDocument) -> IR:
    """Rebuild a validated IR from a document.

    Raises:
        MissingRootError: If the root has no entry.
        MissingChildError: If an entry references a missing id.

    """
    entries = {
        node_id: Entry(
            kind=doc.kind,
            children=tuple(_ref_from_data(ref, node_id) for ref in doc.children),
            out=UNSET if doc.out is None else doc.out,
            type=normalize_type(doc.type),
        )
        for node_id, doc in document.entries.items()
    }
    return commit(Dirty(document.root, entries, document.counter))


def dump_ir(ir: IR, path: Path | str, fmt: DocumentFormat | None = None) -> None:
    """Write an IR document as TOML or JSON.

    The format defaults to the one implied by the file suffix.
    """
    path = Path(path)
    fmt = fmt or DocumentFormat.from_path(path)
    document = ir_to_document(ir)
    if fmt == DocumentFormat.TOML:
        with path.open("wb") as f:
            tomli_w.dump(document.model_dump(mode="python", exclude_none=True), f)
    else:
        path.write_text(document.model_dump_json(indent=2, exclude_none=True) + "\n")
    logger.debug("Exported IR with %d entries to %s", len(ir), path)


def load_ir(path: Path | str) -> IR:
    """Load an IR document and validate it through ``commit``.

    Raises:
        DocumentError: If the file cannot be read or parsed.
        CommitError: If the entries do not form a valid IR.

    """
    path = Path(path)
    fmt, raw = _read(path)
    document = _validate(IRDocument, fmt, raw, path)
    ir = document_to_ir(document)
    logger.debug("Loaded IR with %d entries from %s", len(ir), path)
    return ir
