"""Tests for loading construction trees and reading/writing IR documents."""

import json
import tomllib
from pathlib import Path

import pytest

from treefold._construct import Node
from treefold._dirty import Dirty, commit
from treefold._elaborate import elaborate
from treefold._errors import DocumentError, MissingChildError
from treefold._io import (
    DocumentFormat,
    IRDocument,
    dump_ir,
    ir_to_document,
    load_ir,
    load_tree,
    tree_from_data,
)
from treefold._ir import UNSET, Entry
from treefold._query import name
from treefold.std import add, do, neg, std_registry


class TestTreeFromData:
    def test_node_table(self) -> None:
        data = {"kind": "num/add", "args": [3, {"kind": "num/neg", "args": [4]}]}

        assert tree_from_data(data) == add(3, neg(4))

    def test_node_without_args(self) -> None:
        assert tree_from_data({"kind": "t/const"}) == Node("t/const", ())

    def test_record_and_tuple(self) -> None:
        data = {"kind": "core/do", "args": [{"x": 1, "kind": 2}, [1, "a"]]}

        assert tree_from_data(data) == Node("core/do", ({"x": 1, "kind": 2}, (1, "a")))

    def test_table_with_extra_keys_is_a_record(self) -> None:
        data = {"kind": "num/add", "args": [], "note": "x"}

        assert tree_from_data(data) == {"kind": "num/add", "args": (), "note": "x"}

    def test_args_must_be_an_array(self) -> None:
        with pytest.raises(DocumentError, match="must be an array"):
            tree_from_data({"kind": "num/neg", "args": 4})


class TestDocumentFormat:
    def test_from_path(self) -> None:
        assert DocumentFormat.from_path(Path("expr.toml")) == DocumentFormat.TOML
        assert DocumentFormat.from_path(Path("expr.JSON")) == DocumentFormat.JSON

    def test_unsupported_suffix(self) -> None:
        with pytest.raises(DocumentError, match="Unsupported document type '.yaml'"):
            DocumentFormat.from_path(Path("expr.yaml"))


class TestLoadTree:
    def test_load_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "expr.toml"
        path.write_text(
            """
[expr]
kind = "num/add"
args = [3, { kind = "num/neg", args = [4] }]
""",
        )

        assert load_tree(path) == add(3, neg(4))

    def test_load_json(self, tmp_path: Path) -> None:
        path = tmp_path / "expr.json"
        path.write_text(json.dumps({"expr": {"kind": "num/add", "args": [1, 2]}}))

        assert load_tree(path) == add(1, 2)

    def test_expr_must_be_a_node(self, tmp_path: Path) -> None:
        path = tmp_path / "expr.json"
        path.write_text(json.dumps({"expr": [1, 2]}))

        with pytest.raises(DocumentError, match="must be a node table"):
            load_tree(path)

    def test_unknown_top_level_key(self, tmp_path: Path) -> None:
        path = tmp_path / "expr.json"
        path.write_text(json.dumps({"expr": {"kind": "num/neg", "args": [1]}, "extra": 1}))

        with pytest.raises(DocumentError, match="Invalid document"):
            load_tree(path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "expr.toml"
        path.write_text("[expr\n")

        with pytest.raises(DocumentError, match="Invalid TOML"):
            load_tree(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentError, match="Cannot read"):
            load_tree(tmp_path / "missing.toml")


class TestIRDocuments:
    def test_document_shape(self) -> None:
        ir = elaborate(add(3, 4), std_registry())

        document = ir_to_document(ir)

        assert document.root == "c"
        assert document.counter == "d"
        assert list(document.entries) == ["a", "b", "c"]
        assert document.entries["a"].out == 3
        assert document.entries["c"].out is None
        assert document.entries["c"].children == ["a", "b"]

    @pytest.mark.parametrize("suffix", [".toml", ".json"])
    def test_round_trip(self, tmp_path: Path, suffix: str) -> None:
        ir = name(elaborate(do({"x": 1, "y": (2, "s")}, neg(3)), std_registry()), "result", "f")
        path = tmp_path / f"ir{suffix}"

        dump_ir(ir, path)
        loaded = load_ir(path)

        assert dict(loaded.entries) == dict(ir.entries)
        assert loaded.root_id == ir.root_id
        assert loaded.counter == ir.counter

    def test_toml_output_is_readable(self, tmp_path: Path) -> None:
        path = tmp_path / "ir.toml"

        dump_ir(elaborate(add(3, 4), std_registry()), path)

        data = tomllib.loads(path.read_text())
        assert data["root"] == "c"
        assert data["entries"]["c"] == {"kind": "num/add", "children": ["a", "b"], "type": "number"}

    def test_explicit_format_overrides_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "ir.out"

        dump_ir(elaborate(add(3, 4), std_registry()), path, DocumentFormat.JSON)

        assert json.loads(path.read_text())["root"] == "c"

    def test_entries_without_value_load_as_unset(self, tmp_path: Path) -> None:
        path = tmp_path / "ir.json"
        path.write_text(
            IRDocument.model_validate(
                {
                    "root": "b",
                    "counter": "c",
                    "entries": {
                        "a": {"kind": "num/literal", "out": 1},
                        "b": {"kind": "num/neg", "children": ["a"]},
                    },
                },
            ).model_dump_json(),
        )

        loaded = load_ir(path)

        assert loaded["b"].out is UNSET
        assert loaded["a"] == Entry("num/literal", out=1)

    def test_load_rejects_dangling_reference(self, tmp_path: Path) -> None:
        path = tmp_path / "ir.json"
        path.write_text(
            json.dumps({"root": "a", "counter": "b", "entries": {"a": {"kind": "num/neg", "children": ["q"]}}}),
        )

        with pytest.raises(MissingChildError):
            load_ir(path)

    def test_load_rejects_invalid_child_reference(self, tmp_path: Path) -> None:
        path = tmp_path / "ir.json"
        path.write_text(
            json.dumps({"root": "a", "counter": "b", "entries": {"a": {"kind": "num/neg", "children": [3]}}}),
        )

        with pytest.raises(DocumentError, match="invalid child reference"):
            load_ir(path)

    def test_committed_ir_round_trips_types(self, tmp_path: Path) -> None:
        ir = commit(
            Dirty(
                "b",
                {
                    "a": Entry("num/literal", out=1, type="number"),
                    "b": Entry("geo/wrap", ({"p": ("a", "a")},), type={"p": ("number", "number")}),
                },
                "c",
            ),
        )
        path = tmp_path / "ir.toml"

        dump_ir(ir, path)

        assert load_ir(path)["b"].type == {"p": ("number", "number")}
