"""Tests for IR ids, entries and the IR container."""

import pytest

from treefold._ir import (
    FIRST_ID,
    IR,
    UNSET,
    Entry,
    id_sort_key,
    increment_id,
    iter_child_ids,
    map_child_ids,
)


class TestIncrementId:
    def test_single_letters(self) -> None:
        assert increment_id("a") == "b"
        assert increment_id("y") == "z"

    def test_carry_from_z(self) -> None:
        assert increment_id("z") == "aa"

    def test_carry_in_last_position(self) -> None:
        assert increment_id("az") == "ba"
        assert increment_id("ab") == "ac"

    def test_full_carry(self) -> None:
        assert increment_id("zz") == "aaa"

    def test_empty_string(self) -> None:
        assert increment_id("") == "a"

    def test_sequence_from_first_id(self) -> None:
        ids = [FIRST_ID]
        for _ in range(27):
            ids.append(increment_id(ids[-1]))

        assert ids[:3] == ["a", "b", "c"]
        assert ids[25] == "z"
        assert ids[26] == "aa"
        assert ids[27] == "ab"

    def test_ids_are_strictly_increasing_in_generation_order(self) -> None:
        ids = [FIRST_ID]
        for _ in range(800):
            ids.append(increment_id(ids[-1]))

        assert len(set(ids)) == len(ids)
        assert sorted(ids, key=id_sort_key) == ids


class TestChildRefs:
    def test_iter_plain_id(self) -> None:
        assert list(iter_child_ids("a")) == ["a"]

    def test_iter_nested_in_declaration_order(self) -> None:
        ref = {"x": "a", "y": ("b", {"z": "c"}), "w": "d"}

        assert list(iter_child_ids(ref)) == ["a", "b", "c", "d"]

    def test_map_preserves_shape(self) -> None:
        ref = {"x": "a", "y": ("b", "a")}

        assert map_child_ids(ref, str.upper) == {"x": "A", "y": ("B", "A")}


class TestEntry:
    def test_defaults(self) -> None:
        entry = Entry("num/add", ("a", "b"))

        assert entry.out is UNSET
        assert not entry.has_value
        assert entry.type is None

    def test_literal_has_value_even_when_falsy(self) -> None:
        entry = Entry("num/literal", out=0, type="number")

        assert entry.has_value
        assert entry.out == 0

    def test_children_are_tupled(self) -> None:
        entry = Entry("num/add", ["a", "b"])

        assert entry.children == ("a", "b")

    def test_child_ids_flatten_structures(self) -> None:
        entry = Entry("geo/point", ({"x": "a", "y": "b"}, ("c",)))

        assert entry.child_ids == ("a", "b", "c")

    def test_rewired_replaces_every_reference(self) -> None:
        entry = Entry("geo/point", ("a", {"x": "a", "y": "b"}))

        rewired = entry.rewired("a", "z")

        assert rewired.children == ("z", {"x": "z", "y": "b"})

    def test_rewired_without_match_returns_same_entry(self) -> None:
        entry = Entry("num/add", ("a", "b"))

        assert entry.rewired("c", "d") is entry

    def test_with_kind_keeps_everything_else(self) -> None:
        entry = Entry("num/add", ("a", "b"), type="number")

        replaced = entry.with_kind("num/sub")

        assert replaced == Entry("num/sub", ("a", "b"), type="number")

    def test_unset_repr_and_truthiness(self) -> None:
        assert repr(UNSET) == "UNSET"
        assert not UNSET


class TestIR:
    @pytest.fixture
    def ir(self) -> IR:
        return IR(
            root_id="c",
            entries={
                "a": Entry("num/literal", out=3, type="number"),
                "b": Entry("num/literal", out=4, type="number"),
                "c": Entry("num/add", ("a", "b"), type="number"),
            },
            counter="d",
        )

    def test_mapping_protocol(self, ir: IR) -> None:
        assert len(ir) == 3
        assert "a" in ir
        assert "z" not in ir
        assert ir["c"].kind == "num/add"
        assert set(ir) == {"a", "b", "c"}

    def test_root_and_output_type(self, ir: IR) -> None:
        assert ir.root.kind == "num/add"
        assert ir.output_type == "number"

    def test_entries_are_read_only(self, ir: IR) -> None:
        with pytest.raises(TypeError):
            ir.entries["d"] = Entry("num/literal", out=1)  # type: ignore[index]

    def test_ordered_ids_use_generation_order(self) -> None:
        entries = {node_id: Entry("num/literal", out=0) for node_id in ("aa", "b", "a", "z")}

        ir = IR(root_id="a", entries=entries, counter="ab")

        assert ir.ordered_ids() == ["a", "b", "z", "aa"]

    def test_source_mapping_is_copied(self) -> None:
        entries = {"a": Entry("num/literal", out=1)}
        ir = IR(root_id="a", entries=entries, counter="b")

        entries["b"] = Entry("num/literal", out=2)

        assert "b" not in ir
