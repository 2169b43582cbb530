"""Composable predicates over IR entries."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from treefold._ir import ALIAS_KIND, ALIAS_PREFIX, Entry


class Predicate:
    """Base class for entry predicates.

    A predicate inspects one entry in the context of its id and the whole
    entry map. Predicates never modify what they inspect. They combine with
    ``~p``, ``a & b`` and ``a | b``; the binary forms short-circuit left to
    right.

    Example:
        >>> arithmetic = by_kind_prefix("num/") & ~is_leaf()
        >>> select_where(ir, arithmetic)
        frozenset({'c'})

    """

    __slots__ = ()

    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        raise NotImplementedError

    def __invert__(self) -> Predicate:
        return Not(self)

    def __and__(self, other: Predicate) -> Predicate:
        return And(self, other)

    def __or__(self, other: Predicate) -> Predicate:
        return Or(self, other)


@dataclass(frozen=True, slots=True)
class ByKind(Predicate):
    kind: str

    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        return entry.kind == self.kind


@dataclass(frozen=True, slots=True)
class ByKindPrefix(Predicate):
    prefix: str

    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        return entry.kind.startswith(self.prefix)


@dataclass(frozen=True, slots=True)
class IsLeaf(Predicate):
    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        return not entry.children


@dataclass(frozen=True, slots=True)
class HasChildCount(Predicate):
    """Match entries with exactly ``count`` arguments. A structural argument counts once."""

    count: int

    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        return len(entry.children) == self.count


@dataclass(frozen=True, slots=True)
class ByName(Predicate):
    """Match the entry an ``@name`` alias points at."""

    alias: str

    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        alias_entry = entries.get(ALIAS_PREFIX + self.alias)
        if alias_entry is None or alias_entry.kind != ALIAS_KIND:
            return False
        return node_id in alias_entry.child_ids


@dataclass(frozen=True, slots=True)
class Not(Predicate):
    inner: Predicate

    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        return not self.inner.test(entry, node_id, entries)


@dataclass(frozen=True, slots=True)
class And(Predicate):
    left: Predicate
    right: Predicate

    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        return self.left.test(entry, node_id, entries) and self.right.test(entry, node_id, entries)


@dataclass(frozen=True, slots=True)
class Or(Predicate):
    left: Predicate
    right: Predicate

    def test(self, entry: Entry, node_id: str, entries: Mapping[str, Entry]) -> bool:
        return self.left.test(entry, node_id, entries) or self.right.test(entry, node_id, entries)


def by_kind(kind: str) -> Predicate:
    return ByKind(kind)


def by_kind_prefix(prefix: str) -> Predicate:
    return ByKindPrefix(prefix)


def is_leaf() -> Predicate:
    return IsLeaf()


def has_child_count(count: int) -> Predicate:
    return HasChildCount(count)


def by_name(alias: str) -> Predicate:
    return ByName(alias)


def not_(inner: Predicate) -> Predicate:
    return Not(inner)


def and_(left: Predicate, right: Predicate) -> Predicate:
    return And(left, right)


def or_(left: Predicate, right: Predicate) -> Predicate:
    return Or(left, right)
