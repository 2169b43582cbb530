"""Mutation transactions: edit an unvalidated working copy, then commit.

An IR is always valid, so edits cannot be applied to it directly: removing
a node would leave its parents pointing at nothing. Edits go to a ``Dirty``
working copy instead, which may be inconsistent between steps. ``commit``
validates the whole copy at once and only then produces a new IR.

Every operation returns a new ``Dirty``; the argument is never modified.

Example:
    >>> d = dirty(ir)
    >>> d = swap_entry(d, "b", Entry("num/literal", out=10, type="number"))
    >>> fixed = commit(d)

"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ._errors import DirtyError, IRError, MissingChildError, MissingRootError
from ._graph import live_entries
from ._ir import ALIAS_PREFIX, IR, Entry, id_sort_key, increment_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Dirty:
    """An editable, unvalidated copy of an IR.

    Attributes:
        root_id: Id of the result node. Need not exist until commit.
        entries: Node id to entry. Children may dangle until commit.
        counter: Next unused id, threaded explicitly by ``next_id``.

    """

    root_id: str
    entries: Mapping[str, Entry]
    counter: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def _with(self, entries: Mapping[str, Entry]) -> "Dirty":
        return Dirty(self.root_id, entries, self.counter)


def dirty(ir: IR) -> Dirty:
    """Open a working copy of ``ir``."""
    return Dirty(ir.root_id, ir.entries, ir.counter)


def add_entry(d: Dirty, node_id: str, entry: Entry) -> Dirty:
    """Add a new entry.

    Raises:
        DirtyError: If ``node_id`` is already present. Use ``swap_entry`` to replace.

    """
    if node_id in d.entries:
        msg = f"add_entry: '{node_id}' already exists"
        raise DirtyError(msg)
    return d._with({**d.entries, node_id: entry})


def remove_entry(d: Dirty, node_id: str) -> Dirty:
    """Remove an entry. References to it are left dangling.

    Raises:
        DirtyError: If ``node_id`` is not present.

    """
    if node_id not in d.entries:
        msg = f"remove_entry: '{node_id}' does not exist"
        raise DirtyError(msg)
    return d._with({key: entry for key, entry in d.entries.items() if key != node_id})


def swap_entry(d: Dirty, node_id: str, entry: Entry) -> Dirty:
    """Replace an existing entry.

    Raises:
        DirtyError: If ``node_id`` is not present.

    """
    if node_id not in d.entries:
        msg = f"swap_entry: '{node_id}' does not exist"
        raise DirtyError(msg)
    return d._with({**d.entries, node_id: entry})


def rewire_children(d: Dirty, old_id: str, new_id: str) -> Dirty:
    """Point every reference to ``old_id`` at ``new_id``, structural ones included.

    Only entries already in ``d`` are rewritten, so an entry added afterwards
    may reference ``old_id`` freely.
    """
    return d._with({key: entry.rewired(old_id, new_id) for key, entry in d.entries.items()})


def set_root(d: Dirty, new_root_id: str) -> Dirty:
    return Dirty(new_root_id, d.entries, d.counter)


def next_id(d: Dirty) -> tuple[str, Dirty]:
    """Take a fresh id from the counter.

    Returns:
        The id and a copy whose counter has advanced past it.

    """
    return d.counter, Dirty(d.root_id, d.entries, increment_id(d.counter))


def gc(d: Dirty) -> Dirty:
    """Drop every entry the root cannot reach, aliases included."""
    return d._with(live_entries(d.entries, d.root_id))


def gc_preserving_aliases(d: Dirty) -> Dirty:
    """Like ``gc``, but keep every ``@name`` alias entry."""
    live = live_entries(d.entries, d.root_id)
    live.update({key: entry for key, entry in d.entries.items() if key.startswith(ALIAS_PREFIX)})
    return d._with(live)


def commit(d: Dirty) -> IR:
    """Validate a working copy and turn it into an IR.

    Raises:
        MissingRootError: If the root id has no entry.
        MissingChildError: If any entry, reachable or not, references a
            missing id. The first offender in id order is reported.

    """
    if d.root_id not in d.entries:
        raise MissingRootError(d.root_id)
    for node_id in sorted(d.entries, key=id_sort_key):
        for child_id in d.entries[node_id].child_ids:
            if child_id not in d.entries:
                raise MissingChildError(node_id, child_id)
    logger.debug("Committed %d entries (root '%s', counter '%s')", len(d.entries), d.root_id, d.counter)
    return IR(root_id=d.root_id, entries=d.entries, counter=d.counter)


def wrap_by_id(ir: IR, target_id: str, wrapper_kind: str) -> IR:
    """Insert a new single-child node between ``target_id`` and its parents.

    The wrapper takes the next id from the counter. Parents are rewired
    before the wrapper is added, so the wrapper's own child reference is not
    redirected to itself. Wrapping the root makes the wrapper the new root.
    The wrapper's type is the target's type.

    Raises:
        IRError: If ``target_id`` is not in ``ir``.

    Example:
        >>> wrapped = wrap_by_id(ir, "c", "debug/log")  # add(3, 4) -> log(add(3, 4))
        >>> wrapped.root_id, wrapped["d"].children
        ('d', ('c',))

    """
    if target_id not in ir:
        msg = f"wrap_by_id: '{target_id}' does not exist"
        raise IRError(msg)
    d = dirty(ir)
    wrapper_id, d = next_id(d)
    d = rewire_children(d, target_id, wrapper_id)
    d = add_entry(d, wrapper_id, Entry(wrapper_kind, (target_id,), type=ir[target_id].type))
    if ir.root_id == target_id:
        d = set_root(d, wrapper_id)
    return commit(d)
