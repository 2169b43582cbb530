"""The ``st`` plugin: named mutable cells.

A cell is bound by ``st/let``, read by ``st/get`` and updated by ``st/set``
or ``st/push``. Every ``st`` kind carries the cell name as its payload, so
the name is the entry's ``out`` and the only child is the value.

Cells live in the handler table, and ``compose_handlers`` builds a new
table each time, so every table starts with no cells bound.

``st/get`` is in ``DEFAULT_VOLATILE_KINDS``. A get node shared by several
parents is read again for each of them and sees the updates made in between.
"""

import logging
from dataclasses import dataclass
from typing import Any

from treefold._construct import Node
from treefold._errors import CellError
from treefold._eval_engine import Handler, HandlerCoroutine
from treefold._ir import Entry
from treefold._registry import ANY, KindSpec, Plugin, SameAs

logger = logging.getLogger(__name__)


def _handlers() -> dict[str, Handler]:
    cells: dict[str | int, Any] = {}

    def bound(entry: Entry) -> str | int:
        if entry.out not in cells:
            raise CellError(entry.kind, str(entry.out))
        return entry.out

    def let(entry: Entry) -> HandlerCoroutine:
        value = yield 0
        cells[entry.out] = value
        logger.debug("Bound cell '%s'", entry.out)
        return value

    def get(entry: Entry) -> Any:
        return cells[bound(entry)]

    def set_(entry: Entry) -> HandlerCoroutine:
        value = yield 0
        cells[bound(entry)] = value
        return value

    def push(entry: Entry) -> HandlerCoroutine:
        value = yield 0
        name = bound(entry)
        cells[name] = (*cells[name], value)
        return value

    return {
        "st/let": let,
        "st/get": get,
        "st/set": set_,
        "st/push": push,
    }


st_plugin = Plugin(
    name="st",
    kinds={
        "st/let": KindSpec((ANY,), SameAs(0), payload=True),
        "st/get": KindSpec((), ANY, payload=True),
        "st/set": KindSpec((ANY,), SameAs(0), payload=True),
        "st/push": KindSpec((ANY,), SameAs(0), payload=True),
    },
    handlers=_handlers,
)


@dataclass(frozen=True, slots=True)
class Cell:
    """Constructors for the nodes that use one named cell.

    Sequence the nodes with ``core/do``; only the order in which handlers
    run decides what a get reads.

    Example:
        >>> counter = Cell("counter")
        >>> do(counter.let(0), do(counter.set(5), counter.get()))

    """

    name: str

    def let(self, initial: Any) -> Node:
        return Node("st/let", (initial, self.name))

    def get(self) -> Node:
        return Node("st/get", (self.name,))

    def set(self, value: Any) -> Node:
        return Node("st/set", (value, self.name))

    def push(self, value: Any) -> Node:
        """Append ``value`` to a cell holding a tuple."""
        return Node("st/push", (value, self.name))
