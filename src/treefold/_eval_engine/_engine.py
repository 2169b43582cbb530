"""Core evaluation engine for IRs."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Generator, Mapping, Set
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from treefold._errors import CyclicIRError, FoldError, UnknownHandlerError
from treefold._ir import ChildRef

from ._effects import EvalChild, Handler, MemoScope, Perform

if TYPE_CHECKING:
    from treefold._ir import IR

logger = logging.getLogger(__name__)

_NOTHING = object()

DEFAULT_VOLATILE_KINDS: frozenset[str] = frozenset({"st/get"})
"""Kinds ``fold`` never memoizes unless told otherwise: reads of mutable state."""


@dataclass(frozen=True, slots=True)
class _Fetch:
    """Internal request for a node by id, issued by structural gather frames."""

    node_id: str


def _gather(ref: ChildRef) -> Generator[_Fetch, Any, Any]:
    """Resolve a structural child reference into the same shape filled with values."""
    if isinstance(ref, str):
        return (yield _Fetch(ref))
    if isinstance(ref, Mapping):
        values: dict[str, Any] = {}
        for key, item in ref.items():
            values[key] = yield from _gather(item)
        return values
    items: list[Any] = []
    for item in ref:
        items.append((yield from _gather(item)))
    return tuple(items)


def _constant(value: Any) -> Generator[Any, Any, Any]:
    return value
    yield  # pragma: no cover


def _awaiting(coroutine: Any) -> Generator[Perform, Any, Any]:
    return (yield Perform(coroutine))


@dataclass(slots=True)
class _Frame:
    """One activation on the evaluation stack.

    Attributes:
        node_id: Node being evaluated, or None for a structural gather.
        gen: The handler coroutine.
        memo: Memo table this activation reads and writes.
        tainted: Whether the activation consumed a volatile or tainted value.
        send: Value to resume the coroutine with.
        throw: Exception to raise inside the coroutine instead, if any.

    """

    node_id: str | None
    gen: Generator[Any, Any, Any]
    memo: dict[str, Any]
    tainted: bool = False
    send: Any = None
    throw: BaseException | None = None
    children: tuple[ChildRef, ...] = field(default=())


async def fold(  # noqa: C901, PLR0912
    ir: IR,
    handlers: Mapping[str, Handler],
    *,
    volatile_kinds: Set[str] = DEFAULT_VOLATILE_KINDS,
) -> Any:
    """Evaluate an IR bottom-up through per-kind handlers.

    Each entry is passed to the handler registered for its kind. A handler
    is a generator that yields requests and is resumed with their results:

    - ``int`` or ``EvalChild``: the value of a child, by index into the
      entry's children. A structural child resolves to a dict or tuple of
      values with the same shape as the reference.
    - ``Perform``: the result of awaiting an external effect.

    The generator's return value is the node's value. A handler that needs no
    children may return the value directly instead of a generator, and an
    ``async def`` handler is awaited as a single effect.

    Within one memo table each node is evaluated at most once, so a node
    shared by several parents runs its handler once and every parent sees
    the same value. Nodes of a volatile kind, and every node that consumed
    one, are never memoized.

    A failure inside a handler is raised at the parent's pending ``yield``,
    so kinds such as ``core/try`` can recover from it. A failure nobody
    catches propagates to the caller; evaluations not yet started are
    abandoned.

    The evaluator keeps its own stack, so deep IRs do not hit the recursion
    limit.

    Args:
        ir: A committed or elaborated IR.
        handlers: Kind name to handler.
        volatile_kinds: Kinds whose values must never be memoized. Defaults to
            ``DEFAULT_VOLATILE_KINDS``.

    Returns:
        The root node's value.

    Raises:
        UnknownHandlerError: If a reached node's kind has no handler.
        CyclicIRError: If a node is requested again while it is being evaluated.
        FoldError: If a handler requests a child that does not exist or yields
            something the evaluator does not understand.

    Example:
        >>> asyncio.run(fold(elaborate(node("num/add", 3, 4), registry), handlers))
        7

    """
    entries = ir.entries
    tainted: set[str] = set()
    stack: list[_Frame] = []
    active: set[str] = set()
    evaluated = 0

    def is_volatile(node_id: str) -> bool:
        entry = entries.get(node_id)
        return entry is not None and entry.kind in volatile_kinds

    def push(node_id: str, memo: dict[str, Any]) -> None:
        nonlocal evaluated
        entry = entries.get(node_id)
        if entry is None:
            msg = f"fold: missing node '{node_id}'"
            raise FoldError(msg)
        handler = handlers.get(entry.kind)
        if handler is None:
            raise UnknownHandlerError(entry.kind)
        if node_id in active:
            raise CyclicIRError(node_id)
        active.add(node_id)
        evaluated += 1
        frame = _Frame(node_id=node_id, gen=_constant(None), memo=memo, children=entry.children)
        try:
            result = handler(entry)
        except Exception as e:  # noqa: BLE001 - delivered to the parent like any handler failure
            frame.throw = e
        else:
            if inspect.isgenerator(result):
                frame.gen = result
            elif inspect.iscoroutine(result):
                frame.gen = _awaiting(result)
            else:
                frame.gen = _constant(result)
        stack.append(frame)

    def request(frame: _Frame, ref: ChildRef, memo: dict[str, Any]) -> None:
        """Resolve ``ref`` for ``frame`` from the memo, or push work to compute it."""
        if not isinstance(ref, str):
            stack.append(_Frame(node_id=None, gen=_gather(ref), memo=memo))
            return
        if ref in tainted or ref not in entries or is_volatile(ref):
            push(ref, memo)
            return
        value = memo.get(ref, _NOTHING)
        if value is _NOTHING:
            push(ref, memo)
            return
        frame.send = value

    def child_ref(frame: _Frame, index: Any) -> ChildRef:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(frame.children):
            entry = entries[frame.node_id] if frame.node_id is not None else None
            kind = entry.kind if entry is not None else "structure"
            msg = f"fold: node '{frame.node_id}' ({kind}) has no child at index {index!r}"
            raise FoldError(msg)
        return frame.children[index]

    push(ir.root_id, {})
    try:
        while stack:
            frame = stack[-1]
            try:
                if frame.throw is not None:
                    error, frame.throw = frame.throw, None
                    yielded = frame.gen.throw(error)
                else:
                    value, frame.send = frame.send, None
                    yielded = frame.gen.send(value)
            except StopIteration as stop:
                stack.pop()
                active.discard(frame.node_id)
                if frame.node_id is not None:
                    if frame.tainted or is_volatile(frame.node_id):
                        tainted.add(frame.node_id)
                        frame.memo.pop(frame.node_id, None)
                    else:
                        frame.memo[frame.node_id] = stop.value
                if not stack:
                    logger.debug("Fold finished after %d handler runs", evaluated)
                    return stop.value
                parent = stack[-1]
                parent.send = stop.value
                if frame.tainted or (frame.node_id is not None and frame.node_id in tainted):
                    parent.tainted = True
                continue
            except Exception as e:
                stack.pop()
                active.discard(frame.node_id)
                if not stack:
                    raise
                logger.debug("Handler for '%s' failed: %s", frame.node_id, e)
                stack[-1].throw = e
                continue

            if isinstance(yielded, _Fetch):
                request(frame, yielded.node_id, frame.memo)
            elif isinstance(yielded, Perform):
                try:
                    frame.send = await yielded.awaitable
                except Exception as e:  # noqa: BLE001 - raised inside the handler that performed it
                    frame.throw = e
            elif isinstance(yielded, (int, EvalChild)):
                child = yielded if isinstance(yielded, EvalChild) else EvalChild(yielded)
                memo = frame.memo if child.scope == MemoScope.SHARED else {}
                request(frame, child_ref(frame, child.index), memo)
            else:
                msg = f"fold: handler for '{frame.node_id}' yielded unsupported request {yielded!r}"
                raise FoldError(msg)
    finally:
        for frame in stack:
            frame.gen.close()
        stack.clear()

    msg = "fold: evaluation stack emptied without a result"
    raise FoldError(msg)
