"""Requests a handler can yield to the evaluator."""

from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Any

from treefold._ir import Entry


class MemoScope(StrEnum):
    """Which memo table a child evaluation reads and writes."""

    SHARED = auto()  # The requesting node's table; values computed elsewhere are reused
    FRESH = auto()  # A new empty table; everything below is evaluated again


@dataclass(frozen=True, slots=True)
class EvalChild:
    """Request the value of the child at ``index``.

    Yielding a bare ``int`` is shorthand for ``EvalChild(index)``.
    """

    index: int
    scope: MemoScope = MemoScope.SHARED


@dataclass(frozen=True, slots=True)
class Perform:
    """Request that the evaluator await an external effect.

    The handler resumes with the awaited result, or has the awaited
    exception raised at its ``yield``.
    """

    awaitable: Awaitable[Any]


def transaction(index: int, scope: MemoScope = MemoScope.FRESH) -> EvalChild:
    """Request a child as a nested transactional block.

    Blocks default to a fresh memo table so that running one again, as a
    retry does, re-executes everything inside it.
    """
    return EvalChild(index, scope)


type HandlerRequest = int | EvalChild | Perform
type HandlerCoroutine = Generator[HandlerRequest, Any, Any]
# A handler returns a coroutine, or the node's value directly when it needs no children.
type Handler = Callable[[Entry], HandlerCoroutine | Any]
