"""The ``core`` plugin: control flow, error recovery and field access.

These kinds are generic over the value they pass through, so their specs
use ``ANY`` and ``SameAs`` instead of fixed tags. The output type of
``core/access`` is worked out by the elaborator from its operand's type.
"""

import logging
from typing import Any

from treefold._construct import Node
from treefold._errors import GuardFailedError
from treefold._eval_engine import Handler, HandlerCoroutine, transaction
from treefold._ir import ACCESS_KIND, Entry
from treefold._registry import ANY, KindSpec, Plugin, SameAs

from ._num import BOOLEAN, NUMBER

logger = logging.getLogger(__name__)


def _cond(entry: Entry) -> HandlerCoroutine:
    # Only the selected branch is evaluated
    if (yield 0):
        return (yield 1)
    return (yield 2)


def _do(entry: Entry) -> HandlerCoroutine:
    yield 0
    return (yield 1)


def _try(entry: Entry) -> HandlerCoroutine:
    try:
        return (yield transaction(0))
    except Exception as e:  # noqa: BLE001 - recovering from the body is this kind's purpose
        logger.debug("core/try recovered from %s: %s", type(e).__name__, e)
        return (yield 1)


def _retry(entry: Entry) -> HandlerCoroutine:
    attempts = max(int((yield 1)), 1)
    for attempt in range(1, attempts + 1):
        try:
            return (yield transaction(0))
        except Exception as e:
            if attempt == attempts:
                raise
            logger.debug("core/retry attempt %d of %d failed: %s", attempt, attempts, e)
    return None


def _guard(entry: Entry) -> HandlerCoroutine:
    if not (yield 0):
        msg = "core/guard: condition is false"
        raise GuardFailedError(msg)
    return (yield 1)


def _access(entry: Entry) -> HandlerCoroutine:
    value = yield 0
    return value[entry.out]


def _handlers() -> dict[str, Handler]:
    return {
        "core/cond": _cond,
        "core/do": _do,
        "core/try": _try,
        "core/retry": _retry,
        "core/guard": _guard,
        ACCESS_KIND: _access,
    }


core_plugin = Plugin(
    name="core",
    kinds={
        "core/cond": KindSpec((BOOLEAN, ANY, SameAs(1)), SameAs(1)),
        "core/do": KindSpec((ANY, ANY), SameAs(1)),
        "core/try": KindSpec((ANY, SameAs(0)), SameAs(0)),
        "core/retry": KindSpec((ANY, NUMBER), SameAs(0)),
        "core/guard": KindSpec((BOOLEAN, ANY), SameAs(1)),
        ACCESS_KIND: KindSpec((ANY,), ANY, payload=True),
    },
    handlers=_handlers,
)


def cond(predicate: Any, then: Any, otherwise: Any) -> Node:
    return Node("core/cond", (predicate, then, otherwise))


def do(effect: Any, result: Any) -> Node:
    return Node("core/do", (effect, result))


def attempt(body: Any, fallback: Any) -> Node:
    """Evaluate ``body``; if it fails, evaluate ``fallback`` instead."""
    return Node("core/try", (body, fallback))


def retry(body: Any, attempts: Any) -> Node:
    """Evaluate ``body`` up to ``attempts`` times, each in a fresh memo scope."""
    return Node("core/retry", (body, attempts))


def guard(predicate: Any, value: Any) -> Node:
    return Node("core/guard", (predicate, value))


def access(value: Any, key: str | int) -> Node:
    """Read field ``key`` of a record, or item ``key`` of a tuple.

    Example:
        >>> access(do(0, {"x": 1, "y": "one"}), "y")  # elaborates to type "string"

    """
    return Node(ACCESS_KIND, (value, key))
