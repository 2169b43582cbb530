"""Evaluation engine module for treefold.

The evaluator folds a validated IR into a value by driving one handler
coroutine per node, memoizing results by node id.

Key types:
- fold: async evaluation of an IR against a handler table
- EvalChild / transaction: child requests with an explicit memo scope
- Perform: an external effect the evaluator awaits for a handler
- Handler: the per-kind handler protocol
"""

from ._effects import EvalChild, Handler, HandlerCoroutine, HandlerRequest, MemoScope, Perform, transaction
from ._engine import DEFAULT_VOLATILE_KINDS, fold

__all__ = [
    "DEFAULT_VOLATILE_KINDS",
    "EvalChild",
    "Handler",
    "HandlerCoroutine",
    "HandlerRequest",
    "MemoScope",
    "Perform",
    "fold",
    "transaction",
]
