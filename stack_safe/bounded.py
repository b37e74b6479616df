"""
Run a computation with an explicitly bounded call stack.

``run_bounded(stack_bytes, computation)`` runs ``computation()`` on a
dedicated thread whose Python stack is capped, and reports the outcome as a
``Result`` instead of letting stack exhaustion escape:

    result = run_bounded(1024, lambda: len_stack_safe(items))
    assert result.unwrap() == 10_000

    result = run_bounded(10 * 1024, lambda: len_recursive(items))
    assert isinstance(result.unwrap_err(), StackFault)

The byte budget is translated into a frame budget of
``stack_bytes // config.FRAME_BYTES`` Python frames above the worker's entry
point, capped at the interpreter's recursion limit. The worker enforces it
with a profile hook installed on its own thread only.

CPython drops a profile hook once it raises, so the budget is enforced up to
the first fault only. A fault is sticky: a run that exceeded its budget
reports ``StackFault`` even if the computation caught the ``RecursionError``.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Callable
from types import FrameType
from typing import Any, TypeVar

from stack_safe import config
from stack_safe.errors import ExecutionAborted, StackFault
from stack_safe.result import Err, Ok, Result

T = TypeVar("T")

logger = logging.getLogger(__name__)

# threading.stack_size() is process-wide.
_STACK_SIZE_LOCK = threading.Lock()


def frame_budget(stack_bytes: int) -> int:
    """Number of Python frames a run with ``stack_bytes`` may use."""
    if stack_bytes <= 0:
        raise ValueError(f"stack_bytes must be positive, got {stack_bytes}")
    return max(1, min(stack_bytes // config.FRAME_BYTES, sys.getrecursionlimit()))


def _thread_stack_size(budget: int) -> int:
    size = max(config.MIN_THREAD_STACK_BYTES, budget * config.NATIVE_FRAME_BYTES)
    size = min(size, config.MAX_THREAD_STACK_BYTES)
    alignment = config.THREAD_STACK_ALIGNMENT
    return -(-size // alignment) * alignment


class _BoundedWorker:
    """Thread target that runs one computation within a frame budget."""

    def __init__(self, stack_bytes: int, computation: Callable[[], Any]) -> None:
        self.stack_bytes = stack_bytes
        self.budget = frame_budget(stack_bytes)
        self.computation = computation
        self.fault: RecursionError | None = None
        self.outcome: Result[Any] | None = None

    def __call__(self) -> None:
        entry = sys._getframe()
        budget = self.budget

        def guard(frame: FrameType, event: str, arg: Any) -> None:
            if event != "call":
                return
            depth = 0
            while frame is not None and frame is not entry:
                depth += 1
                if depth > budget:
                    self.fault = RecursionError(
                        f"bounded stack exhausted: more than {budget} frames"
                    )
                    raise self.fault
                frame = frame.f_back

        sys.setprofile(guard)
        try:
            self.outcome = self._invoke()
        finally:
            sys.setprofile(None)

    def _invoke(self) -> Result[Any]:
        try:
            value = self.computation()
        except RecursionError as exc:
            return Err(StackFault(self.stack_bytes, self.budget, exc))
        except Exception as exc:
            if self.fault is not None:
                return self._faulted()
            return Err(ExecutionAborted(exc))
        if self.fault is not None:
            return self._faulted()
        return Ok(value)

    def _faulted(self) -> Result[Any]:
        return Err(StackFault(self.stack_bytes, self.budget, self.fault))


def _start_worker(worker: _BoundedWorker) -> threading.Thread:
    with _STACK_SIZE_LOCK:
        previous_size = threading.stack_size(_thread_stack_size(worker.budget))
        try:
            thread = threading.Thread(target=worker, name="stack-safe-bounded", daemon=True)
            thread.start()
        finally:
            threading.stack_size(previous_size)
    return thread


def run_bounded(stack_bytes: int, computation: Callable[[], T]) -> Result[T]:
    """
    Run ``computation`` to completion within ``stack_bytes`` of stack.

    Returns:
        Ok(value) when the computation returns,
        Err(StackFault) when it exhausts its stack budget,
        Err(ExecutionAborted) when it raises anything else or the worker
        thread cannot be started.
    """
    worker = _BoundedWorker(stack_bytes, computation)
    try:
        thread = _start_worker(worker)
    except (RuntimeError, ValueError) as exc:
        logger.debug("bounded worker for %d bytes could not start: %s", stack_bytes, exc)
        return Err(ExecutionAborted(exc))
    thread.join()

    outcome = worker.outcome
    if outcome is None:
        outcome = Err(ExecutionAborted(RuntimeError("bounded worker exited without a result")))
    if outcome.is_err():
        logger.debug("bounded run of %d bytes failed: %s", stack_bytes, outcome.unwrap_err())
    return outcome


__all__ = [
    "frame_budget",
    "run_bounded",
]
