"""
Trampolined drivers for suspended computations.

The drivers run a recursion-shaped computation on an explicit, heap-resident
frame stack instead of the Python call stack.

Key properties:
- NO recursive calls: every sub-computation is started by the driver loop
- Python stack usage is constant, recursion depth lives in ``FrameStack``
- Evaluation order is exactly the native recursive order
- Exceptions travel through paused frames like through native callers

Variants:
- ``drive`` / ``recurse``: every suspension pushes the caller
- ``drive_tco`` / ``recurse_tco``: suspensions carry a ``Call`` marker and
  tail calls replace the caller instead of pushing it
- ``drive_threaded`` / ``recurse_st`` / ``recurse_mut``: an auxiliary state is
  handed to every construction and resume and handed back on every outcome
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, TypeVar

from stack_safe import config
from stack_safe.call import Call
from stack_safe.computation import Computation, Step, Suspended, as_computation
from stack_safe.errors import ProtocolViolationError
from stack_safe.state import StateCell

A = TypeVar("A")
S = TypeVar("S")

logger = logging.getLogger(__name__)


# ============================================
# Drive Stats
# ============================================

@dataclass
class DriveStats:
    """
    Statistics collected during one drive.

    All counters are O(1) increments on the driver loop.
    """

    # Step counter: incremented once per iteration of the driver loop
    total_steps: int = 0

    # Computations built by the constructor
    total_frames_created: int = 0

    # High-water mark of the frame stack
    max_stack_depth: int = 0

    # Suspensions that replaced their caller instead of pushing it
    tail_calls: int = 0

    # Exceptions a paused frame handled at its suspend point
    total_exceptions_caught: int = 0

    start_time_ns: int | None = None
    end_time_ns: int | None = None

    @property
    def duration_ns(self) -> int | None:
        if self.start_time_ns is not None and self.end_time_ns is not None:
            return self.end_time_ns - self.start_time_ns
        return None


# ============================================
# Frame Stack
# ============================================

@dataclass
class FrameStack:
    """
    Paused computations in LIFO order (top = most recent caller).

    Invariants:
    - Only paused computations are stored; the live one is held by the loop
    - Depth equals logical recursion depth minus eliminated tail calls
    """

    frames: list[Computation[Any, Any]] = field(default_factory=list)
    stats: DriveStats = field(default_factory=DriveStats)

    def push(self, frame: Computation[Any, Any]) -> None:
        self.frames.append(frame)
        if len(self.frames) > self.stats.max_stack_depth:
            self.stats.max_stack_depth = len(self.frames)

    def pop(self) -> Computation[Any, Any] | None:
        if self.frames:
            return self.frames.pop()
        return None

    @property
    def depth(self) -> int:
        return len(self.frames)

    def construct(self, make: Callable[..., Any], *args: Any) -> Computation[Any, Any]:
        computation = as_computation(make(*args))
        self.stats.total_frames_created += 1
        return computation

    def throw(self, exc: Exception) -> tuple[Computation[Any, Any], Step]:
        """
        Raise ``exc`` at the suspend point of the paused frames, top down.

        Returns the first frame that handles it together with its next step.
        Re-raises once the stack is exhausted.
        """
        while True:
            parent = self.pop()
            if parent is None:
                raise exc
            try:
                step = parent.throw(exc)
            except ProtocolViolationError:
                raise
            except Exception as propagated:
                exc = propagated
                continue
            self.stats.total_exceptions_caught += 1
            return parent, step

    def unwind(self, live: Computation[Any, Any] | None = None) -> None:
        """Close the live computation and every paused frame, innermost first."""
        if live is not None:
            self.frames.append(live)
        while self.frames:
            frame = self.frames.pop()
            try:
                frame.close()
            except Exception:
                logger.warning("Error while closing %r during unwind", frame, exc_info=True)


def _start(stats: DriveStats | None) -> FrameStack:
    frames = FrameStack(stats=stats if stats is not None else DriveStats())
    frames.stats.start_time_ns = time.perf_counter_ns()
    return frames


def _finish(frames: FrameStack, variant: str) -> None:
    stats = frames.stats
    stats.end_time_ns = time.perf_counter_ns()
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "%s finished: steps=%d frames_created=%d max_depth=%d tail_calls=%d",
            variant,
            stats.total_steps,
            stats.total_frames_created,
            stats.max_stack_depth,
            stats.tail_calls,
        )


def _tracing() -> bool:
    return config.TRACE_STEPS and logger.isEnabledFor(logging.DEBUG)


# ============================================
# Drivers
# ============================================

def drive(arg: A, make: Callable[[A], Any], *, stats: DriveStats | None = None) -> Any:
    """
    Run the computation built from ``arg`` to completion.

    ``make(arg)`` must return a ``Computation`` or a generator. Each
    suspension pushes the current computation and starts ``make(request)``;
    each completion resumes the popped caller with the result, or ends the
    drive when no caller is left.
    """
    frames = _start(stats)
    trace = _tracing()
    current: Computation[Any, Any] | None = None
    step: Step = Suspended(arg)
    try:
        while True:
            frames.stats.total_steps += 1
            if trace:
                logger.debug("step depth=%d %r", frames.depth, step)
            try:
                if isinstance(step, Suspended):
                    if current is not None:
                        frames.push(current)
                    current = frames.construct(make, step.request)
                    step = current.resume(None)
                else:
                    current = frames.pop()
                    if current is None:
                        return step.value
                    step = current.resume(step.value)
            except ProtocolViolationError:
                raise
            except Exception as exc:
                current, step = frames.throw(exc)
    except BaseException:
        frames.unwind(current)
        raise
    finally:
        _finish(frames, "drive")


def drive_tco(arg: A, make: Callable[[A], Any], *, stats: DriveStats | None = None) -> Any:
    """
    Run the computation built from ``arg``, eliminating tail calls.

    Every suspension must yield a ``Call``. ``Call.normal`` behaves like
    ``drive``; ``Call.tail`` closes the current computation and starts the
    callee in its place, so the frame stack only grows with non-tail calls.
    """
    frames = _start(stats)
    trace = _tracing()
    current: Computation[Any, Any] | None = None
    step: Step = Suspended(Call.normal(arg))
    try:
        while True:
            frames.stats.total_steps += 1
            if trace:
                logger.debug("step depth=%d %r", frames.depth, step)
            if isinstance(step, Suspended) and not isinstance(step.request, Call):
                raise TypeError(
                    f"Tail-call computation suspended with {type(step.request).__name__!r}; "
                    f"expected Call.normal(...) or Call.tail(...), got {step.request!r}"
                )
            try:
                if isinstance(step, Suspended):
                    call = step.request
                    if current is not None:
                        if call.is_tail:
                            current.close()
                            frames.stats.tail_calls += 1
                        else:
                            frames.push(current)
                    current = frames.construct(make, call.arg)
                    step = current.resume(None)
                else:
                    current = frames.pop()
                    if current is None:
                        return step.value
                    step = current.resume(step.value)
            except ProtocolViolationError:
                raise
            except Exception as exc:
                current, step = frames.throw(exc)
    except BaseException:
        frames.unwind(current)
        raise
    finally:
        _finish(frames, "drive_tco")


def _split(payload: Any, outcome: str) -> tuple[Any, Any]:
    if not (isinstance(payload, tuple) and len(payload) == 2):
        raise TypeError(
            f"State-threaded computation must {outcome} with a (value, state) pair, "
            f"got {payload!r}"
        )
    return payload


def drive_threaded(
    arg: A,
    cell: StateCell[S],
    make: Callable[[A, S], Any],
    *,
    stats: DriveStats | None = None,
) -> Any:
    """
    Run the computation built from ``arg`` while threading ``cell``'s state.

    ``make(arg, state)`` builds a computation; later resumes receive
    ``(result, state)``; suspensions yield ``(arg, state)`` and completion
    returns ``(result, state)``. The state handed back on every outcome is
    stored in ``cell`` and handed to the next construction or resume.

    A fresh computation gets its state from ``make`` rather than from its
    first resume: that resume is always ``None`` because a generator can
    only be started with ``send(None)``.

    Exceptions abort the drive: the paused frames are closed and the last
    state handed out is put back into ``cell``.
    """
    frames = _start(stats)
    trace = _tracing()
    current: Computation[Any, Any] | None = None
    held: Any = cell.take()
    step: Step = Suspended((arg, held))
    try:
        while True:
            frames.stats.total_steps += 1
            if trace:
                logger.debug("step depth=%d %r", frames.depth, step)
            if isinstance(step, Suspended):
                request, state = _split(step.request, "suspend")
                cell.put(state)
                if current is not None:
                    frames.push(current)
                held = cell.take()
                current = frames.construct(make, request, held)
                step = current.resume(None)
            else:
                result, state = _split(step.value, "complete")
                cell.put(state)
                current = frames.pop()
                if current is None:
                    return result
                held = cell.take()
                step = current.resume((result, held))
    except BaseException:
        frames.unwind(current)
        if cell.is_empty:
            cell.put(held)
        raise
    finally:
        _finish(frames, "drive_threaded")


# ============================================
# Decorators
# ============================================

def recurse(make: Callable[[A], Any]) -> Callable[..., Any]:
    """
    Turn a computation constructor into a stack-safe function.

    Example::

        @recurse
        def triangular(n):
            if n == 0:
                return 0
            return n + (yield n - 1)

        triangular(100_000)
    """

    @wraps(make)
    def run(arg: A, *, stats: DriveStats | None = None) -> Any:
        return drive(arg, make, stats=stats)

    run.make = make  # type: ignore[attr-defined]
    return run


def recurse_tco(make: Callable[[A], Any]) -> Callable[..., Any]:
    """Like ``recurse`` but the constructor yields ``Call`` markers."""

    @wraps(make)
    def run(arg: A, *, stats: DriveStats | None = None) -> Any:
        return drive_tco(arg, make, stats=stats)

    run.make = make  # type: ignore[attr-defined]
    return run


def recurse_st(make: Callable[[A, S], Any]) -> Callable[..., tuple[Any, S]]:
    """
    Threaded variant owning its state: ``fn(arg, state) -> (result, state)``.

    The caller moves ``state`` in and receives the final state back.
    """

    @wraps(make)
    def run(arg: A, state: S, *, stats: DriveStats | None = None) -> tuple[Any, S]:
        cell = StateCell(state)
        result = drive_threaded(arg, cell, make, stats=stats)
        return result, cell.take()

    run.make = make  # type: ignore[attr-defined]
    return run


def recurse_mut(make: Callable[[A, S], Any]) -> Callable[..., Any]:
    """
    Threaded variant borrowing its state: ``fn(arg, cell) -> result``.

    The state lives in an externally owned ``StateCell`` that the drive
    updates in place.
    """

    @wraps(make)
    def run(arg: A, cell: StateCell[S], *, stats: DriveStats | None = None) -> Any:
        return drive_threaded(arg, cell, make, stats=stats)

    run.make = make  # type: ignore[attr-defined]
    return run


__all__ = [
    "DriveStats",
    "FrameStack",
    "drive",
    "drive_threaded",
    "drive_tco",
    "recurse",
    "recurse_mut",
    "recurse_st",
    "recurse_tco",
]
