"""Error types raised or reported by the stack_safe engine."""

from __future__ import annotations

from dataclasses import dataclass


class StackSafeError(Exception):
    """Base class for all engine-originated exceptions."""


class ProtocolViolationError(StackSafeError):
    """
    Raised when the suspend/resume protocol is broken.

    Resuming a computation that already completed, failed or was closed, and
    reading a state cell whose value is currently handed out to a running
    computation, both indicate a bug in a computation rather than a runtime
    condition. The driver aborts immediately and never delivers this error to
    paused frames.
    """


class BoundedRunError(StackSafeError):
    """Base class for failures reported by ``run_bounded`` inside ``Err``."""


@dataclass(eq=False)
class StackFault(BoundedRunError):
    """
    The bounded run exhausted its stack budget.

    Attributes:
        stack_bytes: The byte budget the run was given.
        frame_budget: The Python frame budget derived from ``stack_bytes``.
        original: The ``RecursionError`` that ended the run.
    """

    stack_bytes: int
    frame_budget: int
    original: RecursionError | None = None

    def __str__(self) -> str:
        return (
            f"stack exhausted within {self.stack_bytes} bytes "
            f"({self.frame_budget} frames)"
        )


@dataclass(eq=False)
class ExecutionAborted(BoundedRunError):
    """The bounded run terminated with an exception other than stack exhaustion."""

    original: BaseException

    def __str__(self) -> str:
        return f"bounded run aborted: {self.original!r}"


__all__ = [
    "BoundedRunError",
    "ExecutionAborted",
    "ProtocolViolationError",
    "StackFault",
    "StackSafeError",
]
