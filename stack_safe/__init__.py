"""
stack_safe - stack-safe recursion for Python.

Write a recursive function as a generator that ``yield``s the argument of each
recursive call and receives its result; a trampolined driver runs it on an
explicit heap stack so recursion depth is bounded by memory, not by the
interpreter's call stack.

Example:
    >>> from stack_safe import recurse
    >>>
    >>> @recurse
    ... def triangular(n):
    ...     if n == 0:
    ...         return 0
    ...     return n + (yield n - 1)
    >>>
    >>> triangular(100_000)
    5000050000
"""

from stack_safe.bounded import frame_budget, run_bounded
from stack_safe.call import Call, CallKind
from stack_safe.computation import (
    Completed,
    Computation,
    ComputationState,
    GeneratorComputation,
    Step,
    Suspended,
    as_computation,
)
from stack_safe.driver import (
    DriveStats,
    FrameStack,
    drive,
    drive_threaded,
    drive_tco,
    recurse,
    recurse_mut,
    recurse_st,
    recurse_tco,
)
from stack_safe.errors import (
    BoundedRunError,
    ExecutionAborted,
    ProtocolViolationError,
    StackFault,
    StackSafeError,
)
from stack_safe.result import Err, Ok, Result
from stack_safe.state import StateCell

__version__ = "0.1.0"

__all__ = [
    "BoundedRunError",
    "Call",
    "CallKind",
    "Completed",
    "Computation",
    "ComputationState",
    "DriveStats",
    "Err",
    "ExecutionAborted",
    "FrameStack",
    "GeneratorComputation",
    "Ok",
    "ProtocolViolationError",
    "Result",
    "StackFault",
    "StackSafeError",
    "StateCell",
    "Step",
    "Suspended",
    "as_computation",
    "drive",
    "drive_tco",
    "drive_threaded",
    "frame_budget",
    "recurse",
    "recurse_mut",
    "recurse_st",
    "recurse_tco",
    "run_bounded",
]
