"""
Suspended computations: the unit of work the drivers resume.

A computation is resumed with a value and answers with a ``Step``:

- ``Suspended(request)``: it needs the result of the sub-computation built
  from ``request`` and must later be resumed with that result;
- ``Completed(value)``: it is finished and ``value`` is its result.

Computations are written either as explicit state machines (subclass
``Computation`` and implement ``_step``) or as plain generators, which
``GeneratorComputation`` adapts: ``yield request`` suspends, the sent value
is the sub-result and ``return value`` completes.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Generator
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Generic, TypeVar, Union

from stack_safe.errors import ProtocolViolationError

Req = TypeVar("Req")
Res = TypeVar("Res")


class ComputationState(Enum):
    """Lifecycle state of a suspended computation."""
    ACTIVE = auto()      # Can be resumed
    COMPLETED = auto()   # Returned its result
    FAILED = auto()      # Raised an exception
    CLOSED = auto()      # Discarded before completing


@dataclass(frozen=True)
class Suspended(Generic[Req]):
    """Computation paused, requesting a sub-computation."""
    request: Req


@dataclass(frozen=True)
class Completed(Generic[Res]):
    """Computation finished with a result."""
    value: Res


Step = Union[Suspended[Any], Completed[Any]]


class Computation(ABC, Generic[Req, Res]):
    """
    A resumable unit of work.

    Subclasses implement ``_step`` as a state machine with one state per
    suspend point. Their size must not depend on recursion depth.
    """

    state: ComputationState = ComputationState.ACTIVE

    def resume(self, value: Any) -> Step:
        """
        Resume with the result of the last requested sub-computation.

        The very first resume receives ``None``.

        Raises:
            ProtocolViolationError: if the computation is no longer active.
        """
        self._ensure_active("resume")
        try:
            step = self._step(value)
        except BaseException:
            self.state = ComputationState.FAILED
            raise
        if isinstance(step, Completed):
            self.state = ComputationState.COMPLETED
        return step

    def throw(self, exc: BaseException) -> Step:
        """
        Deliver an exception raised by the requested sub-computation.

        State machines have no handler at their suspend points, so the
        default marks the computation failed and re-raises.
        """
        self._ensure_active("throw into")
        self.state = ComputationState.FAILED
        raise exc

    def close(self) -> None:
        """Discard this computation without resuming it again."""
        if self.state == ComputationState.ACTIVE:
            self.state = ComputationState.CLOSED

    @abstractmethod
    def _step(self, value: Any) -> Step:
        ...

    def _ensure_active(self, action: str) -> None:
        if self.state != ComputationState.ACTIVE:
            raise ProtocolViolationError(
                f"Cannot {action} {type(self).__name__} in state {self.state.name}"
            )


class GeneratorComputation(Computation[Req, Res]):
    """Adapts a Python generator to the ``Computation`` protocol."""

    def __init__(self, generator: Generator[Req, Any, Res]) -> None:
        self.generator = generator
        self.state = ComputationState.ACTIVE

    def _step(self, value: Any) -> Step:
        try:
            return Suspended(self.generator.send(value))
        except StopIteration as e:
            return Completed(e.value)

    def throw(self, exc: BaseException) -> Step:
        """Raise ``exc`` at the generator's current ``yield``."""
        self._ensure_active("throw into")
        try:
            step: Step = Suspended(self.generator.throw(exc))
        except StopIteration as e:
            self.state = ComputationState.COMPLETED
            return Completed(e.value)
        except BaseException:
            self.state = ComputationState.FAILED
            raise
        return step

    def close(self) -> None:
        if self.state == ComputationState.ACTIVE:
            try:
                self.generator.close()
            finally:
                self.state = ComputationState.CLOSED

    def __repr__(self) -> str:
        name = getattr(self.generator, "__qualname__", type(self.generator).__name__)
        return f"GeneratorComputation({name}, {self.state.name})"


def as_computation(obj: Any) -> Computation[Any, Any]:
    """Return ``obj`` as a ``Computation``, wrapping generators."""
    if isinstance(obj, Computation):
        return obj
    if inspect.isgenerator(obj):
        return GeneratorComputation(obj)
    raise TypeError(
        f"Constructor returned invalid type {type(obj).__name__!r}; "
        f"expected a Computation or a generator, got {obj!r}"
    )


__all__ = [
    "Completed",
    "Computation",
    "ComputationState",
    "GeneratorComputation",
    "Step",
    "Suspended",
    "as_computation",
]
