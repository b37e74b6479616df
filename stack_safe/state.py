"""Exclusively owned slot for the auxiliary state of threaded drives."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from stack_safe.errors import ProtocolViolationError

S = TypeVar("S")


class _Empty:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<empty>"


EMPTY: Any = _Empty()


class StateCell(Generic[S]):
    """
    Holds the current auxiliary state of a threaded drive.

    The driver ``take``s the value out before handing it to a computation and
    ``put``s back whatever the computation returns, so the value has exactly
    one owner at a time. Reading the cell while its value is handed out is a
    protocol violation.
    """

    __slots__ = ("_value",)

    def __init__(self, value: S) -> None:
        self._value: Any = value

    @property
    def value(self) -> S:
        if self._value is EMPTY:
            raise ProtocolViolationError("State cell read while its value is handed out")
        return self._value

    @value.setter
    def value(self, value: S) -> None:
        self._value = value

    @property
    def is_empty(self) -> bool:
        return self._value is EMPTY

    def take(self) -> S:
        """Move the value out, leaving the cell empty."""
        value = self.value
        self._value = EMPTY
        return value

    def put(self, value: S) -> None:
        """Move a value into an empty cell."""
        if self._value is not EMPTY:
            raise ProtocolViolationError("State cell already holds a value")
        self._value = value

    def __repr__(self) -> str:
        return f"StateCell({self._value!r})"


__all__ = [
    "EMPTY",
    "StateCell",
]
