"""
Outcome of a bounded run.

``Ok`` holds the value a computation returned; ``Err`` holds the
``BoundedRunError`` explaining why it did not return.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Either ``Ok(value)`` or ``Err(error)``."""

    __slots__ = ()

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def unwrap(self) -> T_co:
        """The value of an ``Ok``; an ``Err`` raises its error."""
        if isinstance(self, Err):
            raise self.error
        assert isinstance(self, Ok)
        return self.value

    def unwrap_err(self) -> Exception:
        """The error of an ``Err``; an ``Ok`` raises ``RuntimeError``."""
        if isinstance(self, Ok):
            raise RuntimeError(f"expected an error, run returned {self.value!r}")
        assert isinstance(self, Err)
        return self.error


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    error: Exception


__all__ = [
    "Err",
    "Ok",
    "Result",
]
