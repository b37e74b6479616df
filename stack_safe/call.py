"""Call markers for the tail-call driver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, TypeVar

A = TypeVar("A")


class CallKind(Enum):
    """How the caller relates to a requested sub-computation."""
    NORMAL = auto()  # Caller waits for the sub-result
    TAIL = auto()    # Sub-result is the caller's result


@dataclass(frozen=True)
class Call(Generic[A]):
    """
    A sub-computation request tagged with its call kind.

    ``Call.normal(arg)`` keeps the caller's frame to receive the result;
    ``Call.tail(arg)`` lets the driver drop it before the callee runs.
    """

    arg: A
    kind: CallKind = CallKind.NORMAL

    @classmethod
    def normal(cls, arg: A) -> Call[A]:
        return cls(arg, CallKind.NORMAL)

    @classmethod
    def tail(cls, arg: A) -> Call[A]:
        return cls(arg, CallKind.TAIL)

    @property
    def is_tail(self) -> bool:
        return self.kind is CallKind.TAIL


__all__ = [
    "Call",
    "CallKind",
]
