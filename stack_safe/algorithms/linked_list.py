"""Singly linked lists and their length."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from stack_safe.driver import recurse

T = TypeVar("T")


class Nil:
    """The empty list."""

    __slots__ = ()
    _instance: Nil | None = None

    def __new__(cls) -> Nil:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NIL"


NIL = Nil()


@dataclass(frozen=True, eq=False, repr=False)
class Cons(Generic[T]):
    """A cell holding ``head`` in front of the list ``tail``."""
    head: T
    tail: LinkedList

    def __repr__(self) -> str:
        # Shallow: a derived repr would recurse through the whole tail.
        return f"Cons({self.head!r}, ...)"


LinkedList = Union[Cons[Any], Nil]


def from_range(start: int, stop: int | None = None) -> LinkedList:
    """Build the list of ``range(start, stop)`` (or ``range(start)``)."""
    values = range(start) if stop is None else range(start, stop)
    result: LinkedList = NIL
    for value in reversed(values):
        result = Cons(value, result)
    return result


def len_recursive(lst: LinkedList) -> int:
    if lst is NIL:
        return 0
    return 1 + len_recursive(lst.tail)


@recurse
def len_stack_safe(lst: LinkedList) -> Generator[LinkedList, int, int]:
    if lst is NIL:
        return 0
    tail_len = yield lst.tail
    return 1 + tail_len
