"""
The Ackermann function in six implementations.

- ``recursive``: direct definition, limited by the interpreter stack
- ``loop``: hand-written explicit stack
- ``yield`` / ``yield_tco``: generators on ``recurse`` / ``recurse_tco``
- ``manual`` / ``manual_tco``: hand-written ``Computation`` state machines

Values grow quickly: ``A(3, n) == 2 ** (n + 3) - 3``.
"""

from __future__ import annotations

from collections.abc import Generator
from enum import Enum, auto
from typing import Any

from frozendict import frozendict

from stack_safe.call import Call
from stack_safe.computation import Completed, Computation, Step, Suspended
from stack_safe.driver import drive, drive_tco, recurse, recurse_tco

Args = tuple[int, int]


def recursive(m: int, n: int) -> int:
    if m == 0:
        return n + 1
    if n == 0:
        return recursive(m - 1, 1)
    return recursive(m - 1, recursive(m, n - 1))


def loop(m: int, n: int) -> int:
    # Each entry is the first argument of an outer call still waiting for n.
    stack: list[int] = []
    while not (m == 0 and not stack):
        if m == 0:
            m = stack.pop()
            n += 1
        elif n == 0:
            m -= 1
            n = 1
        else:
            stack.append(m - 1)
            n -= 1
    return n + 1


@recurse
def _ackermann(args: Args) -> Generator[Args, int, int]:
    m, n = args
    if m == 0:
        return n + 1
    if n == 0:
        return (yield (m - 1, 1))
    k = yield (m, n - 1)
    return (yield (m - 1, k))


def yield_(m: int, n: int) -> int:
    return _ackermann((m, n))


@recurse_tco
def _ackermann_tco(args: Args) -> Generator[Call[Args], int, int]:
    m, n = args
    if m == 0:
        return n + 1
    if n == 0:
        return (yield Call.tail((m - 1, 1)))
    k = yield Call.normal((m, n - 1))
    return (yield Call.tail((m - 1, k)))


def yield_tco(m: int, n: int) -> int:
    return _ackermann_tco((m, n))


class Kont(Computation[Args, int]):
    """
    Hand-written state machine for ``drive``.

    START: decide the case, possibly requesting a sub-call.
    FORWARD: the result of ``A(m - 1, 1)`` is the answer.
    INNER: got ``k = A(m, n - 1)``, request ``A(m - 1, k)``.
    OUTER: the result of ``A(m - 1, k)`` is the answer.
    """

    class Phase(Enum):
        START = auto()
        FORWARD = auto()
        INNER = auto()
        OUTER = auto()

    def __init__(self, args: Args) -> None:
        self.m, self.n = args
        self.phase = Kont.Phase.START

    def _step(self, value: Any) -> Step:
        if self.phase is Kont.Phase.START:
            if self.m == 0:
                return Completed(self.n + 1)
            if self.n == 0:
                self.phase = Kont.Phase.FORWARD
                return Suspended((self.m - 1, 1))
            self.phase = Kont.Phase.INNER
            return Suspended((self.m, self.n - 1))
        if self.phase is Kont.Phase.INNER:
            self.phase = Kont.Phase.OUTER
            return Suspended((self.m - 1, value))
        return Completed(value)


def manual(m: int, n: int) -> int:
    return drive((m, n), Kont)


class KontTco(Computation[Call[Args], int]):
    """
    Hand-written state machine for ``drive_tco``.

    Tail calls never resume their caller, so only the state waiting for
    ``A(m, n - 1)`` is needed besides the start.
    """

    def __init__(self, args: Args) -> None:
        self.m, self.n = args
        self.started = False

    def _step(self, value: Any) -> Step:
        if not self.started:
            self.started = True
            if self.m == 0:
                return Completed(self.n + 1)
            if self.n == 0:
                return Suspended(Call.tail((self.m - 1, 1)))
            return Suspended(Call.normal((self.m, self.n - 1)))
        return Suspended(Call.tail((self.m - 1, value)))


def manual_tco(m: int, n: int) -> int:
    return drive_tco((m, n), KontTco)


IMPLEMENTATIONS = frozendict({
    "recursive": recursive,
    "loop": loop,
    "yield": yield_,
    "yield-tco": yield_tco,
    "manual": manual,
    "manual-tco": manual_tco,
})
