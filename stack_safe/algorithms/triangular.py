"""Triangular numbers: ``n + (n - 1) + ... + 0``."""

from __future__ import annotations

from collections.abc import Generator

from frozendict import frozendict

from stack_safe.call import Call
from stack_safe.driver import DriveStats, recurse, recurse_tco


def recursive(n: int) -> int:
    if n == 0:
        return 0
    return n + recursive(n - 1)


@recurse
def stack_safe(n: int) -> Generator[int, int, int]:
    if n == 0:
        return 0
    return n + (yield n - 1)


@recurse_tco
def _accumulate(args: tuple[int, int]) -> Generator[Call[tuple[int, int]], int, int]:
    n, acc = args
    if n == 0:
        return acc
    return (yield Call.tail((n - 1, acc + n)))


def stack_safe_tco(n: int, *, stats: DriveStats | None = None) -> int:
    """Tail-recursive formulation; the frame stack stays empty."""
    return _accumulate((n, 0), stats=stats)


def closed_form(n: int) -> int:
    return n * (n + 1) // 2


IMPLEMENTATIONS = frozendict({
    "recursive": recursive,
    "yield": stack_safe,
    "yield-tco": stack_safe_tco,
})
