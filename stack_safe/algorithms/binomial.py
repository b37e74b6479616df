"""Binomial coefficients by Pascal's rule."""

from __future__ import annotations

from collections.abc import Generator

from stack_safe.driver import recurse


def recursive(n: int, k: int) -> int:
    if k == 0 or k == n:
        return 1
    return recursive(n - 1, k - 1) + recursive(n - 1, k)


@recurse
def _pascal(args: tuple[int, int]) -> Generator[tuple[int, int], int, int]:
    n, k = args
    if k == 0 or k == n:
        return 1
    return (yield (n - 1, k - 1)) + (yield (n - 1, k))


def stack_safe(n: int, k: int) -> int:
    if not 0 <= k <= n:
        raise ValueError(f"expected 0 <= k <= n, got n={n}, k={k}")
    return _pascal((n, k))
