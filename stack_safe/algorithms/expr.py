"""
Arithmetic expression evaluation.

Expressions are numbers, n-ary sums and binary products. Four evaluators
agree on every expression:

- ``eval_recursive``: direct structural recursion
- ``eval_stack_safe``: generator on ``recurse``
- ``eval_manual``: hand-written ``Computation`` state machine on ``drive``
- ``eval_loop``: hand-written control/continuation loop
"""

from __future__ import annotations

from collections.abc import Generator, Iterator
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Union

from stack_safe.computation import Completed, Computation, Step, Suspended
from stack_safe.driver import drive, recurse

Number = Union[int, float]


@dataclass(frozen=True)
class Num:
    value: Number


@dataclass(frozen=True, repr=False)
class Add:
    operands: tuple[Expr, ...]

    def __init__(self, *operands: Expr) -> None:
        object.__setattr__(self, "operands", operands)

    def __repr__(self) -> str:
        return f"Add(<{len(self.operands)} operands>)"


@dataclass(frozen=True, repr=False)
class Mul:
    lhs: Expr
    rhs: Expr

    def __repr__(self) -> str:
        return "Mul(...)"


Expr = Union[Num, Add, Mul]


def eval_recursive(expr: Expr) -> Number:
    if isinstance(expr, Num):
        return expr.value
    if isinstance(expr, Add):
        total: Number = 0
        for operand in expr.operands:
            total += eval_recursive(operand)
        return total
    return eval_recursive(expr.lhs) * eval_recursive(expr.rhs)


@recurse
def eval_stack_safe(expr: Expr) -> Generator[Expr, Number, Number]:
    if isinstance(expr, Num):
        return expr.value
    if isinstance(expr, Add):
        total: Number = 0
        for operand in expr.operands:
            total += yield operand
        return total
    lhs = yield expr.lhs
    rhs = yield expr.rhs
    return lhs * rhs


class EvalComputation(Computation[Expr, Number]):
    """
    Evaluator with one state per suspend point.

    INIT: inspect the expression.
    ADD: accumulating a sum, ``operands`` yields the next operand.
    MUL1: waiting for the left factor.
    MUL2: waiting for the right factor, ``lhs`` holds the left one.
    """

    class Phase(Enum):
        INIT = auto()
        ADD = auto()
        MUL1 = auto()
        MUL2 = auto()

    def __init__(self, expr: Expr) -> None:
        self.expr = expr
        self.phase = EvalComputation.Phase.INIT
        self.total: Number = 0
        self.operands: Iterator[Expr] | None = None
        self.lhs: Number = 0

    def _step(self, value: Any) -> Step:
        phase = self.phase
        if phase is EvalComputation.Phase.INIT:
            expr = self.expr
            if isinstance(expr, Num):
                return Completed(expr.value)
            if isinstance(expr, Add):
                self.operands = iter(expr.operands)
                self.phase = EvalComputation.Phase.ADD
                return self._next_operand()
            self.phase = EvalComputation.Phase.MUL1
            return Suspended(expr.lhs)
        if phase is EvalComputation.Phase.ADD:
            self.total += value
            return self._next_operand()
        if phase is EvalComputation.Phase.MUL1:
            self.lhs = value
            self.phase = EvalComputation.Phase.MUL2
            assert isinstance(self.expr, Mul)
            return Suspended(self.expr.rhs)
        return Completed(self.lhs * value)

    def _next_operand(self) -> Step:
        assert self.operands is not None
        operand = next(self.operands, None)
        if operand is None:
            return Completed(self.total)
        return Suspended(operand)


def eval_manual(expr: Expr) -> Number:
    return drive(expr, EvalComputation)


class _Kont(Enum):
    ADD = auto()   # (ADD, operand iterator, running total)
    MUL1 = auto()  # (MUL1, rhs)
    MUL2 = auto()  # (MUL2, lhs value)


def eval_loop(expr: Expr) -> Number:
    stack: list[tuple[Any, ...]] = []
    control: Expr | None = expr
    value: Number = 0
    while True:
        if control is not None:
            if isinstance(control, Num):
                value, control = control.value, None
            elif isinstance(control, Add):
                operands = iter(control.operands)
                first = next(operands, None)
                if first is None:
                    value, control = 0, None
                else:
                    stack.append((_Kont.ADD, operands, 0))
                    control = first
            else:
                stack.append((_Kont.MUL1, control.rhs))
                control = control.lhs
            continue
        if not stack:
            return value
        kont = stack.pop()
        if kont[0] is _Kont.ADD:
            _, operands, total = kont
            total += value
            operand = next(operands, None)
            if operand is None:
                value = total
            else:
                stack.append((_Kont.ADD, operands, total))
                control = operand
        elif kont[0] is _Kont.MUL1:
            stack.append((_Kont.MUL2, value))
            control = kont[1]
        else:
            value = kont[1] * value


# ============================================
# Example expressions, paired with their value
# ============================================

def simple() -> tuple[Expr, int]:
    return Add(Num(1), Mul(Num(2), Num(3))), 7


def triangular(n: int) -> tuple[Expr, int]:
    """Left-nested sums ``((0 + 1) + 2) + ... + (n - 1)``."""
    expr: Expr = Num(0)
    for i in range(1, n):
        expr = Add(expr, Num(i))
    return expr, n * (n - 1) // 2


def complete_tree(n: int) -> tuple[Expr, int]:
    return complete_tree_with(n, lambda: (Num(1), 1))


def complete_tree_with(n: int, leaf: Any) -> tuple[Expr, int]:
    if n == 0:
        return leaf()
    lhs, lhs_value = complete_tree_with(n - 1, leaf)
    rhs, rhs_value = complete_tree_with(n - 1, leaf)
    return Add(lhs, rhs), lhs_value + rhs_value


def mixed(n: int) -> tuple[Expr, int]:
    """A complete tree of depth ``n`` whose leaves are deep triangular sums."""
    m = 10 * 2 ** n
    return complete_tree_with(n, lambda: triangular(m))
