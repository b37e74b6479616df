"""
Tests for the frame stack driver.

These tests verify:
1. Results and evaluation order match native recursion
2. Deep recursion runs without growing the Python stack
3. Exceptions travel through paused frames like through native callers
4. Aborted drives close every pending frame
5. Statistics and logging
"""

from __future__ import annotations

import inspect
import logging

import pytest

from stack_safe import (
    ComputationState,
    FrameStack,
    GeneratorComputation,
    ProtocolViolationError,
    drive,
    recurse,
)
from stack_safe.algorithms import triangular


# ============================================
# Results and order
# ============================================


class TestResults:
    def test_immediate_completion(self, driver):
        def leaf(n):
            return n * 2
            yield

        assert driver(21, leaf) == 42

    def test_single_level(self, driver):
        def twice(n):
            if n == 0:
                return 1
            return 2 * (yield driver.request(n - 1))

        assert driver(10, twice) == 1024

    def test_deep_recursion(self, driver):
        def count(n):
            if n == 0:
                return 0
            return 1 + (yield driver.request(n - 1))

        assert driver(100_000, count) == 100_000

    def test_matches_native_order(self, driver):
        native: list[int] = []
        trampolined: list[int] = []

        def fib_native(n: int) -> int:
            native.append(n)
            if n < 2:
                return n
            return fib_native(n - 1) + fib_native(n - 2)

        def fib(n):
            trampolined.append(n)
            if n < 2:
                return n
            a = yield driver.request(n - 1)
            b = yield driver.request(n - 2)
            return a + b

        assert driver(15, fib) == fib_native(15) == 610
        assert trampolined == native

    def test_constructor_called_per_request(self, driver):
        constructed: list[int] = []

        def make(n):
            constructed.append(n)

            def body():
                if n == 0:
                    return "leaf"
                return (yield driver.request(n - 1))

            return body()

        assert driver(3, make) == "leaf"
        assert constructed == [3, 2, 1, 0]


class TestRecurseDecorator:
    def test_decorated_function_is_reusable(self):
        assert triangular.stack_safe(100) == 5050
        assert triangular.stack_safe(100) == 5050

    def test_exposes_constructor(self):
        @recurse
        def halve(n):
            if n <= 1:
                return 0
            return 1 + (yield n // 2)

        assert halve.__name__ == "halve"
        assert halve(1024) == 10
        assert inspect.isgenerator(halve.make(4))

    def test_deep_triangular(self):
        assert triangular.stack_safe(100_000) == triangular.closed_form(100_000)


# ============================================
# Statistics
# ============================================


class TestDriveStats:
    def test_counters(self, stats):
        result = drive(10, triangular.stack_safe.make, stats=stats)

        assert result == 55
        assert stats.total_frames_created == 11
        assert stats.max_stack_depth == 10
        assert stats.total_steps == 22
        assert stats.tail_calls == 0
        assert stats.total_exceptions_caught == 0

    def test_decorator_forwards_stats(self, stats):
        triangular.stack_safe(5, stats=stats)
        assert stats.max_stack_depth == 5

    def test_timing(self, stats):
        assert stats.duration_ns is None
        triangular.stack_safe(5, stats=stats)
        assert stats.duration_ns is not None
        assert stats.duration_ns >= 0

    def test_finish_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="stack_safe.driver"):
            triangular.stack_safe(3)

        messages = [r.getMessage() for r in caplog.records if r.name == "stack_safe.driver"]
        assert any("drive finished" in m and "max_depth=3" in m for m in messages)


class TestFrameStack:
    def test_push_tracks_high_water_mark(self):
        frames = FrameStack()

        def gen():
            yield

        a, b = GeneratorComputation(gen()), GeneratorComputation(gen())
        frames.push(a)
        frames.push(b)
        assert frames.pop() is b
        assert frames.depth == 1
        assert frames.stats.max_stack_depth == 2

    def test_pop_empty(self):
        assert FrameStack().pop() is None


# ============================================
# Exceptions
# ============================================


class TestExceptionRouting:
    def test_uncaught_exception_propagates(self, driver):
        def fail_at_bottom(n):
            if n == 0:
                raise ValueError("bottom")
            return (yield driver.request(n - 1))

        with pytest.raises(ValueError, match="bottom"):
            driver(50, fail_at_bottom)

    def test_parent_catches_child_exception(self, driver, stats):
        def guarded(n):
            if n == 0:
                raise KeyError("missing")
            if n == 3:
                try:
                    return (yield driver.request(n - 1))
                except KeyError:
                    return "recovered"
            return (yield driver.request(n - 1))

        assert driver(10, guarded, stats) == "recovered"
        assert stats.total_exceptions_caught == 1

    def test_recovered_parent_can_suspend_again(self, driver):
        def retry(n):
            if n < 0:
                raise ArithmeticError("negative")
            if n == 0:
                return "base"
            try:
                return (yield driver.request(n - 5))
            except ArithmeticError:
                return (yield driver.request(0))

        assert driver(3, retry) == "base"

    def test_exception_raised_while_handling(self, driver):
        def translate(n):
            if n == 0:
                raise KeyError("inner")
            try:
                return (yield driver.request(n - 1))
            except KeyError as exc:
                raise RuntimeError("outer") from exc

        with pytest.raises(RuntimeError, match="outer"):
            driver(5, translate)

    def test_deep_exception_does_not_overflow(self, driver):
        def fail_at_bottom(n):
            if n == 0:
                raise ValueError("bottom")
            return (yield driver.request(n - 1))

        with pytest.raises(ValueError):
            driver(20_000, fail_at_bottom)

    def test_finally_blocks_run_innermost_first(self, driver):
        order: list[int] = []

        def unwinding(n):
            try:
                if n == 0:
                    raise ValueError("bottom")
                return (yield driver.request(n - 1))
            finally:
                order.append(n)

        with pytest.raises(ValueError):
            driver(4, unwinding)
        assert order == [0, 1, 2, 3, 4]


class TestProtocolViolation:
    def test_completed_computation_reused(self, driver):
        def leaf():
            return "leaf"
            yield

        shared = GeneratorComputation(leaf())

        def make(n):
            if n == 0:
                return shared

            def body():
                try:
                    first = yield driver.request(0)
                    second = yield driver.request(0)
                    return first + second
                except Exception:
                    return "swallowed"

            return body()

        with pytest.raises(ProtocolViolationError):
            driver(1, make)

    def test_paused_frames_closed_on_violation(self, driver):
        closed: list[int] = []
        def leaf():
            return None
            yield

        shared = GeneratorComputation(leaf())

        def make(n):
            if n == 0:
                return shared

            def body():
                try:
                    yield driver.request(n - 1)
                    yield driver.request(0)
                finally:
                    closed.append(n)

            return body()

        with pytest.raises(ProtocolViolationError):
            driver(3, make)
        assert closed == [1, 2, 3]
        assert shared.state == ComputationState.COMPLETED

    def test_invalid_constructor_result(self, driver):
        def make(n):
            return n

        with pytest.raises(TypeError, match="Constructor returned invalid type"):
            driver(1, make)


class TestAbort:
    def test_keyboard_interrupt_closes_frames(self, driver):
        closed: list[int] = []

        def interrupted(n):
            try:
                if n == 0:
                    raise KeyboardInterrupt
                return (yield driver.request(n - 1))
            finally:
                closed.append(n)

        with pytest.raises(KeyboardInterrupt):
            driver(3, interrupted)
        assert closed == [0, 1, 2, 3]

    def test_keyboard_interrupt_is_not_routed(self, driver):
        def interrupted(n):
            if n == 0:
                raise KeyboardInterrupt
            try:
                return (yield driver.request(n - 1))
            except Exception:
                return "swallowed"

        with pytest.raises(KeyboardInterrupt):
            driver(2, interrupted)
