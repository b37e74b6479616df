"""Tests for call markers and the auxiliary state cell."""

import pytest

from stack_safe import Call, CallKind, ProtocolViolationError, StateCell


class TestCall:
    def test_default_kind_is_normal(self):
        call = Call(5)
        assert call.kind is CallKind.NORMAL
        assert not call.is_tail

    def test_constructors(self):
        assert Call.normal(1) == Call(1, CallKind.NORMAL)
        assert Call.tail(1) == Call(1, CallKind.TAIL)
        assert Call.tail(1).is_tail

    def test_frozen(self):
        with pytest.raises(AttributeError):
            Call.normal(1).arg = 2  # type: ignore[misc]


class TestStateCell:
    def test_take_empties_cell(self):
        cell = StateCell([1])

        value = cell.take()

        assert value == [1]
        assert cell.is_empty

    def test_put_refills_cell(self):
        cell = StateCell(0)
        cell.take()
        cell.put(5)
        assert cell.value == 5
        assert not cell.is_empty

    def test_read_while_handed_out(self):
        cell = StateCell("state")
        cell.take()

        with pytest.raises(ProtocolViolationError, match="handed out"):
            _ = cell.value
        with pytest.raises(ProtocolViolationError):
            cell.take()

    def test_put_into_full_cell(self):
        cell = StateCell(1)
        with pytest.raises(ProtocolViolationError, match="already holds"):
            cell.put(2)

    def test_none_is_a_valid_state(self):
        cell = StateCell(None)
        assert cell.take() is None
        cell.put(None)
        assert cell.value is None

    def test_value_setter(self):
        cell = StateCell(1)
        cell.value = 2
        assert cell.take() == 2

    def test_repr(self):
        cell = StateCell(3)
        assert repr(cell) == "StateCell(3)"
        cell.take()
        assert repr(cell) == "StateCell(<empty>)"
