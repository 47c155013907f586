"""
Unit Tests for States and Actions

Tests the equality and hashing contract of grid and terminal states, and
action parsing.
"""

import pytest
import numpy as np

from gridmdp.errors import InvalidActionError, InvalidStateError
from gridmdp.states import GridState, TerminalState, TERMINAL, Action


class TestGridState:
    """Tests for non-terminal states."""

    def test_equal_positions_are_equal(self):
        assert GridState(3, 4) == GridState(3, 4)
        assert hash(GridState(3, 4)) == hash(GridState(3, 4))

    def test_different_positions_differ(self):
        assert GridState(3, 4) != GridState(4, 3)

    def test_not_done(self):
        assert GridState(1, 1).done is False

    def test_position(self):
        assert GridState(2, 7).position == (2, 7)

    def test_numpy_integers_accepted(self):
        """Test numpy integer coordinates behave like Python ints."""
        s = GridState(np.int64(3), np.int32(4))
        assert s == GridState(3, 4)
        assert hash(s) == hash(GridState(3, 4))
        assert type(s.x) is int

    def test_out_of_grid_coordinates_allowed(self):
        """Test candidate successors may lie off the grid."""
        assert GridState(0, -1).position == (0, -1)

    def test_non_integer_coordinate_error(self):
        with pytest.raises(InvalidStateError, match="must be an integer"):
            GridState(1.5, 2)

    def test_bool_coordinate_error(self):
        with pytest.raises(InvalidStateError, match="must be an integer"):
            GridState(True, 2)

    def test_immutable(self):
        s = GridState(1, 2)
        with pytest.raises(AttributeError):
            s.x = 5


class TestTerminalState:
    """Tests for the absorbing sink."""

    def test_all_terminals_equal(self):
        assert TerminalState() == TerminalState()
        assert TerminalState() == TERMINAL
        assert hash(TerminalState()) == hash(TERMINAL)

    def test_terminal_never_equals_grid_state(self):
        assert TERMINAL != GridState(0, 0)
        assert GridState(0, 0) != TERMINAL

    def test_done(self):
        assert TERMINAL.done is True

    def test_single_entry_in_set(self):
        states = {TERMINAL, TerminalState(), GridState(1, 1), GridState(1, 1)}
        assert len(states) == 2


class TestAction:
    """Tests for the action enum."""

    def test_deltas(self):
        assert Action.RIGHT.delta == (1, 0)
        assert Action.LEFT.delta == (-1, 0)
        assert Action.DOWN.delta == (0, -1)
        assert Action.UP.delta == (0, 1)

    def test_coerce_member(self):
        assert Action.coerce(Action.UP) is Action.UP

    def test_coerce_string(self):
        assert Action.coerce("left") is Action.LEFT
        assert Action.coerce("RIGHT") is Action.RIGHT

    def test_coerce_invalid(self):
        with pytest.raises(InvalidActionError, match="Invalid action"):
            Action.coerce("north")
        with pytest.raises(InvalidActionError, match="Invalid action"):
            Action.coerce(0)
