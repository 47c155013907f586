"""
States and Actions Module

State and action types for the grid world MDP.

States are a tagged variant:
    - GridState(x, y): the agent occupies cell (x, y) of the 1-indexed grid
    - TerminalState(): the single absorbing sink entered after collecting
      a positive reward

Both are frozen dataclasses, so equality and hashing are plain value
semantics. Every TerminalState compares equal to every other one and to
no GridState.

Actions are the four compass directions of the Action enum.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from numbers import Integral
from typing import Tuple, Union

from gridmdp.errors import InvalidActionError, InvalidStateError


@dataclass(frozen=True)
class GridState:
    """
    A non-terminal state: the agent's position on the grid.

    Coordinates are only required to be integers. Candidate successors
    produced by the transition engine may lie outside the grid, so bounds
    are checked by GridWorld rather than here.

    Attributes:
        x: Column, 1 is the left edge.
        y: Row, 1 is the bottom edge.
    """

    x: int
    y: int

    def __post_init__(self) -> None:
        for name in ("x", "y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise InvalidStateError(
                    f"State coordinate {name} must be an integer, got {value!r}"
                )
            object.__setattr__(self, name, int(value))

    @property
    def done(self) -> bool:
        return False

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"GridState({self.x}, {self.y})"


@dataclass(frozen=True)
class TerminalState:
    """The absorbing sink. Carries no position."""

    @property
    def done(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "TerminalState()"


TERMINAL = TerminalState()

State = Union[GridState, TerminalState]


class Action(Enum):
    """Desired direction of travel."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> Tuple[int, int]:
        """(dx, dy) of a successful move in this direction."""
        return _ACTION_DELTAS[self]

    @classmethod
    def coerce(cls, value: Union["Action", str]) -> "Action":
        """
        Interpret value as an Action.

        Args:
            value: An Action member or its string value in any case.

        Returns:
            The matching Action.

        Raises:
            InvalidActionError: If value names no action.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise InvalidActionError(
            f"Invalid action {value!r}. Must be one of {[a.value for a in cls]}"
        )


_ACTION_DELTAS = {
    Action.RIGHT: (1, 0),
    Action.LEFT: (-1, 0),
    Action.DOWN: (0, -1),
    Action.UP: (0, 1),
}


def as_position(value: Union[GridState, Tuple[int, int]]) -> Tuple[int, int]:
    """Return the (x, y) tuple of a GridState or a coordinate pair."""
    if isinstance(value, GridState):
        return value.position
    x, y = value
    return GridState(x, y).position
