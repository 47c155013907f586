"""
GridWorld MDP Module

This module provides the GridWorld class, a stochastic gridworld Markov
Decision Process, and GridWorldConfig, its immutable configuration.

The grid is 1-indexed: cells run from (1, 1) at the bottom left to
(width, height) at the top right. The dynamics are:
    - The intended move succeeds with probability tprob; the remaining mass
      is spread evenly over the other three directions
    - Noise that would leave the grid is redistributed over the remaining
      noise directions
    - An intended move off the grid is a certain bump: the agent stays put
    - Any action taken from a cell with a positive reward leads to the
      terminal state, which absorbs with zero reward

Rewards are earned when leaving a reward cell, plus bounds_penalty when
the attempted destination is off the grid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from numbers import Integral, Real
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

import numpy as np

from gridmdp.distributions import GridWorldDistribution
from gridmdp.errors import (
    ConfigurationError,
    InvalidStateError,
    PreconditionViolation,
)
from gridmdp.states import (
    TERMINAL,
    Action,
    GridState,
    State,
    TerminalState,
    as_position,
)

logger = logging.getLogger(__name__)

Position = Tuple[int, int]

# Slot order of every non-terminal distribution
RIGHT, LEFT, DOWN, UP, STAY = range(5)

ACTION_SLOTS: Dict[Action, int] = {
    Action.RIGHT: RIGHT,
    Action.LEFT: LEFT,
    Action.DOWN: DOWN,
    Action.UP: UP,
}


@dataclass(frozen=True)
class GridWorldConfig:
    """
    Immutable configuration of a GridWorld.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        reward_states: Positions of the reward cells, as (x, y) pairs or
            GridStates. Duplicates accumulate.
        reward_values: Reward for leaving each cell in reward_states.
            Cells with a positive value are terminal-inducing.
        bounds_penalty: Reward added when the attempted destination is off
            the grid.
        tprob: Probability of moving in the intended direction.
        discount_factor: Discount applied per step.

    Raises:
        ConfigurationError: If any field is out of range or malformed.

    Example:
        >>> config = GridWorldConfig(width=5, height=4, tprob=0.8)
        >>> mdp = GridWorld(config)
    """

    width: int = 10
    height: int = 10
    reward_states: Tuple[Position, ...] = ((4, 3), (4, 6), (9, 3), (8, 8))
    reward_values: Tuple[float, ...] = (-10.0, -5.0, 10.0, 3.0)
    bounds_penalty: float = -1.0
    tprob: float = 0.7
    discount_factor: float = 0.95

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral) or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a positive integer, got {value!r}"
                )
            object.__setattr__(self, name, int(value))

        for name in ("bounds_penalty", "tprob", "discount_factor"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ConfigurationError(f"{name} must be a real number, got {value!r}")
            object.__setattr__(self, name, float(value))

        if not 0.0 <= self.tprob <= 1.0:
            raise ConfigurationError(f"tprob must be in [0, 1], got {self.tprob}")
        if not 0.0 <= self.discount_factor <= 1.0:
            raise ConfigurationError(
                f"discount_factor must be in [0, 1], got {self.discount_factor}"
            )

        if len(self.reward_states) != len(self.reward_values):
            raise ConfigurationError(
                f"reward_states has {len(self.reward_states)} entries but "
                f"reward_values has {len(self.reward_values)}"
            )

        positions = []
        for entry in self.reward_states:
            try:
                pos = as_position(entry)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid reward state {entry!r}: {e}") from e
            if not (1 <= pos[0] <= self.width and 1 <= pos[1] <= self.height):
                raise ConfigurationError(
                    f"Reward state {pos} lies outside the {self.width}x{self.height} grid"
                )
            positions.append(pos)

        values = []
        for value in self.reward_values:
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ConfigurationError(f"Reward value must be a real number, got {value!r}")
            values.append(float(value))

        object.__setattr__(self, "reward_states", tuple(positions))
        object.__setattr__(self, "reward_values", tuple(values))

    @property
    def reward_table(self) -> Tuple[Tuple[Position, float], ...]:
        """Ordered (position, value) pairs."""
        return tuple(zip(self.reward_states, self.reward_values))


class GridWorld:
    """
    A stochastic gridworld MDP with a single absorbing terminal state.

    There are width * height grid states plus the terminal state, and four
    actions: up, down, left, right. All queries are pure functions of the
    configuration; each call returns fresh objects.

    Attributes:
        config: The GridWorldConfig in use.
        width: Number of columns.
        height: Number of rows.
        n_states: width * height + 1 (the terminal state is last).
        n_actions: Number of actions (always 4).
        terminal_positions: Positions whose next step is certainly terminal.

    Example:
        >>> mdp = GridWorld(width=10, height=10)
        >>> d = mdp.transition(GridState(1, 5), Action.RIGHT)
        >>> [(s, p) for s, p in d.items()]
    """

    ACTIONS: Tuple[Action, ...] = (Action.UP, Action.DOWN, Action.LEFT, Action.RIGHT)

    def __init__(self, config: Optional[GridWorldConfig] = None, **overrides) -> None:
        """
        Initialize the GridWorld.

        Args:
            config: Configuration to use. If None, a default config is built.
            **overrides: GridWorldConfig fields overriding those of config.

        Raises:
            ConfigurationError: If the resulting configuration is invalid.
            TypeError: If an override names no GridWorldConfig field.
        """
        if config is None:
            config = GridWorldConfig(**overrides)
        elif overrides:
            config = replace(config, **overrides)

        self.config: GridWorldConfig = config
        self.width: int = config.width
        self.height: int = config.height
        self.n_states: int = config.width * config.height + 1
        self.n_actions: int = len(self.ACTIONS)

        self._position_rewards: Dict[Position, float] = {}
        for pos, value in config.reward_table:
            self._position_rewards[pos] = self._position_rewards.get(pos, 0.0) + value

        self.terminal_positions: FrozenSet[Position] = frozenset(
            pos for pos, value in config.reward_table if value > 0.0
        )

        logger.debug(
            "Built %dx%d grid world with %d reward cells (%d terminal), tprob=%.3f",
            self.width, self.height, len(self._position_rewards),
            len(self.terminal_positions), config.tprob,
        )

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def in_bounds(self, x: Union[int, State], y: Optional[int] = None) -> bool:
        """
        Check whether a position lies on the grid.

        Args:
            x: Column index, or a state. The terminal state counts as in bounds.
            y: Row index. Omit when passing a state.

        Returns:
            True iff 1 <= x <= width and 1 <= y <= height.
        """
        if y is None:
            state = x
            if state.done:
                return True
            x, y = state.x, state.y
        return 1 <= x <= self.width and 1 <= y <= self.height

    def _check_state(self, state: State) -> State:
        if not isinstance(state, (GridState, TerminalState)):
            raise InvalidStateError(f"Invalid state {state!r}. Expected a GridState or TERMINAL")
        if not self.in_bounds(state):
            raise InvalidStateError(
                f"Invalid state {state!r}. Must satisfy 1 <= x <= {self.width} "
                f"and 1 <= y <= {self.height}"
            )
        return state

    # ------------------------------------------------------------------
    # Rewards
    # ------------------------------------------------------------------

    def reward(
        self,
        state: State,
        action: Optional[Union[Action, str]] = None,
        next_state: Optional[State] = None,
    ) -> float:
        """
        Compute the reward for leaving state.

        With next_state, returns the reward of the transition
        (state, action) -> next_state: the summed reward-table values at
        state's position, plus bounds_penalty if next_state is off the grid.
        Without action and next_state, returns only the position reward,
        which requires a zero bounds_penalty.

        Args:
            state: Current state.
            action: Action taken. Does not affect the value.
            next_state: Attempted destination, possibly off the grid.

        Returns:
            The reward. Always 0.0 from the terminal state.

        Raises:
            InvalidStateError: If state is not on the grid.
            PreconditionViolation: If called without next_state while
                bounds_penalty is non-zero.
            TypeError: If action is given without next_state.
        """
        self._check_state(state)

        if next_state is None:
            if action is not None:
                raise TypeError("reward() takes next_state whenever action is given")
            if self.config.bounds_penalty != 0.0:
                raise PreconditionViolation(
                    "reward(state) requires bounds_penalty == 0.0, "
                    f"got {self.config.bounds_penalty}"
                )
            if state.done:
                return 0.0
            return self._position_rewards.get(state.position, 0.0)

        if action is not None:
            Action.coerce(action)
        if state.done:
            return 0.0

        r = self._position_rewards.get(state.position, 0.0)
        if not self.in_bounds(next_state):
            r += self.config.bounds_penalty
        return r

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def transition(self, state: State, action: Union[Action, str]) -> GridWorldDistribution:
        """
        Compute the distribution over next states.

        Slots are right, left, down, up, stay. The terminal state and
        terminal-inducing cells lead to the terminal state with certainty.
        Otherwise the intended direction gets tprob and the other three
        directions share the rest, with off-grid noise redistributed over
        the remaining noise directions. An intended move off the grid keeps
        the agent in place with certainty.

        Args:
            state: Current state.
            action: Intended direction.

        Returns:
            A new GridWorldDistribution.

        Raises:
            InvalidStateError: If state is not on the grid.
            InvalidActionError: If action is not an Action.
        """
        self._check_state(state)
        action = Action.coerce(action)

        if state.done:
            return GridWorldDistribution.certain(TERMINAL)

        x, y = state.x, state.y
        neighbors: List[State] = [
            GridState(x + 1, y),
            GridState(x - 1, y),
            GridState(x, y - 1),
            GridState(x, y + 1),
            GridState(x, y),
        ]
        probs = np.zeros(len(neighbors), dtype=np.float64)

        if state.position in self.terminal_positions:
            neighbors[STAY] = TERMINAL
            probs[STAY] = 1.0
            return GridWorldDistribution(neighbors, probs)

        target = ACTION_SLOTS[action]
        if not self.in_bounds(neighbors[target]):
            probs[STAY] = 1.0
            return GridWorldDistribution(neighbors, probs)

        tprob = self.config.tprob
        noise_slots = [i for i in (RIGHT, LEFT, DOWN, UP) if i != target]
        open_slots = [i for i in noise_slots if self.in_bounds(neighbors[i])]
        blocked = len(noise_slots) - len(open_slots)

        probs[target] = tprob
        if open_slots:
            probs[open_slots] = (1.0 - tprob) / len(open_slots)
        else:
            probs[STAY] = 1.0 - tprob

        if blocked:
            logger.debug(
                "%r %s: %d noise direction(s) off grid, redistributed",
                state, action.value, blocked,
            )
        return GridWorldDistribution(neighbors, probs)

    def step(
        self,
        state: State,
        action: Union[Action, str],
        rng: Optional[np.random.Generator] = None,
    ) -> Tuple[State, float]:
        """
        Sample one transition.

        Args:
            state: Current state.
            action: Intended direction.
            rng: Random number generator. If None, uses numpy's default.

        Returns:
            Tuple of (next_state, reward).

        Example:
            >>> mdp = GridWorld()
            >>> next_state, r = mdp.step(GridState(9, 3), Action.UP)
            >>> next_state, r
            (TerminalState(), 10.0)
        """
        next_state = self.transition(state, action).sample(rng)
        return next_state, self.reward(state, action, next_state)

    # ------------------------------------------------------------------
    # Spaces and indexing
    # ------------------------------------------------------------------

    def states(self) -> List[State]:
        """
        List every state in index order.

        Grid states come first with x varying fastest, followed by the
        terminal state.
        """
        s: List[State] = [
            GridState(x, y)
            for y in range(1, self.height + 1)
            for x in range(1, self.width + 1)
        ]
        s.append(TERMINAL)
        return s

    def actions(self, state: Optional[State] = None) -> List[Action]:
        """List the actions; every action is available in every state."""
        return list(self.ACTIONS)

    def state_index(self, state: State) -> int:
        """
        Map a state to its 1-based index.

        Returns:
            x + (y - 1) * width for grid states, n_states for the terminal.
        """
        self._check_state(state)
        if state.done:
            return self.n_states
        return state.x + (state.y - 1) * self.width

    def state_from_index(self, index: int) -> State:
        """Inverse of state_index."""
        if not 1 <= index <= self.n_states:
            raise InvalidStateError(f"Invalid state index {index}. Must be in [1, {self.n_states}]")
        if index == self.n_states:
            return TERMINAL
        y, x = divmod(index - 1, self.width)
        return GridState(x + 1, y + 1)

    def action_index(self, action: Union[Action, str]) -> int:
        """1-based position of action in actions()."""
        return self.ACTIONS.index(Action.coerce(action)) + 1

    def is_terminal(self, state: State) -> bool:
        return state.done

    def discount(self) -> float:
        return self.config.discount_factor

    def initial_state(self, rng: Optional[np.random.Generator] = None) -> GridState:
        """
        Draw a uniformly random grid cell.

        Args:
            rng: Random number generator. If None, uses numpy's default.
        """
        if rng is None:
            rng = np.random.default_rng()
        x = int(rng.integers(1, self.width + 1))
        y = int(rng.integers(1, self.height + 1))
        return GridState(x, y)

    def vectorize(self, state: State) -> np.ndarray:
        """Feature vector [x, y] of a state; [0, 0] for the terminal."""
        if state.done:
            return np.zeros(2, dtype=np.float64)
        return np.array([state.x, state.y], dtype=np.float64)

    # ------------------------------------------------------------------
    # Tabular views
    # ------------------------------------------------------------------

    def get_transition_kernel(self) -> np.ndarray:
        """
        Build the transition kernel P(s' | s, a).

        Returns:
            Numpy array of shape (n_states, n_actions, n_states) indexed by
            state_index - 1 and action_index - 1. Each P[s, a] sums to 1.
        """
        P = np.zeros((self.n_states, self.n_actions, self.n_states), dtype=np.float64)

        for s, state in enumerate(self.states()):
            for a, action in enumerate(self.ACTIONS):
                for next_state, p in self.transition(state, action).items():
                    P[s, a, self.state_index(next_state) - 1] += p

        return P

    def get_expected_reward(self) -> np.ndarray:
        """
        Get the expected reward for each (state, action) pair.

        R[s, a] = sum over s' of P(s' | s, a) * reward(s, a, s'). Off-grid
        candidates always carry zero probability, so the bounds penalty
        does not enter this expectation.

        Returns:
            Numpy array of shape (n_states, n_actions).
        """
        R = np.zeros((self.n_states, self.n_actions), dtype=np.float64)

        for s, state in enumerate(self.states()):
            for a, action in enumerate(self.ACTIONS):
                R[s, a] = sum(
                    p * self.reward(state, action, next_state)
                    for next_state, p in self.transition(state, action).items()
                )

        return R

    def __repr__(self) -> str:
        """Return a string representation of the MDP."""
        return (
            f"GridWorld(width={self.width}, height={self.height}, "
            f"n_states={self.n_states}, tprob={self.config.tprob}, "
            f"discount={self.config.discount_factor})"
        )
