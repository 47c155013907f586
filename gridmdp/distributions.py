"""
Distributions Module

GridWorldDistribution holds the successor distribution returned by
GridWorld.transition: up to five candidate states (right, left, down, up,
stay) paired with their probabilities.

Each transition query allocates a new instance; distributions are never
reused or mutated after construction.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from gridmdp.states import State


class GridWorldDistribution:
    """
    A finite distribution over successor states.

    Slots keep the order they were built in, including zero-probability
    slots. Iteration, ``items`` and ``len`` only cover the support, i.e.
    slots with positive probability.

    Attributes:
        neighbors: Tuple of candidate states, one per slot.
        probabilities: Copy of the slot probabilities as a float64 array.

    Example:
        >>> d = mdp.transition(GridState(1, 5), Action.RIGHT)
        >>> d.probability_of(GridState(2, 5))
        0.7
    """

    def __init__(self, neighbors: Sequence[State], probs: Sequence[float]) -> None:
        if len(neighbors) != len(probs):
            raise ValueError(
                f"Got {len(neighbors)} neighbors but {len(probs)} probabilities"
            )
        self._neighbors: Tuple[State, ...] = tuple(neighbors)
        self._probs: np.ndarray = np.array(probs, dtype=np.float64)
        self._probs.setflags(write=False)

    @classmethod
    def certain(cls, state: State) -> "GridWorldDistribution":
        """Distribution putting all mass on a single state."""
        return cls((state,), (1.0,))

    @property
    def neighbors(self) -> Tuple[State, ...]:
        return self._neighbors

    @property
    def probabilities(self) -> np.ndarray:
        return self._probs.copy()

    def __iter__(self) -> Iterator[State]:
        for state, p in zip(self._neighbors, self._probs):
            if p > 0.0:
                yield state

    def __len__(self) -> int:
        return int(np.count_nonzero(self._probs > 0.0))

    def items(self) -> Iterator[Tuple[State, float]]:
        """Yield (state, probability) pairs over the support."""
        for state, p in zip(self._neighbors, self._probs):
            if p > 0.0:
                yield state, float(p)

    def probability_of(self, state: State) -> float:
        """
        Probability of transitioning to state.

        Args:
            state: Any state; states outside the support have probability 0.

        Returns:
            Summed probability of all slots equal to state.
        """
        total = 0.0
        for candidate, p in zip(self._neighbors, self._probs):
            if candidate == state:
                total += float(p)
        return total

    def sample(self, rng: Optional[np.random.Generator] = None) -> State:
        """
        Draw a successor state.

        Args:
            rng: Random number generator. If None, uses numpy's default.

        Returns:
            A state from the support, chosen with the stored probabilities.
        """
        if rng is None:
            rng = np.random.default_rng()
        idx = rng.choice(len(self._neighbors), p=self._probs)
        return self._neighbors[int(idx)]

    def __repr__(self) -> str:
        support = ", ".join(f"{s!r}: {p:.3f}" for s, p in self.items())
        return f"GridWorldDistribution({{{support}}})"
