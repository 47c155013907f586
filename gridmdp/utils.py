"""
Utility Module

This module provides helper functions for simulation, inspection and
visualization of GridWorld MDPs.

Key functions:
    - simulate: Run an episode under a tabular policy
    - discounted_return: Discounted sum of a reward sequence
    - print_transition_info: Display transition distributions for debugging
    - plot_values: Draw a value function (and optionally a policy) on the grid
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np

from gridmdp.states import Action, State

if TYPE_CHECKING:
    from gridmdp.grid_world import GridWorld


def simulate(
    mdp: "GridWorld",
    policy: np.ndarray,
    T: int,
    start_state: Optional[State] = None,
    rng: Optional[np.random.Generator] = None
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Simulate an episode in the MDP under a given policy.

    Starting from an initial state, samples actions according to the policy
    and samples transitions from the MDP for up to T steps. The episode ends
    early on the step that enters the terminal state.

    Args:
        mdp: The GridWorld MDP.
        policy: Policy array of shape (n_states, n_actions).
        T: Maximum number of timesteps to simulate.
        start_state: Initial state. If None, drawn with mdp.initial_state.
        rng: Random number generator. If None, uses numpy's default.

    Returns:
        Tuple of (states, actions, rewards) for an episode of n <= T steps:
            - states: Array of shape (n+1,) with 1-based state indices.
            - actions: Array of shape (n,) with 1-based action indices.
            - rewards: Array of shape (n,) with rewards received.

    Example:
        >>> mdp = GridWorld()
        >>> pi = uniform_policy(mdp)
        >>> states, actions, rewards = simulate(mdp, pi, T=100)
        >>> print(discounted_return(rewards, mdp.discount()))
    """
    if rng is None:
        rng = np.random.default_rng()

    if policy.shape != (mdp.n_states, mdp.n_actions):
        raise ValueError(
            f"Policy shape {policy.shape} doesn't match expected "
            f"({mdp.n_states}, {mdp.n_actions})"
        )
    if T < 0:
        raise ValueError(f"T must be non-negative, got {T}")

    state = mdp.initial_state(rng) if start_state is None else start_state
    states = [mdp.state_index(state)]
    actions = []
    rewards = []

    for _ in range(T):
        if mdp.is_terminal(state):
            break

        a = rng.choice(mdp.n_actions, p=policy[states[-1] - 1])
        action = mdp.ACTIONS[a]

        state, r = mdp.step(state, action, rng)
        states.append(mdp.state_index(state))
        actions.append(int(a) + 1)
        rewards.append(r)

    return (
        np.array(states, dtype=np.int64),
        np.array(actions, dtype=np.int64),
        np.array(rewards, dtype=np.float64),
    )


def discounted_return(rewards: Sequence[float], discount: float) -> float:
    """
    Compute Σ_t discount^t * rewards[t].

    Example:
        >>> discounted_return([1.0, 1.0, 1.0], 0.5)
        1.75
    """
    rewards = np.asarray(rewards, dtype=np.float64)
    return float(np.sum(rewards * discount ** np.arange(len(rewards))))


def print_transition_info(mdp: "GridWorld", state: State) -> None:
    """
    Print the transition distribution of every action from a state.

    Args:
        mdp: The GridWorld MDP.
        state: State to inspect.

    Example:
        >>> print_transition_info(GridWorld(), GridState(1, 1))
    """
    print(f"Transitions from {state!r} (index {mdp.state_index(state)}):")
    print("-" * 50)

    for action in mdp.actions(state):
        dist = mdp.transition(state, action)
        print(f"  {action.value:6s}")
        for next_state, p in dist.items():
            r = mdp.reward(state, action, next_state)
            status = ""
            if next_state == state:
                status = "(stays in place)"
            elif mdp.is_terminal(next_state):
                status = "(terminal)"
            print(f"      -> {next_state!r:18s} p={p:.3f} r={r:+.2f} {status}")


def _value_colors(values: np.ndarray, scale: float = 10.0) -> np.ndarray:
    """RGB in [0, 1]: green for positive values, red for negative, white at 0."""
    fade = 1.0 - np.minimum(1.0, np.abs(values) / scale)
    rgb = np.ones(values.shape + (3,), dtype=np.float64)
    positive = values >= 0
    rgb[positive, 0] = fade[positive]
    rgb[positive, 2] = fade[positive]
    rgb[~positive, 1] = fade[~positive]
    rgb[~positive, 2] = fade[~positive]
    return rgb


def plot_values(
    mdp: "GridWorld",
    values: np.ndarray,
    policy: Optional[Union[np.ndarray, Sequence[Union[Action, str]]]] = None,
    ax=None,
    title: Optional[str] = None,
    current_state: Optional[State] = None,
    scale: float = 10.0,
    figsize: Tuple[float, float] = (8, 8)
):
    """
    Visualize a value function on the grid using matplotlib.

    Each cell is shaded green for positive values and red for negative ones,
    saturating at |value| == scale, and annotated with its value. The
    terminal state's value is not drawn.

    Args:
        mdp: The GridWorld MDP.
        values: Array of shape (n_states,) or (width * height,) indexed by
            state_index - 1.
        policy: Either a policy array of shape (n_states, n_actions), drawn
            greedily, or a sequence of actions indexed like values.
        ax: Matplotlib axes to plot on. If None, creates new figure.
        title: Title for the plot.
        current_state: Grid state to highlight in orange.
        scale: Absolute value at which colors saturate.
        figsize: Figure size if creating new figure.

    Returns:
        Matplotlib axes object.

    Raises:
        ValueError: If values or policy have the wrong length.
    """
    import matplotlib.pyplot as plt

    n_cells = mdp.width * mdp.height
    values = np.asarray(values, dtype=np.float64)
    if values.shape not in ((n_cells,), (mdp.n_states,)):
        raise ValueError(
            f"values shape {values.shape} doesn't match expected "
            f"({n_cells},) or ({mdp.n_states},)"
        )

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)

    # Row y-1 of the image holds cells (1..width, y)
    grid_values = values[:n_cells].reshape(mdp.height, mdp.width)
    ax.imshow(
        _value_colors(grid_values, scale),
        origin='lower',
        extent=(0.5, mdp.width + 0.5, 0.5, mdp.height + 0.5),
        interpolation='nearest',
    )

    for x in range(mdp.width + 1):
        ax.axvline(x + 0.5, color='black', linewidth=0.5)
    for y in range(mdp.height + 1):
        ax.axhline(y + 0.5, color='black', linewidth=0.5)

    if current_state is not None and not mdp.is_terminal(current_state):
        ax.add_patch(plt.Rectangle(
            (current_state.x - 0.5, current_state.y - 0.5), 1, 1,
            facecolor='orange', alpha=0.6
        ))

    cells = mdp.states()[:n_cells]
    for i, state in enumerate(cells):
        ax.text(
            state.x - 0.45, state.y - 0.45, f"{grid_values.flat[i]:0.2f}",
            ha='left', va='bottom', fontsize=8
        )

    if policy is not None:
        if isinstance(policy, np.ndarray) and policy.ndim == 2:
            if policy.shape != (mdp.n_states, mdp.n_actions):
                raise ValueError(
                    f"Policy shape {policy.shape} doesn't match expected "
                    f"({mdp.n_states}, {mdp.n_actions})"
                )
            chosen = [mdp.ACTIONS[a] for a in np.argmax(policy, axis=1)]
        else:
            chosen = [Action.coerce(a) for a in policy]
        if len(chosen) < n_cells:
            raise ValueError(f"Policy has {len(chosen)} entries, expected at least {n_cells}")

        for state, action in zip(cells, chosen):
            dx, dy = action.delta
            ax.arrow(
                state.x - 0.15 * dx, state.y - 0.15 * dy, 0.3 * dx, 0.3 * dy,
                head_width=0.15, head_length=0.1, length_includes_head=True,
                color='gray'
            )

    ax.set_xlim(0.5, mdp.width + 0.5)
    ax.set_ylim(0.5, mdp.height + 0.5)
    ax.set_xticks(range(1, mdp.width + 1))
    ax.set_yticks(range(1, mdp.height + 1))
    ax.set_xlabel('x')
    ax.set_ylabel('y')

    if title:
        ax.set_title(title)

    return ax
