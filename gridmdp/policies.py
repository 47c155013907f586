"""
Policy Module

This module provides tabular policy helpers for consumers of the GridWorld
MDP, such as planners that work with state-indexed arrays.

A policy π is represented as a numpy array of shape (n_states, n_actions)
where π[s, a] is the probability of taking action a in state s. Rows are
indexed by state_index - 1 and columns by action_index - 1. Each row sums
to 1.

Available policy constructors:
    - uniform_policy: Equal probability for all actions in each state
    - random_policy: Random stochastic policy (via Dirichlet distribution)
    - random_deterministic_policy: Random but deterministic (one action per state)

Utility functions:
    - policy_induced_transition_matrix: Compute P_π from P and π
    - policy_expected_reward: Compute r_π from R and π
    - validate_policy: Check that an array is a well-formed policy
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from gridmdp.grid_world import GridWorld


def _check_policy_shape(mdp: "GridWorld", policy: np.ndarray) -> None:
    if policy.shape != (mdp.n_states, mdp.n_actions):
        raise ValueError(
            f"Policy shape {policy.shape} doesn't match expected "
            f"({mdp.n_states}, {mdp.n_actions})"
        )


def uniform_policy(mdp: "GridWorld") -> np.ndarray:
    """
    Create a uniform policy that assigns equal probability to all actions.

    Args:
        mdp: The GridWorld MDP.

    Returns:
        Policy array of shape (n_states, n_actions) where all entries are
        1/n_actions.

    Example:
        >>> pi = uniform_policy(GridWorld())
        >>> print(pi[0])  # [0.25, 0.25, 0.25, 0.25]
    """
    policy = np.ones((mdp.n_states, mdp.n_actions), dtype=np.float64)
    policy /= mdp.n_actions
    return policy


def random_policy(
    mdp: "GridWorld",
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Create a random stochastic policy.

    Each row is drawn from a symmetric Dirichlet(1, ..., 1), i.e. uniformly
    on the probability simplex.

    Args:
        mdp: The GridWorld MDP.
        rng: Random number generator. If None, uses numpy's default.

    Returns:
        Policy array of shape (n_states, n_actions).
    """
    if rng is None:
        rng = np.random.default_rng()

    policy = rng.dirichlet(np.ones(mdp.n_actions), size=mdp.n_states)
    return policy.astype(np.float64)


def random_deterministic_policy(
    mdp: "GridWorld",
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Create a random deterministic policy.

    For each state, one action is chosen uniformly at random and given
    probability 1.

    Args:
        mdp: The GridWorld MDP.
        rng: Random number generator. If None, uses numpy's default.

    Returns:
        Policy array of shape (n_states, n_actions) with one 1 per row.
    """
    if rng is None:
        rng = np.random.default_rng()

    policy = np.zeros((mdp.n_states, mdp.n_actions), dtype=np.float64)
    chosen = rng.integers(0, mdp.n_actions, size=mdp.n_states)
    policy[np.arange(mdp.n_states), chosen] = 1.0
    return policy


def policy_induced_transition_matrix(
    mdp: "GridWorld",
    policy: np.ndarray,
    P: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Compute the policy-induced transition matrix P_π.

        P_π[s, s'] = Σ_a π[s, a] * P[s, a, s']

    Args:
        mdp: The GridWorld MDP.
        policy: Policy array of shape (n_states, n_actions).
        P: Precomputed transition kernel. If None, built from mdp.

    Returns:
        Transition matrix of shape (n_states, n_states). Each row sums to 1,
        and the terminal row puts all mass on the terminal column.

    Raises:
        ValueError: If policy shape doesn't match the MDP dimensions.
    """
    _check_policy_shape(mdp, policy)
    if P is None:
        P = mdp.get_transition_kernel()

    # s=current state, a=action, t=next state (s')
    return np.einsum('sa,sat->st', policy, P)


def policy_expected_reward(
    mdp: "GridWorld",
    policy: np.ndarray,
    R: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Compute the expected one-step reward for each state under a policy.

        r_π(s) = Σ_a π[s, a] * R[s, a]

    Args:
        mdp: The GridWorld MDP.
        policy: Policy array of shape (n_states, n_actions).
        R: Precomputed expected reward array. If None, built from mdp.

    Returns:
        Array of shape (n_states,).

    Raises:
        ValueError: If policy shape doesn't match the MDP dimensions.
    """
    _check_policy_shape(mdp, policy)
    if R is None:
        R = mdp.get_expected_reward()

    return np.sum(policy * R, axis=1)


def validate_policy(policy: np.ndarray, n_states: int, n_actions: int) -> bool:
    """
    Validate that a policy array is well-formed.

    Checks the shape, that entries are non-negative and that each row sums
    to 1 (within tolerance).
    """
    if policy.shape != (n_states, n_actions):
        return False

    if np.any(policy < 0):
        return False

    return bool(np.allclose(policy.sum(axis=1), 1.0))
