"""
gridmdp: A stochastic gridworld Markov Decision Process.

This package provides tools for:
- Describing a grid world with reward cells, noisy moves and a bounds penalty
- Computing exact successor distributions, including boundary and
  terminal-absorption rules
- Enumerating and indexing the state and action spaces for tabular consumers
- Simulating episodes and visualizing value functions
"""

from gridmdp.errors import (
    GridWorldError,
    ConfigurationError,
    PreconditionViolation,
    InvalidStateError,
    InvalidActionError,
)
from gridmdp.states import GridState, TerminalState, TERMINAL, Action
from gridmdp.distributions import GridWorldDistribution
from gridmdp.grid_world import GridWorld, GridWorldConfig
from gridmdp.policies import (
    uniform_policy,
    random_policy,
    random_deterministic_policy,
    policy_induced_transition_matrix,
    policy_expected_reward,
)
from gridmdp.utils import (
    simulate,
    discounted_return,
    plot_values,
)

__version__ = "0.1.0"
__all__ = [
    "GridWorldError",
    "ConfigurationError",
    "PreconditionViolation",
    "InvalidStateError",
    "InvalidActionError",
    "GridState",
    "TerminalState",
    "TERMINAL",
    "Action",
    "GridWorldDistribution",
    "GridWorld",
    "GridWorldConfig",
    "uniform_policy",
    "random_policy",
    "random_deterministic_policy",
    "policy_induced_transition_matrix",
    "policy_expected_reward",
    "simulate",
    "discounted_return",
    "plot_values",
]
