"""
Unit Tests for Policies Module

Tests the policy constructors and the policy-induced chain and reward.
"""

import pytest
import numpy as np

from gridmdp.grid_world import GridWorld
from gridmdp.policies import (
    uniform_policy,
    random_policy,
    random_deterministic_policy,
    policy_induced_transition_matrix,
    policy_expected_reward,
    validate_policy,
)
from gridmdp.states import GridState, TERMINAL


@pytest.fixture
def small_mdp():
    """3x3 grid with one terminal-inducing cell."""
    return GridWorld(
        width=3, height=3,
        reward_states=((3, 3), (2, 2)),
        reward_values=(1.0, -1.0),
    )


class TestPolicyConstructors:
    """Tests for uniform, random and deterministic policies."""

    def test_uniform(self, small_mdp):
        pi = uniform_policy(small_mdp)
        assert pi.shape == (small_mdp.n_states, small_mdp.n_actions)
        assert np.allclose(pi, 0.25)

    def test_random_is_valid(self, small_mdp):
        pi = random_policy(small_mdp, rng=np.random.default_rng(42))
        assert validate_policy(pi, small_mdp.n_states, small_mdp.n_actions)

    def test_random_reproducible(self, small_mdp):
        pi1 = random_policy(small_mdp, rng=np.random.default_rng(3))
        pi2 = random_policy(small_mdp, rng=np.random.default_rng(3))
        assert np.array_equal(pi1, pi2)

    def test_deterministic_one_action_per_state(self, small_mdp):
        pi = random_deterministic_policy(small_mdp, rng=np.random.default_rng(42))
        assert validate_policy(pi, small_mdp.n_states, small_mdp.n_actions)
        assert np.all(np.count_nonzero(pi, axis=1) == 1)
        assert np.all(pi.max(axis=1) == 1.0)


class TestValidatePolicy:
    """Tests for validate_policy."""

    def test_wrong_shape(self, small_mdp):
        pi = np.full((small_mdp.n_states, 3), 1 / 3)
        assert not validate_policy(pi, small_mdp.n_states, small_mdp.n_actions)

    def test_negative_entry(self, small_mdp):
        pi = uniform_policy(small_mdp)
        pi[0] = [1.5, -0.5, 0.0, 0.0]
        assert not validate_policy(pi, small_mdp.n_states, small_mdp.n_actions)

    def test_rows_not_normalized(self, small_mdp):
        pi = uniform_policy(small_mdp) * 2
        assert not validate_policy(pi, small_mdp.n_states, small_mdp.n_actions)


class TestPolicyInducedChain:
    """Tests for P_pi and r_pi."""

    def test_rows_sum_to_one(self, small_mdp):
        P_pi = policy_induced_transition_matrix(small_mdp, uniform_policy(small_mdp))
        assert P_pi.shape == (small_mdp.n_states, small_mdp.n_states)
        assert np.allclose(P_pi.sum(axis=1), 1.0)

    def test_terminal_absorbs(self, small_mdp):
        P_pi = policy_induced_transition_matrix(small_mdp, uniform_policy(small_mdp))
        t = small_mdp.state_index(TERMINAL) - 1
        assert P_pi[t, t] == 1.0
        s = small_mdp.state_index(GridState(3, 3)) - 1
        assert P_pi[s, t] == 1.0

    def test_precomputed_kernel(self, small_mdp):
        pi = uniform_policy(small_mdp)
        P = small_mdp.get_transition_kernel()
        assert np.allclose(
            policy_induced_transition_matrix(small_mdp, pi, P=P),
            policy_induced_transition_matrix(small_mdp, pi),
        )

    def test_expected_reward(self, small_mdp):
        r_pi = policy_expected_reward(small_mdp, uniform_policy(small_mdp))
        assert r_pi.shape == (small_mdp.n_states,)
        assert r_pi[small_mdp.state_index(GridState(3, 3)) - 1] == pytest.approx(1.0)
        assert r_pi[small_mdp.state_index(GridState(2, 2)) - 1] == pytest.approx(-1.0)
        assert r_pi[small_mdp.state_index(TERMINAL) - 1] == 0.0

    def test_wrong_shape_error(self, small_mdp):
        bad = np.ones((small_mdp.n_states + 1, small_mdp.n_actions))
        with pytest.raises(ValueError, match="doesn't match"):
            policy_induced_transition_matrix(small_mdp, bad)
        with pytest.raises(ValueError, match="doesn't match"):
            policy_expected_reward(small_mdp, bad)
