"""
Unit Tests for GridWorldDistribution

Tests support iteration, probability lookup and sampling.
"""

import pytest
import numpy as np

from gridmdp.distributions import GridWorldDistribution
from gridmdp.states import GridState, TERMINAL


@pytest.fixture
def dist():
    """Five-slot distribution with one zero-probability slot."""
    neighbors = [
        GridState(2, 5),
        GridState(0, 5),
        GridState(1, 4),
        GridState(1, 6),
        GridState(1, 5),
    ]
    return GridWorldDistribution(neighbors, [0.7, 0.0, 0.15, 0.15, 0.0])


class TestSupport:
    """Tests for iteration over the support."""

    def test_iter_skips_zero_probability(self, dist):
        assert list(dist) == [GridState(2, 5), GridState(1, 4), GridState(1, 6)]

    def test_len_is_support_size(self, dist):
        assert len(dist) == 3

    def test_items(self, dist):
        items = dict(dist.items())
        assert items[GridState(2, 5)] == pytest.approx(0.7)
        assert GridState(0, 5) not in items

    def test_neighbors_keep_all_slots(self, dist):
        assert len(dist.neighbors) == 5

    def test_probabilities_is_copy(self, dist):
        probs = dist.probabilities
        probs[0] = 0.0
        assert dist.probability_of(GridState(2, 5)) == pytest.approx(0.7)

    def test_length_mismatch_error(self):
        with pytest.raises(ValueError, match="neighbors"):
            GridWorldDistribution([GridState(1, 1)], [0.5, 0.5])


class TestProbabilityOf:
    """Tests for probability lookup."""

    def test_member(self, dist):
        assert dist.probability_of(GridState(1, 4)) == pytest.approx(0.15)

    def test_zero_slot(self, dist):
        assert dist.probability_of(GridState(0, 5)) == 0.0

    def test_absent_state(self, dist):
        assert dist.probability_of(GridState(9, 9)) == 0.0
        assert dist.probability_of(TERMINAL) == 0.0

    def test_certain(self):
        d = GridWorldDistribution.certain(TERMINAL)
        assert d.probability_of(TERMINAL) == 1.0
        assert list(d) == [TERMINAL]


class TestSample:
    """Tests for categorical sampling."""

    def test_sample_in_support(self, dist):
        rng = np.random.default_rng(0)
        support = set(dist)
        for _ in range(100):
            assert dist.sample(rng) in support

    def test_sample_frequencies(self, dist):
        rng = np.random.default_rng(42)
        n = 20000
        hits = sum(dist.sample(rng) == GridState(2, 5) for _ in range(n))
        assert abs(hits / n - 0.7) < 0.02

    def test_sample_reproducible(self, dist):
        a = [dist.sample(np.random.default_rng(7)) for _ in range(5)]
        b = [dist.sample(np.random.default_rng(7)) for _ in range(5)]
        assert a == b

    def test_sample_without_rng(self):
        assert GridWorldDistribution.certain(TERMINAL).sample() == TERMINAL
