"""Tests for the suggestion generator."""

from __future__ import annotations

import numpy as np
import pytest

from suggestion_eval.agents import SuggestionGenerator
from suggestion_eval.core.errors import InvalidConfigurationError


def test_full_mix_always_returns_informed_action() -> None:
    """``mix_ratio == 1`` never draws a random suggestion."""

    generator = SuggestionGenerator(mix_ratio=1.0, num_actions=4)
    rng = np.random.default_rng(0)

    assert all(generator.suggest(rng, 2) == 2 for _ in range(100))


def test_advisor_query_overrides_perfect_action() -> None:
    """An advisor query should replace the perfect-knowledge action."""

    generator = SuggestionGenerator(mix_ratio=1.0, num_actions=4)

    assert generator.suggest(np.random.default_rng(0), 2, lambda: 3) == 3


def test_zero_mix_is_uniform_over_actions() -> None:
    """``mix_ratio == 0`` suggests every action roughly equally often."""

    generator = SuggestionGenerator(mix_ratio=0.0, num_actions=3)
    rng = np.random.default_rng(1)

    draws = np.array([generator.suggest(rng, 0) for _ in range(3000)])
    counts = np.bincount(draws, minlength=3)

    assert counts.sum() == 3000
    assert np.all(np.abs(counts / 3000.0 - 1.0 / 3.0) < 0.05)


def test_partial_mix_rate_matches_informed_frequency() -> None:
    """The informed fraction should track ``mix_ratio`` plus chance agreement."""

    generator = SuggestionGenerator(mix_ratio=0.6, num_actions=5)
    rng = np.random.default_rng(2)

    hits = sum(generator.suggest(rng, 4) == 4 for _ in range(5000))

    assert hits / 5000.0 == pytest.approx(0.6 + 0.4 / 5.0, abs=0.03)


@pytest.mark.parametrize(("mix_ratio", "num_actions"), [(-0.1, 2), (1.5, 2), (0.5, 0)])
def test_invalid_generator_parameters_raise(mix_ratio: float, num_actions: int) -> None:
    """Out-of-range parameters should fail at construction."""

    with pytest.raises(InvalidConfigurationError):
        SuggestionGenerator(mix_ratio=mix_ratio, num_actions=num_actions)
