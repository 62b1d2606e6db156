"""Tests for the suggestion-fusion kinds."""

from __future__ import annotations

import math

import numpy as np
import pytest

from suggestion_eval.agents import NaiveAgent, NoisyAgent, NormalAgent, ScaledAgent, fuse, suggestion_posterior
from suggestion_eval.agents.fusion import noisy_log_likelihoods, reweight_belief
from suggestion_eval.core.errors import MissingResourceError
from suggestion_eval.policies import PolicyQueryAdapter, QMDPPolicy

UNIFORM = np.array([0.5, 0.5])


@pytest.fixture
def adapter(two_state_policy: QMDPPolicy) -> PolicyQueryAdapter:
    return PolicyQueryAdapter(two_state_policy, num_actions=2, num_states=2)


def test_scaled_with_zero_tau_leaves_belief_unchanged(adapter: PolicyQueryAdapter) -> None:
    """``tau == 0`` carries no evidence."""

    posterior = suggestion_posterior(ScaledAgent(tau=0.0), UNIFORM, adapter, 1)

    assert posterior == pytest.approx(UNIFORM)


def test_scaled_with_infinite_tau_keeps_only_consistent_states(adapter: PolicyQueryAdapter) -> None:
    """An infinite sharpness zeroes every state whose optimal action differs."""

    posterior = suggestion_posterior(ScaledAgent(tau=math.inf), UNIFORM, adapter, 1)

    assert posterior == pytest.approx([0.0, 1.0])


def test_naive_posterior_matches_unit_weight(adapter: PolicyQueryAdapter) -> None:
    """The naive kind reweights inconsistent states by ``exp(-1)``."""

    posterior = suggestion_posterior(NaiveAgent(nu=0.5), UNIFORM, adapter, 1)
    expected = np.array([math.exp(-1.0), 1.0]) / (1.0 + math.exp(-1.0))

    assert posterior == pytest.approx(expected)
    assert posterior[0] == pytest.approx(0.2689414, abs=1e-6)


def test_belief_is_unchanged_when_no_supported_state_is_consistent(adapter: PolicyQueryAdapter) -> None:
    """Evidence contradicting every supported state should be ignored."""

    belief = np.array([1.0, 0.0])
    posterior = suggestion_posterior(ScaledAgent(tau=math.inf), belief, adapter, 1)

    assert posterior == pytest.approx(belief)


def test_zero_prior_states_stay_zero() -> None:
    """Reweighting never resurrects states without prior mass."""

    posterior = reweight_belief(np.array([0.0, 0.4, 0.6]), np.array([5.0, -1.0, 0.0]))

    assert posterior[0] == 0.0
    assert float(posterior.sum()) == pytest.approx(1.0)


def test_reweight_is_stable_for_very_small_likelihoods() -> None:
    """Log-space normalization should not underflow on tiny likelihoods."""

    posterior = reweight_belief(np.array([0.5, 0.5]), np.array([-1000.0, -1001.0]))

    assert posterior == pytest.approx([1.0 / (1.0 + math.exp(-1.0)), math.exp(-1.0) / (1.0 + math.exp(-1.0))])


def test_noisy_with_zero_lambda_is_uninformative(
    adapter: PolicyQueryAdapter,
    two_state_action_values: np.ndarray,
) -> None:
    """``lam == 0`` gives a uniform suggestion likelihood."""

    posterior = suggestion_posterior(
        NoisyAgent(lam=0.0), UNIFORM, adapter, 1, action_values=two_state_action_values
    )

    assert posterior == pytest.approx(UNIFORM)


def test_noisy_likelihoods_follow_boltzmann_probabilities(two_state_action_values: np.ndarray) -> None:
    """Log likelihoods should equal the log softmax of the scaled action values."""

    log_likelihoods = noisy_log_likelihoods(two_state_action_values, 1, 2.0)
    expected = [
        -math.log1p(math.exp(2.0 * (10.0 - 9.0))),
        -math.log1p(math.exp(2.0 * (9.0 - 10.0))),
    ]

    assert log_likelihoods == pytest.approx(expected, abs=1e-6)


def test_noisy_without_action_values_raises(adapter: PolicyQueryAdapter) -> None:
    """The noisy kind cannot run without its action-value table."""

    with pytest.raises(MissingResourceError, match="action-value table"):
        suggestion_posterior(NoisyAgent(lam=1.0), UNIFORM, adapter, 1)

    with pytest.raises(MissingResourceError, match="shape"):
        suggestion_posterior(NoisyAgent(lam=1.0), UNIFORM, adapter, 1, action_values=np.zeros((3, 2)))


def test_non_fusion_kinds_are_rejected(adapter: PolicyQueryAdapter) -> None:
    """Kinds that ignore suggestions have no posterior."""

    with pytest.raises(TypeError, match="does not fuse"):
        suggestion_posterior(NormalAgent(), UNIFORM, adapter, 1)


@pytest.mark.parametrize(("nu", "expected_action"), [(1.0, 1), (0.0, 0)])
def test_naive_coin_selects_suggestion_or_baseline(
    adapter: PolicyQueryAdapter,
    nu: float,
    expected_action: int,
) -> None:
    """``nu`` is the probability of executing the suggestion verbatim."""

    result = fuse(
        NaiveAgent(nu=nu),
        UNIFORM,
        adapter,
        1,
        baseline_action=0,
        rng=np.random.default_rng(3),
    )

    assert result.action == expected_action
    assert result.belief[1] > 0.5


def test_scaled_and_noisy_do_not_consume_randomness(
    adapter: PolicyQueryAdapter,
    two_state_action_values: np.ndarray,
) -> None:
    """Only the naive kind draws from the trial generator."""

    rng = np.random.default_rng(5)
    before = rng.bit_generator.state

    scaled = fuse(ScaledAgent(tau=math.inf), UNIFORM, adapter, 1, baseline_action=0, rng=rng)
    noisy = fuse(
        NoisyAgent(lam=3.0),
        UNIFORM,
        adapter,
        1,
        baseline_action=0,
        rng=rng,
        action_values=two_state_action_values,
    )

    assert rng.bit_generator.state == before
    assert scaled.action == 1
    assert noisy.action == 1
