"""Tests for the parallel trial driver."""

from __future__ import annotations

import math
import threading
from dataclasses import replace

import numpy as np
import pytest

from suggestion_eval.agents import NoisyAgent, NormalAgent, ScaledAgent
from suggestion_eval.core.errors import InvalidConfigurationError, InvalidObservationError, MissingResourceError
from suggestion_eval.policies import QMDPPolicy, mdp_action_values
from suggestion_eval.problems import RockSampleProblem, TabularPOMDP
from suggestion_eval.runtime import RunConfig, resolve_num_workers, run_simulations, trial_seed_sequences


def test_results_do_not_depend_on_worker_count(tiger_problem, tiger_policy) -> None:
    """Per-trial streams make results independent of scheduling."""

    config = RunConfig(num_steps=20, num_sims=12, agent=ScaledAgent(tau=2.0), mix_ratio=0.5, seed=7)

    serial = run_simulations(tiger_problem, tiger_policy, replace(config, num_workers=1))
    parallel = run_simulations(tiger_problem, tiger_policy, replace(config, num_workers=4))

    np.testing.assert_array_equal(serial.rewards, parallel.rewards)
    np.testing.assert_array_equal(serial.steps, parallel.steps)
    np.testing.assert_array_equal(serial.suggestions, parallel.suggestions)
    assert [trial.trial_index for trial in parallel.trials] == list(range(12))


def test_seeded_runs_repeat_and_different_seeds_differ(tiger_problem, tiger_policy) -> None:
    """Equal seeds reproduce a run; the root seed controls every trial."""

    first = run_simulations(tiger_problem, tiger_policy, RunConfig(num_steps=15, num_sims=6, seed=3))
    second = run_simulations(tiger_problem, tiger_policy, RunConfig(num_steps=15, num_sims=6, seed=3))
    other = run_simulations(tiger_problem, tiger_policy, RunConfig(num_steps=15, num_sims=6, seed=4))

    np.testing.assert_array_equal(first.rewards, second.rewards)
    assert not np.array_equal(first.rewards, other.rewards)


def test_injected_rng_drives_the_run(tiger_problem, tiger_policy) -> None:
    """An injected generator replaces the configured seed."""

    config = RunConfig(num_steps=10, num_sims=4, seed=1)

    first = run_simulations(tiger_problem, tiger_policy, config, rng=np.random.default_rng(99))
    second = run_simulations(tiger_problem, tiger_policy, config, rng=np.random.default_rng(99))

    np.testing.assert_array_equal(first.rewards, second.rewards)


def test_statistics_cover_every_trial(tiger_problem, tiger_policy) -> None:
    """Run statistics aggregate the per-trial vectors."""

    config = RunConfig(num_steps=10, num_sims=5, agent=ScaledAgent(tau=1.0), mix_ratio=0.0, seed=2)
    result = run_simulations(tiger_problem, tiger_policy, config)

    assert result.statistics.num_sims == 5
    assert result.statistics.reward.mean == pytest.approx(float(np.mean(result.rewards)))
    assert result.statistics.steps.mean == pytest.approx(10.0)
    assert np.all(result.suggestions <= result.steps)


def test_policy_factory_builds_one_pair_per_worker(tiger_problem, tiger_action_values) -> None:
    """Mutable policies are instantiated per worker, never per trial."""

    lock = threading.Lock()
    created = []

    def factory() -> QMDPPolicy:
        with lock:
            created.append(threading.get_ident())
        return QMDPPolicy(tiger_action_values)

    config = RunConfig(num_steps=10, num_sims=9, agent=ScaledAgent(tau=1.0), seed=5, num_workers=3)
    result = run_simulations(tiger_problem, None, config, policy_factory=factory)
    shared = run_simulations(tiger_problem, QMDPPolicy(tiger_action_values), config)

    assert len(created) % 2 == 0
    assert 2 <= len(created) <= 6
    np.testing.assert_array_equal(result.rewards, shared.rewards)


def test_missing_policy_is_rejected(tiger_problem) -> None:
    """A run needs either a shared policy or a factory."""

    with pytest.raises(InvalidConfigurationError, match="policy_factory"):
        run_simulations(tiger_problem, None, RunConfig())


def test_noisy_agent_without_action_values_fails_before_trials(tiger_problem, tiger_policy) -> None:
    """The missing table is reported before any step runs."""

    steps = []
    config = RunConfig(num_steps=5, num_sims=3, agent=NoisyAgent(lam=1.0))

    with pytest.raises(MissingResourceError):
        run_simulations(tiger_problem, tiger_policy, config, on_step=steps.append)

    assert steps == []


def test_noisy_agent_runs_with_action_values(tiger_problem, tiger_policy, tiger_action_values) -> None:
    """With its table supplied the noisy kind runs normally."""

    config = RunConfig(num_steps=10, num_sims=3, agent=NoisyAgent(lam=0.1), mix_ratio=0.5, seed=0)
    result = run_simulations(tiger_problem, tiger_policy, config, action_values=tiger_action_values)

    assert result.rewards.shape == (3,)
    assert np.all(np.isfinite(result.rewards))


def test_invalid_observation_aborts_the_run() -> None:
    """A zero-probability observation in any trial aborts the whole run."""

    identity = np.eye(2)
    problem = TabularPOMDP(
        transitions=np.stack([identity, identity[::-1]]),
        observations=np.stack([identity, identity]),
        rewards=np.array([[1.0, 0.0], [0.0, 1.0]]),
        discount=0.9,
        initial_distribution=[1.0, 0.0],
    )
    policy = QMDPPolicy(mdp_action_values(problem))
    config = RunConfig(num_steps=3, num_sims=4, agent=NormalAgent(), initial_state=1, seed=0, num_workers=2)

    with pytest.raises(InvalidObservationError) as exc_info:
        run_simulations(problem, policy, config)

    assert any(note.startswith("raised in trial") for note in exc_info.value.__notes__)


def test_malformed_initial_state_fails_fast(tiger_problem, tiger_policy) -> None:
    """Overrides are validated before trials start."""

    with pytest.raises(InvalidConfigurationError, match="out of range"):
        run_simulations(tiger_problem, tiger_policy, RunConfig(initial_state=5))


def test_trial_seed_sequences_are_independent() -> None:
    """Spawned sequences should produce distinct streams."""

    seeds = trial_seed_sequences(3, seed=11)
    draws = [np.random.default_rng(seed).random() for seed in seeds]

    assert len(set(draws)) == 3
    assert [np.random.default_rng(seed).random() for seed in trial_seed_sequences(3, seed=11)] == draws


def test_resolve_num_workers_is_bounded() -> None:
    """Worker counts never exceed the number of trials."""

    assert resolve_num_workers(8, 3) == 3
    assert resolve_num_workers(None, 1) == 1
    assert 1 <= resolve_num_workers(None, 100) <= 32


def test_unbounded_suggestions_default() -> None:
    """``max_suggestions`` defaults to unbounded."""

    assert RunConfig().max_suggestions == math.inf


def test_terminal_initial_state_fails_before_trials() -> None:
    """Starting RockSample in its exit state is a configuration error."""

    problem = RockSampleProblem()
    policy = QMDPPolicy(mdp_action_values(problem))
    steps = []

    with pytest.raises(InvalidConfigurationError, match="terminal"):
        run_simulations(
            problem,
            policy,
            RunConfig(num_steps=5, initial_state=problem.terminal_state, num_workers=1),
            on_step=steps.append,
        )

    assert steps == []
