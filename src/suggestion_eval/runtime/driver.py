"""Parallel Monte Carlo driver over independent trials.

Trials share only the read-only problem and action-value table. Every trial
gets its own random stream spawned from one root ``SeedSequence``, so results
depend on the seed and not on how trials are scheduled across workers.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass

import numpy as np
from tqdm import tqdm

from suggestion_eval.agents.fusion import require_action_values
from suggestion_eval.agents.kinds import NoisyAgent
from suggestion_eval.analysis.statistics import RunStatistics, summarize_run
from suggestion_eval.core.contracts import POMDPProblem, SolvedPolicy
from suggestion_eval.core.errors import InvalidConfigurationError
from suggestion_eval.runtime.config import RunConfig
from suggestion_eval.runtime.step import Renderer, StepRecord, log_render_frame
from suggestion_eval.runtime.trial import TrialResult, run_trial

logger = logging.getLogger(__name__)

MAX_DEFAULT_WORKERS = 32


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Per-trial vectors and derived statistics of one run.

    Parameters
    ----------
    trials : tuple[TrialResult, ...]
        Trial results ordered by trial index.
    rewards : numpy.ndarray
        Discounted return per trial.
    steps : numpy.ndarray
        Step count per trial.
    suggestions : numpy.ndarray
        Admitted suggestion count per trial.
    statistics : RunStatistics
        Aggregates over all trials.
    """

    trials: tuple[TrialResult, ...]
    rewards: np.ndarray
    steps: np.ndarray
    suggestions: np.ndarray
    statistics: RunStatistics


class _ProgressCounter:
    """Lock-protected completion counter feeding an optional progress bar."""

    def __init__(self, total: int, *, enabled: bool) -> None:
        self._lock = threading.Lock()
        self._bar = tqdm(total=total, desc="Running Simulations", disable=not enabled)
        self.completed = 0

    def increment(self) -> None:
        with self._lock:
            self.completed += 1
            self._bar.update(1)

    def close(self) -> None:
        self._bar.close()


def trial_seed_sequences(
    num_sims: int,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> list[np.random.SeedSequence]:
    """Return one independent seed sequence per trial.

    Parameters
    ----------
    num_sims : int
        Number of trials.
    seed : int | None, optional
        Root seed. Ignored when ``rng`` is supplied.
    rng : numpy.random.Generator | None, optional
        Injected generator; one draw from it seeds the root sequence.
    """

    if rng is not None:
        root = np.random.SeedSequence(int(rng.integers(0, 2**63 - 1)))
    else:
        root = np.random.SeedSequence(seed)
    return root.spawn(num_sims)


def resolve_num_workers(num_workers: int | None, num_sims: int) -> int:
    """Return the bounded worker count for a run."""

    if num_workers is None:
        num_workers = min(MAX_DEFAULT_WORKERS, os.cpu_count() or 1)
    return max(1, min(int(num_workers), num_sims))


def validate_run_inputs(
    problem: POMDPProblem,
    config: RunConfig,
    *,
    action_values: np.ndarray | None,
) -> None:
    """Fail fast on configuration errors before any trial starts.

    Raises
    ------
    MissingResourceError
        If the noisy kind is requested without a valid action-value table.
    InvalidConfigurationError
        If initial-condition overrides do not fit the problem.
    """

    if isinstance(config.agent, NoisyAgent):
        require_action_values(action_values, num_states=problem.num_states, num_actions=problem.num_actions)

    if config.initial_state is not None:
        probe_state = problem.resolve_initial_state(config.initial_state)
    else:
        probe_state = problem.sample_initial_state(np.random.default_rng(0))
    problem.advisor_belief(probe_state, config.suggester_prior)


def run_simulations(
    problem: POMDPProblem,
    policy: SolvedPolicy | None,
    config: RunConfig,
    *,
    action_values: np.ndarray | None = None,
    policy_factory: Callable[[], SolvedPolicy] | None = None,
    rng: np.random.Generator | None = None,
    on_step: Callable[[StepRecord], None] | None = None,
    renderer: Renderer | None = None,
) -> SimulationResult:
    """Run ``config.num_sims`` independent trials and aggregate the results.

    Parameters
    ----------
    problem : POMDPProblem
        Shared, read-only problem.
    policy : SolvedPolicy | None
        Immutable policy shared by every trial. Pass ``None`` together with
        ``policy_factory`` for policies that keep mutable caches.
    config : RunConfig
        Run configuration.
    action_values : numpy.ndarray | None, optional
        Read-only ``(S, A)`` table, required by the noisy kind.
    policy_factory : Callable[[], SolvedPolicy] | None, optional
        Builds private policy instances; each worker thread builds one for
        the agent and one for the suggester, once.
    rng : numpy.random.Generator | None, optional
        Injected root generator; overrides ``config.seed``.
    on_step : Callable[[StepRecord], None] | None, optional
        Step observer. Called from worker threads, so it must be thread-safe.
    renderer : Renderer | None, optional
        Frame sink for ``config.render``; defaults to logging the frames.

    Returns
    -------
    SimulationResult
        Per-trial vectors and statistics.

    Raises
    ------
    InvalidConfigurationError
        If neither ``policy`` nor ``policy_factory`` is given, or overrides
        are malformed.
    MissingResourceError
        If the noisy kind lacks an action-value table.
    InvalidObservationError
        If any trial hits a zero-probability observation. The run is
        aborted; no partial statistics are returned.
    """

    if policy is None and policy_factory is None:
        raise InvalidConfigurationError("either policy or policy_factory is required")
    validate_run_inputs(problem, config, action_values=action_values)
    if config.render and renderer is None:
        renderer = log_render_frame

    num_sims = config.num_sims
    seeds = trial_seed_sequences(num_sims, seed=config.seed, rng=rng)
    rewards = np.empty(num_sims, dtype=float)
    steps = np.empty(num_sims, dtype=int)
    suggestions = np.empty(num_sims, dtype=int)
    trials: list[TrialResult | None] = [None] * num_sims

    worker_state = threading.local()

    def worker_policies() -> tuple[SolvedPolicy, SolvedPolicy]:
        if policy_factory is None:
            return policy, policy
        if not hasattr(worker_state, "policies"):
            worker_state.policies = (policy_factory(), policy_factory())
        return worker_state.policies

    progress = _ProgressCounter(num_sims, enabled=config.progress)

    def run_one(trial_index: int) -> None:
        agent_policy, advisor_policy = worker_policies()
        try:
            result = run_trial(
                problem,
                agent_policy=agent_policy,
                advisor_policy=advisor_policy,
                config=config,
                rng=np.random.default_rng(seeds[trial_index]),
                trial_index=trial_index,
                action_values=action_values,
                on_step=on_step,
                renderer=renderer,
            )
        except Exception as exc:
            exc.add_note(f"raised in trial {trial_index}")
            raise
        rewards[trial_index] = result.total_reward
        steps[trial_index] = result.step_count
        suggestions[trial_index] = result.suggestion_count
        trials[trial_index] = result
        progress.increment()

    workers = resolve_num_workers(config.num_workers, num_sims)
    logger.debug("running %d trials of %s on %d worker(s)", num_sims, config.agent.name, workers)
    try:
        if workers == 1:
            for trial_index in range(num_sims):
                run_one(trial_index)
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="trial") as executor:
                futures = [executor.submit(run_one, trial_index) for trial_index in range(num_sims)]
                _, pending = wait(futures, return_when=FIRST_EXCEPTION)
                for future in pending:
                    future.cancel()
                for future in futures:
                    if future.done() and not future.cancelled() and future.exception() is not None:
                        raise future.exception()
    finally:
        progress.close()

    statistics = summarize_run(agent=config.agent, rewards=rewards, steps=steps, suggestions=suggestions)
    logger.debug("finished %d trials; mean reward %.5f", num_sims, statistics.reward.mean)
    return SimulationResult(
        trials=tuple(trials),
        rewards=rewards,
        steps=steps,
        suggestions=suggestions,
        statistics=statistics,
    )


__all__ = [
    "SimulationResult",
    "resolve_num_workers",
    "run_simulations",
    "trial_seed_sequences",
    "validate_run_inputs",
]
