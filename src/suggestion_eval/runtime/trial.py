"""Single-trial runner."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from suggestion_eval.agents.suggestions import SuggestionGenerator
from suggestion_eval.core.contracts import POMDPProblem, SolvedPolicy
from suggestion_eval.policies import PolicyQueryAdapter
from suggestion_eval.runtime.config import RunConfig
from suggestion_eval.runtime.step import Renderer, StepContext, StepRecord, TrialState, execute_step


@dataclass(frozen=True, slots=True)
class TrialResult:
    """Outcome of one trial.

    Parameters
    ----------
    trial_index : int
        Zero-based trial index.
    total_reward : float
        Discounted return ``sum_t discount**(t-1) * r_t``.
    step_count : int
        Steps executed (fewer than the budget if a terminal state was hit).
    suggestion_count : int
        Suggestions admitted during the trial.
    """

    trial_index: int
    total_reward: float
    step_count: int
    suggestion_count: int

    @property
    def suggestions_per_step(self) -> float:
        return self.suggestion_count / self.step_count if self.step_count else 0.0


def initial_trial_state(
    problem: POMDPProblem,
    config: RunConfig,
    rng: np.random.Generator,
) -> TrialState:
    """Draw (or resolve) the true initial state and build both beliefs."""

    if config.initial_state is not None:
        state = problem.resolve_initial_state(config.initial_state)
    else:
        state = problem.sample_initial_state(rng)

    return TrialState(
        state=state,
        belief=problem.initial_belief(),
        advisor_belief=problem.advisor_belief(state, config.suggester_prior),
    )


def run_trial(
    problem: POMDPProblem,
    *,
    agent_policy: SolvedPolicy,
    advisor_policy: SolvedPolicy,
    config: RunConfig,
    rng: np.random.Generator,
    trial_index: int = 0,
    action_values: np.ndarray | None = None,
    on_step: Callable[[StepRecord], None] | None = None,
    renderer: Renderer | None = None,
) -> TrialResult:
    """Run one trial to the step budget or a terminal state.

    Parameters
    ----------
    problem : POMDPProblem
        Shared, read-only problem.
    agent_policy : SolvedPolicy
        Policy instance queried for the agent's actions.
    advisor_policy : SolvedPolicy
        Policy instance queried for perfect-knowledge and suggester actions.
    config : RunConfig
        Run configuration.
    rng : numpy.random.Generator
        Generator owned by this trial.
    trial_index : int, optional
        Index reported in step records and results.
    action_values : numpy.ndarray | None, optional
        ``(S, A)`` table for the noisy kind.
    on_step : Callable[[StepRecord], None] | None, optional
        Observer called after every step.
    renderer : Renderer | None, optional
        Frame sink used when ``config.render`` is set.

    Returns
    -------
    TrialResult
        Reward, step and suggestion totals.
    """

    context = StepContext(
        problem=problem,
        agent_policy=PolicyQueryAdapter(agent_policy, num_actions=problem.num_actions, num_states=problem.num_states),
        advisor_policy=PolicyQueryAdapter(
            advisor_policy,
            num_actions=problem.num_actions,
            num_states=problem.num_states,
        ),
        config=config,
        generator=SuggestionGenerator(mix_ratio=config.mix_ratio, num_actions=problem.num_actions),
        trial_index=trial_index,
        action_values=action_values,
        renderer=renderer,
    )
    trial = initial_trial_state(problem, config, rng)

    for _ in range(config.num_steps):
        record = execute_step(trial, context, rng)
        if on_step is not None:
            on_step(record)
        if trial.done:
            break

    return TrialResult(
        trial_index=trial_index,
        total_reward=float(trial.total_reward),
        step_count=trial.step_count,
        suggestion_count=trial.suggestion_count,
    )


__all__ = ["TrialResult", "initial_trial_state", "run_trial"]
