"""Per-timestep state machine of one trial.

Each step runs, in order::

    ComputeBaseline -> GenerateSuggestion -> DecideAdmission -> {Fuse | Skip}
    -> SelectExecutedAction -> TransitionEnvironment -> RenderAndLog
    -> FilterBeliefs -> CheckTerminal

Random draws happen in a fixed order so a trial is reproducible from its
generator alone.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from suggestion_eval.agents.fusion import fuse
from suggestion_eval.agents.kinds import NormalAgent, PerfectAgent, RandomAgent
from suggestion_eval.agents.suggestions import SuggestionEvent, SuggestionGenerator
from suggestion_eval.belief import belief_support, filter_belief
from suggestion_eval.core.contracts import POMDPProblem
from suggestion_eval.policies import PolicyQueryAdapter
from suggestion_eval.runtime.config import RunConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TrialState:
    """Mutable state owned by exactly one running trial."""

    state: int
    belief: np.ndarray
    advisor_belief: np.ndarray
    suggestion_count: int = 0
    step_count: int = 0
    total_reward: float = 0.0
    done: bool = False


@dataclass(frozen=True, slots=True)
class StepRecord:
    """Everything that happened in one step.

    Parameters
    ----------
    trial_index : int
        Trial the step belongs to.
    time : int
        One-based step index within the trial.
    state : int
        True state before the step.
    baseline_action : int
        Action from the agent's own belief (``a_n``).
    perfect_action : int
        Action for the known true state (``a_p``).
    suggestion : SuggestionEvent | None
        Suggestion and admission outcome; ``None`` for kinds without
        suggestions.
    executed_action : int
        Action sent to the environment.
    next_state : int
        True state after the step.
    observation : int
        Realized observation.
    reward : float
        Immediate reward.
    discounted_reward : float
        ``discount ** (time - 1) * reward``.
    terminal : bool
        Whether ``next_state`` ended the trial.
    """

    trial_index: int
    time: int
    state: int
    baseline_action: int
    perfect_action: int
    suggestion: SuggestionEvent | None
    executed_action: int
    next_state: int
    observation: int
    reward: float
    discounted_reward: float
    terminal: bool


@dataclass(frozen=True, slots=True)
class RenderFrame:
    """Snapshot handed to a renderer before (``pre``) and after (``post``) acting."""

    trial_index: int
    time: int
    stage: str
    state: int
    action: int
    belief: np.ndarray
    observation: int | None = None


Renderer = Callable[[RenderFrame], None]


@dataclass(frozen=True, slots=True)
class StepContext:
    """Read-only collaborators shared by every step of one trial."""

    problem: POMDPProblem
    agent_policy: PolicyQueryAdapter
    advisor_policy: PolicyQueryAdapter
    config: RunConfig
    generator: SuggestionGenerator
    trial_index: int = 0
    action_values: np.ndarray | None = None
    renderer: Renderer | None = None


def execute_step(trial: TrialState, context: StepContext, rng: np.random.Generator) -> StepRecord:
    """Advance ``trial`` by one timestep in place.

    Parameters
    ----------
    trial : TrialState
        Mutable trial state; updated in place.
    context : StepContext
        Problem, policies and configuration.
    rng : numpy.random.Generator
        Trial-local generator.

    Returns
    -------
    StepRecord
        Record of the step.

    Raises
    ------
    InvalidObservationError
        If a belief cannot absorb the realized observation.
    MissingResourceError
        If the noisy kind fuses without an action-value table.
    """

    problem = context.problem
    config = context.config
    kind = config.agent

    trial.step_count += 1
    time = trial.step_count
    prior_belief = trial.belief

    # ComputeBaseline
    baseline_action = context.agent_policy.action_from_belief(trial.belief)
    perfect_action = context.advisor_policy.action_from_state(trial.state)

    # GenerateSuggestion
    if kind.uses_suggestions:
        advisor_query = None
        if problem.supports_advisor_belief:
            advisor_belief = trial.advisor_belief

            def advisor_query() -> int:
                return context.advisor_policy.action_from_belief(advisor_belief)

        suggestion = context.generator.suggest(rng, perfect_action, advisor_query)
    else:
        suggestion = baseline_action

    if config.render and context.renderer is not None:
        context.renderer(
            RenderFrame(
                trial_index=context.trial_index,
                time=time,
                stage="pre",
                state=trial.state,
                action=baseline_action,
                belief=trial.belief,
            )
        )

    # DecideAdmission
    admitted = (
        suggestion != baseline_action
        and trial.suggestion_count < config.max_suggestions
        and rng.random() < config.msg_reception_rate
    )

    # Fuse | Skip
    if admitted:
        trial.suggestion_count += 1
        fusion = fuse(
            kind,
            trial.belief,
            context.agent_policy,
            suggestion,
            baseline_action=baseline_action,
            rng=rng,
            action_values=context.action_values,
        )
        fused_belief, fused_action = fusion.belief, fusion.action
    else:
        fused_belief, fused_action = trial.belief, baseline_action

    # SelectExecutedAction
    if isinstance(kind, NormalAgent):
        action = baseline_action
    elif isinstance(kind, PerfectAgent):
        action = perfect_action
    elif isinstance(kind, RandomAgent):
        action = int(rng.integers(problem.num_actions))
    else:
        action = fused_action
        trial.belief = fused_belief

    # TransitionEnvironment
    next_state, observation, reward = problem.generate(trial.state, action, rng)
    discounted_reward = problem.discount ** (time - 1) * reward

    record = StepRecord(
        trial_index=context.trial_index,
        time=time,
        state=trial.state,
        baseline_action=baseline_action,
        perfect_action=perfect_action,
        suggestion=SuggestionEvent(suggestion, admitted) if kind.uses_suggestions else None,
        executed_action=action,
        next_state=next_state,
        observation=observation,
        reward=reward,
        discounted_reward=discounted_reward,
        terminal=problem.is_terminal(next_state),
    )

    # RenderAndLog
    if config.verbose:
        _log_step(problem, record, prior_belief=prior_belief, trial=trial)
    if config.render and context.renderer is not None:
        context.renderer(
            RenderFrame(
                trial_index=context.trial_index,
                time=time,
                stage="post",
                state=trial.state,
                action=action,
                belief=trial.belief,
                observation=observation,
            )
        )

    # FilterBeliefs
    trial.belief = filter_belief(problem, trial.belief, action, observation)
    trial.advisor_belief = filter_belief(problem, trial.advisor_belief, action, observation)

    # CheckTerminal
    trial.state = next_state
    trial.total_reward += discounted_reward
    trial.done = record.terminal
    return record


def log_render_frame(frame: RenderFrame) -> None:
    """Default renderer: log the frame's belief support."""

    logger.info(
        "trial %d t=%d [%s] state=%d action=%d belief=%s",
        frame.trial_index,
        frame.time,
        frame.stage,
        frame.state,
        frame.action,
        _format_support(frame.belief),
    )


def _log_step(problem: POMDPProblem, record: StepRecord, *, prior_belief: np.ndarray, trial: TrialState) -> None:
    """Log the per-step report used in verbose runs."""

    names = problem.action_names
    lines = [
        f"Trial {record.trial_index} | Time {record.time}",
        f"State                    : {problem.state_label(record.state)}",
        f"Initial Action           : {names[record.baseline_action]}",
    ]
    if record.suggestion is not None:
        lines.append(f"Suggested Action         : {names[record.suggestion.suggested_action]}")
        lines.append(f"Suggestion Accepted      : {record.suggestion.accepted}")
    lines.extend(
        [
            f"Perfect Knowledge Action : {names[record.perfect_action]}",
            f"Selected Action          : {names[record.executed_action]}",
            f"Next State               : {problem.state_label(record.next_state)}",
            f"Observation              : {problem.observation_names[record.observation]}",
            f"Immediate Reward         : {record.reward}",
            f"Discounted Reward        : {record.discounted_reward}",
            f"Initial Belief           : {_format_support(prior_belief)}",
        ]
    )
    if record.suggestion is not None:
        lines.append(f"Suggester Belief         : {_format_support(trial.advisor_belief)}")
        if record.suggestion.accepted:
            lines.append(f"Updated Belief           : {_format_support(trial.belief)}")
    logger.info("\n".join(lines))


def _format_support(belief: np.ndarray, limit: int = 8) -> str:
    """Render the largest belief entries as ``{state: p}``."""

    support = sorted(belief_support(belief).items(), key=lambda item: -item[1])
    shown = ", ".join(f"{state}: {probability:.4f}" for state, probability in support[:limit])
    suffix = ", ..." if len(support) > limit else ""
    return "{" + shown + suffix + "}"


__all__ = [
    "RenderFrame",
    "Renderer",
    "StepContext",
    "StepRecord",
    "TrialState",
    "execute_step",
    "log_render_frame",
]
