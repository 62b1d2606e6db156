"""Aggregate per-trial metrics into summary statistics and a report table."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from suggestion_eval.agents.kinds import AgentKind

Z_95 = 1.96

_COLUMN = "%15s"
_HEADER = " | ".join([_COLUMN] * 5)
_ROW = " | ".join([_COLUMN] + ["%15.5f"] * 4)


@dataclass(frozen=True, slots=True)
class MetricSummary:
    """Summary of one per-trial metric.

    Parameters
    ----------
    mean : float
        Sample mean.
    std : float
        Sample standard deviation (``ddof=1``); ``nan`` with fewer than two
        trials.
    std_err : float
        ``std / sqrt(n)``.
    ci95 : float
        Half-width of the normal 95% interval, ``1.96 * std_err``.
    """

    mean: float
    std: float
    std_err: float
    ci95: float


@dataclass(frozen=True, slots=True)
class RunStatistics:
    """Summaries of reward, steps, suggestions and suggestions per step."""

    agent: AgentKind
    num_sims: int
    reward: MetricSummary
    steps: MetricSummary
    suggestions: MetricSummary
    suggestions_per_step: MetricSummary

    def rows(self) -> tuple[tuple[str, MetricSummary], ...]:
        """Return ``(label, summary)`` pairs in report order."""

        return (
            ("Reward", self.reward),
            ("Steps", self.steps),
            ("# Suggestions", self.suggestions),
            ("# Sugg / Step", self.suggestions_per_step),
        )


def summarize_metric(values: Sequence[float] | np.ndarray) -> MetricSummary:
    """Compute mean, sample std, standard error and 95% half-width.

    Raises
    ------
    ValueError
        If ``values`` is empty.
    """

    data = np.asarray(values, dtype=float)
    if data.size == 0:
        raise ValueError("values must not be empty")

    mean = float(np.mean(data))
    std = float(np.std(data, ddof=1)) if data.size > 1 else math.nan
    std_err = std / math.sqrt(data.size)
    return MetricSummary(mean=mean, std=std, std_err=std_err, ci95=Z_95 * std_err)


def summarize_run(
    *,
    agent: AgentKind,
    rewards: np.ndarray,
    steps: np.ndarray,
    suggestions: np.ndarray,
) -> RunStatistics:
    """Summarize per-trial vectors of one run.

    Parameters
    ----------
    agent : AgentKind
        Agent kind of the run (used in the report header).
    rewards, steps, suggestions : numpy.ndarray
        Equal-length per-trial vectors.
    """

    step_values = np.asarray(steps, dtype=float)
    suggestion_values = np.asarray(suggestions, dtype=float)
    if not (len(rewards) == len(step_values) == len(suggestion_values)):
        raise ValueError("per-trial vectors must have equal length")

    return RunStatistics(
        agent=agent,
        num_sims=len(step_values),
        reward=summarize_metric(rewards),
        steps=summarize_metric(step_values),
        suggestions=summarize_metric(suggestion_values),
        suggestions_per_step=summarize_metric(suggestion_values / step_values),
    )


def format_statistics_table(statistics: RunStatistics) -> str:
    """Render the fixed-column report table."""

    lines = [
        statistics.agent.describe(),
        _HEADER % ("Metric", "Mean", "Standard Dev", "Standard Error", "+/- 95 CI"),
        _HEADER % tuple(["-" * 15] * 5),
    ]
    for label, summary in statistics.rows():
        lines.append(_ROW % (label, summary.mean, summary.std, summary.std_err, summary.ci95))
    return "\n".join(lines)


def print_statistics(statistics: RunStatistics) -> None:
    """Print the report table to stdout."""

    print(format_statistics_table(statistics))


__all__ = [
    "MetricSummary",
    "RunStatistics",
    "Z_95",
    "format_statistics_table",
    "print_statistics",
    "summarize_metric",
    "summarize_run",
]
