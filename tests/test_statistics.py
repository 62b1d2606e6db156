"""Tests for run statistics and the report table."""

from __future__ import annotations

import math

import numpy as np
import pytest

from suggestion_eval.agents import NormalAgent, ScaledAgent
from suggestion_eval.analysis import format_statistics_table, print_statistics, summarize_metric, summarize_run


def test_summarize_metric_uses_sample_standard_deviation() -> None:
    """Spread is the ``ddof=1`` deviation with a normal 95% half-width."""

    summary = summarize_metric([1.0, 2.0, 3.0])

    assert summary.mean == pytest.approx(2.0)
    assert summary.std == pytest.approx(1.0)
    assert summary.std_err == pytest.approx(1.0 / math.sqrt(3.0))
    assert summary.ci95 == pytest.approx(1.96 / math.sqrt(3.0))


def test_single_trial_has_undefined_spread() -> None:
    """One trial yields a mean but no standard deviation."""

    summary = summarize_metric([4.0])

    assert summary.mean == pytest.approx(4.0)
    assert math.isnan(summary.std)
    assert math.isnan(summary.ci95)


def test_summarize_metric_rejects_empty_input() -> None:
    """Empty vectors have no statistics."""

    with pytest.raises(ValueError, match="must not be empty"):
        summarize_metric([])


def test_summarize_run_derives_suggestions_per_step() -> None:
    """Suggestions per step are computed trial by trial before averaging."""

    stats = summarize_run(
        agent=NormalAgent(),
        rewards=np.array([1.0, 3.0]),
        steps=np.array([10, 5]),
        suggestions=np.array([5, 5]),
    )

    assert stats.num_sims == 2
    assert stats.suggestions_per_step.mean == pytest.approx((0.5 + 1.0) / 2.0)
    assert [label for label, _ in stats.rows()] == ["Reward", "Steps", "# Suggestions", "# Sugg / Step"]


def test_summarize_run_rejects_ragged_vectors() -> None:
    """Per-trial vectors must line up."""

    with pytest.raises(ValueError, match="equal length"):
        summarize_run(agent=NormalAgent(), rewards=np.zeros(2), steps=np.ones(3), suggestions=np.zeros(2))


def test_statistics_table_layout(capsys) -> None:
    """The report has the agent header, column titles and fixed-width rows."""

    stats = summarize_run(
        agent=ScaledAgent(tau=1.0),
        rewards=np.array([1.0, 2.0, 3.0]),
        steps=np.array([4, 4, 4]),
        suggestions=np.array([0, 1, 2]),
    )

    lines = format_statistics_table(stats).splitlines()

    assert lines[0] == "Agent: scaled, τ = 1.00"
    assert lines[1].split(" | ")[0].strip() == "Metric"
    assert lines[1].split(" | ")[-1].strip() == "+/- 95 CI"
    assert set(lines[2].replace(" | ", "")) == {"-"}
    std_err = 1.0 / math.sqrt(3.0)
    expected_row = ["%15s" % "Reward"] + ["%15.5f" % value for value in (2.0, 1.0, std_err, 1.96 * std_err)]
    assert lines[3] == " | ".join(expected_row)
    assert len(lines) == 7

    print_statistics(stats)
    assert capsys.readouterr().out.splitlines() == lines
