"""Tests for built-in problem implementations."""

from __future__ import annotations

import numpy as np
import pytest

from suggestion_eval.belief import is_valid_belief
from suggestion_eval.core.errors import InvalidConfigurationError
from suggestion_eval.problems import RockSampleProblem, TabularPOMDP
from suggestion_eval.problems.rock_sample import EAST, OBS_NONE, SAMPLE


def test_tabular_problem_rejects_non_stochastic_rows() -> None:
    """Transition rows must be probability distributions."""

    with pytest.raises(InvalidConfigurationError, match="sum to 1"):
        TabularPOMDP(
            transitions=np.array([[[0.5, 0.4], [0.0, 1.0]]]),
            observations=np.ones((1, 2, 1)),
            rewards=np.zeros((2, 1)),
            discount=0.9,
        )


def test_tabular_problem_tables_are_read_only(two_state_problem) -> None:
    """Shared problems should not be mutable through their accessors."""

    with pytest.raises(ValueError):
        two_state_problem.reward_vector(0)[0] = 5.0


def test_tiger_listen_keeps_state_and_open_resets(tiger_problem) -> None:
    """Listening keeps the tiger in place; opening a door resets uniformly."""

    assert tiger_problem.transition_matrix(0) == pytest.approx(np.eye(2))
    assert tiger_problem.transition_matrix(1) == pytest.approx(np.full((2, 2), 0.5))
    assert tiger_problem.reward_vector(1) == pytest.approx([-100.0, 10.0])
    assert tiger_problem.initial_belief() == pytest.approx([0.5, 0.5])


def test_rock_sample_state_encoding() -> None:
    """State indices should decode back to position and rock mask."""

    problem = RockSampleProblem()

    assert problem.num_states == 5 * 5 * 8 + 1
    assert problem.num_actions == 8
    assert problem.decode(problem.encode(4, 2, 5)) == (4, 2, 5)
    assert problem.is_terminal(problem.terminal_state)


def test_rock_sample_exit_and_sampling_rewards() -> None:
    """Leaving east is terminal and rewarded; sampling pays by rock quality."""

    problem = RockSampleProblem()
    rng = np.random.default_rng(0)

    next_state, observation, reward = problem.generate(problem.encode(4, 0, 0), EAST, rng)
    assert next_state == problem.terminal_state
    assert observation == OBS_NONE
    assert reward == pytest.approx(10.0)

    next_state, _, reward = problem.generate(problem.encode(0, 0, 0b001), SAMPLE, rng)
    assert reward == pytest.approx(10.0)
    assert problem.decode(next_state) == (0, 0, 0)

    _, _, reward = problem.generate(problem.encode(0, 0, 0b000), SAMPLE, rng)
    assert reward == pytest.approx(-10.0)


def test_rock_sample_check_efficiency_is_perfect_on_top_of_rock() -> None:
    """The sensor should be exact at distance zero and degrade with distance."""

    problem = RockSampleProblem()

    assert problem.check_efficiency((0, 0), 0) == pytest.approx(1.0)
    assert 0.5 < problem.check_efficiency((4, 4), 0) < 1.0


def test_rock_sample_initial_rock_override() -> None:
    """A rock vector should select the matching state at the start position."""

    problem = RockSampleProblem()

    assert problem.resolve_initial_state([1, 0, 1]) == problem.encode(0, 0, 0b101)
    with pytest.raises(InvalidConfigurationError, match="init_rocks"):
        problem.resolve_initial_state([1, 0])
    with pytest.raises(InvalidConfigurationError, match="0 or 1"):
        problem.resolve_initial_state((2, -1, 0))
    with pytest.raises(InvalidConfigurationError, match="terminal"):
        problem.resolve_initial_state(problem.terminal_state)


def test_rock_sample_advisor_belief_priors() -> None:
    """Suggester priors should map through the true rock configuration."""

    problem = RockSampleProblem()
    true_state = problem.encode(0, 0, 0b001)

    perfect = problem.advisor_belief(true_state)
    assert perfect[true_state] == pytest.approx(1.0)

    partial = problem.advisor_belief(true_state, [0.75, 0.5])
    assert is_valid_belief(partial)
    assert partial[true_state] == pytest.approx(0.75 * 0.5 * 0.5)

    per_rock = problem.advisor_belief(true_state, [1.0, 0.0, 0.0])
    assert per_rock[true_state] == pytest.approx(1.0)

    with pytest.raises(InvalidConfigurationError, match="length 2 or 3"):
        problem.advisor_belief(true_state, [0.5, 0.5, 0.5, 0.5])


def test_rock_sample_initial_belief_is_uniform_over_rocks() -> None:
    """The agent starts knowing its position but not the rocks."""

    problem = RockSampleProblem()
    belief = problem.initial_belief()

    start_states = [problem.encode(0, 0, mask) for mask in range(8)]
    assert belief[start_states] == pytest.approx([1.0 / 8.0] * 8)
    assert float(belief.sum()) == pytest.approx(1.0)
