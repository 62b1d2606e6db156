"""Shared toy problems and policies for the test suite."""

from __future__ import annotations

import numpy as np
import pytest

from suggestion_eval.policies import QMDPPolicy, mdp_action_values
from suggestion_eval.problems import TabularPOMDP, TigerProblem

STAY = 0
FLIP = 1


def make_two_state_problem(*, observation_accuracy: float = 0.9) -> TabularPOMDP:
    """Two states, ``stay``/``flip`` actions, reward 1 for matching the state index."""

    identity = np.eye(2)
    swap = np.array([[0.0, 1.0], [1.0, 0.0]])
    accuracy = np.array(
        [
            [observation_accuracy, 1.0 - observation_accuracy],
            [1.0 - observation_accuracy, observation_accuracy],
        ]
    )
    return TabularPOMDP(
        transitions=np.stack([identity, swap]),
        observations=np.stack([accuracy, accuracy]),
        rewards=np.array([[1.0, 0.0], [0.0, 1.0]]),
        discount=0.9,
        action_names=("stay", "flip"),
        observation_names=("see-0", "see-1"),
        state_names=("zero", "one"),
    )


@pytest.fixture
def two_state_problem() -> TabularPOMDP:
    return make_two_state_problem()


@pytest.fixture
def two_state_action_values(two_state_problem: TabularPOMDP) -> np.ndarray:
    return mdp_action_values(two_state_problem)


@pytest.fixture
def two_state_policy(two_state_action_values: np.ndarray) -> QMDPPolicy:
    return QMDPPolicy(two_state_action_values)


@pytest.fixture
def tiger_problem() -> TigerProblem:
    return TigerProblem()


@pytest.fixture
def tiger_action_values(tiger_problem: TigerProblem) -> np.ndarray:
    return mdp_action_values(tiger_problem)


@pytest.fixture
def tiger_policy(tiger_action_values: np.ndarray) -> QMDPPolicy:
    return QMDPPolicy(tiger_action_values)
