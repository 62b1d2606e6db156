"""Classic Tiger POMDP."""

from __future__ import annotations

import numpy as np

from suggestion_eval.core.errors import InvalidConfigurationError
from suggestion_eval.plugins import ComponentManifest
from suggestion_eval.problems.tabular import TabularPOMDP

TIGER_LEFT = 0
TIGER_RIGHT = 1

LISTEN = 0
OPEN_LEFT = 1
OPEN_RIGHT = 2

HEAR_LEFT = 0
HEAR_RIGHT = 1


class TigerProblem(TabularPOMDP):
    """Two doors, one tiger; listening is noisy, opening resets the episode.

    Parameters
    ----------
    listen_accuracy : float, optional
        Probability of hearing the tiger behind the correct door.
    listen_cost : float, optional
        Reward of the listen action (usually negative).
    treasure_reward : float, optional
        Reward for opening the door without the tiger.
    tiger_penalty : float, optional
        Reward for opening the tiger door.
    discount : float, optional
        Discount factor.

    Notes
    -----
    The suggester knows where the tiger is, so suggestions fall back to the
    perfect-knowledge action.
    """

    def __init__(
        self,
        *,
        listen_accuracy: float = 0.85,
        listen_cost: float = -1.0,
        treasure_reward: float = 10.0,
        tiger_penalty: float = -100.0,
        discount: float = 0.95,
    ) -> None:
        if not 0.5 <= listen_accuracy <= 1.0:
            raise InvalidConfigurationError("listen_accuracy must be in [0.5, 1]")

        reset = np.full((2, 2), 0.5)
        transitions = np.stack([np.eye(2), reset, reset])

        listen_obs = np.array(
            [
                [listen_accuracy, 1.0 - listen_accuracy],
                [1.0 - listen_accuracy, listen_accuracy],
            ]
        )
        uninformative = np.full((2, 2), 0.5)
        observations = np.stack([listen_obs, uninformative, uninformative])

        rewards = np.array(
            [
                [listen_cost, tiger_penalty, treasure_reward],
                [listen_cost, treasure_reward, tiger_penalty],
            ]
        )

        super().__init__(
            transitions=transitions,
            observations=observations,
            rewards=rewards,
            discount=discount,
            action_names=("listen", "open-left", "open-right"),
            observation_names=("hear-left", "hear-right"),
            state_names=("tiger-left", "tiger-right"),
        )


def create_tiger_problem(
    *,
    listen_accuracy: float = 0.85,
    listen_cost: float = -1.0,
    treasure_reward: float = 10.0,
    tiger_penalty: float = -100.0,
    discount: float = 0.95,
) -> TigerProblem:
    """Factory used by plugin discovery."""

    return TigerProblem(
        listen_accuracy=listen_accuracy,
        listen_cost=listen_cost,
        treasure_reward=treasure_reward,
        tiger_penalty=tiger_penalty,
        discount=discount,
    )


PLUGIN_MANIFESTS = [
    ComponentManifest(
        kind="problem",
        component_id="tiger",
        factory=create_tiger_problem,
        description="Classic two-door Tiger POMDP",
    )
]
