"""Protocol contracts for problems and solved policies.

Both collaborators are external to the evaluation engine. States, actions and
observations are integer indices; problems provide labels for logging only.
The engine only reads from problems and policies, so a single instance can be
shared by concurrent trials as long as the implementation keeps no mutable
per-query state.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class POMDPProblem(Protocol):
    """Interface for finite partially observable decision problems.

    Notes
    -----
    ``transition_matrix`` may return a dense ``numpy`` array or a
    ``scipy.sparse`` matrix of shape ``(num_states, num_states)`` whose rows
    are current states and columns next states.
    """

    num_states: int
    num_actions: int
    num_observations: int
    discount: float
    action_names: tuple[str, ...]
    observation_names: tuple[str, ...]
    supports_advisor_belief: bool

    def transition_matrix(self, action: int) -> Any:
        """Return ``T[s, s'] = P(s' | s, action)``."""

    def observation_likelihoods(self, action: int, observation: int) -> np.ndarray:
        """Return ``P(observation | s', action)`` for every next state ``s'``."""

    def reward_vector(self, action: int) -> np.ndarray:
        """Return the expected immediate reward of ``action`` in every state."""

    def generate(
        self,
        state: int,
        action: int,
        rng: np.random.Generator,
    ) -> tuple[int, int, float]:
        """Sample ``(next_state, observation, reward)`` for one step.

        Parameters
        ----------
        state : int
            Current true state.
        action : int
            Executed action.
        rng : numpy.random.Generator
            Trial-local random generator.

        Returns
        -------
        tuple[int, int, float]
            Next state, observation and immediate reward.
        """

    def is_terminal(self, state: int) -> bool:
        """Return whether ``state`` ends the trial."""

    def sample_initial_state(self, rng: np.random.Generator) -> int:
        """Draw a true initial state."""

    def initial_belief(self) -> np.ndarray:
        """Return the agent's initial belief vector."""

    def advisor_belief(self, true_state: int, prior: Sequence[float] | None = None) -> np.ndarray:
        """Return the suggester's initial belief given the true initial state.

        Parameters
        ----------
        true_state : int
            True initial state of the trial.
        prior : Sequence[float] | None, optional
            Problem-specific hint describing how much the suggester knows.

        Returns
        -------
        numpy.ndarray
            Suggester belief vector.
        """

    def resolve_initial_state(self, override: Any) -> int:
        """Translate a problem-specific initial-condition override to a state index."""

    def state_label(self, state: int) -> str:
        """Return a human-readable label for logging."""


@runtime_checkable
class SolvedPolicy(Protocol):
    """Interface for a pre-solved control policy.

    Notes
    -----
    Implementations with mutable scratch caches must not be shared between
    worker threads; pass a factory to the trial driver instead.
    """

    def action(self, belief: np.ndarray) -> int:
        """Return the best action for ``belief``."""

    def action_for_state(self, state: int) -> int:
        """Return the best action if ``state`` were known exactly."""


__all__ = ["POMDPProblem", "SolvedPolicy"]
