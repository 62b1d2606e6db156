"""Immutable table-backed policies.

Policies here are pure functions of read-only tables, so one instance can be
queried by every concurrent trial without copying.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from suggestion_eval.core.contracts import POMDPProblem
from suggestion_eval.core.errors import InvalidConfigurationError


class AlphaVectorPolicy:
    """Policy represented by a set of alpha vectors.

    Parameters
    ----------
    alphas : numpy.ndarray
        Array of shape ``(K, S)``; row ``k`` is the value of following the
        conditional plan rooted at ``alpha_actions[k]``.
    alpha_actions : Sequence[int]
        Root action of each alpha vector.

    Notes
    -----
    Ties are broken toward the lowest alpha index.
    """

    def __init__(self, alphas: np.ndarray, alpha_actions: Sequence[int]) -> None:
        table = np.array(alphas, dtype=float)
        if table.ndim != 2 or table.shape[0] == 0:
            raise InvalidConfigurationError("alphas must have shape (K, S) with K > 0")
        actions = np.array([int(action) for action in alpha_actions], dtype=int)
        if actions.shape != (table.shape[0],):
            raise InvalidConfigurationError("alpha_actions must have one entry per alpha vector")

        table.setflags(write=False)
        actions.setflags(write=False)
        self._alphas = table
        self._alpha_actions = actions

    @property
    def num_states(self) -> int:
        return int(self._alphas.shape[1])

    def value(self, belief: np.ndarray) -> float:
        """Return the value ``max_k alpha_k . b``."""

        return float(np.max(self._alphas @ np.asarray(belief, dtype=float)))

    def action(self, belief: np.ndarray) -> int:
        """Return the root action of the maximizing alpha vector."""

        scores = self._alphas @ np.asarray(belief, dtype=float)
        return int(self._alpha_actions[int(np.argmax(scores))])

    def action_for_state(self, state: int) -> int:
        """Return the best action for a known state."""

        return int(self._alpha_actions[int(np.argmax(self._alphas[:, state]))])


class QMDPPolicy(AlphaVectorPolicy):
    """QMDP policy: one alpha vector per action column of an action-value table.

    Parameters
    ----------
    action_values : numpy.ndarray
        Array of shape ``(S, A)``.
    """

    def __init__(self, action_values: np.ndarray) -> None:
        table = np.asarray(action_values, dtype=float)
        if table.ndim != 2:
            raise InvalidConfigurationError("action_values must have shape (S, A)")
        super().__init__(table.T, range(table.shape[1]))

    @property
    def action_values(self) -> np.ndarray:
        """Read-only ``(S, A)`` view of the underlying table."""

        return self._alphas.T


def mdp_action_values(
    problem: POMDPProblem,
    *,
    tolerance: float = 1e-8,
    max_iterations: int = 10_000,
) -> np.ndarray:
    """Compute fully observable action values by value iteration.

    Parameters
    ----------
    problem : POMDPProblem
        Problem providing transition and reward tables.
    tolerance : float, optional
        Stop when the largest value change drops below this threshold.
    max_iterations : int, optional
        Iteration cap, relevant for ``discount == 1``.

    Returns
    -------
    numpy.ndarray
        Read-only ``(S, A)`` table ``Q[s, a]``.

    Notes
    -----
    Terminal states are absorbing with value zero.
    """

    terminal = np.array([problem.is_terminal(state) for state in range(problem.num_states)], dtype=bool)
    rewards = np.stack([np.asarray(problem.reward_vector(a), dtype=float) for a in range(problem.num_actions)], axis=1)
    rewards = np.where(terminal[:, None], 0.0, rewards)

    values = np.zeros(problem.num_states, dtype=float)
    q_values = np.array(rewards)
    for _ in range(max_iterations):
        q_values = np.stack(
            [
                rewards[:, action]
                + problem.discount * np.asarray(problem.transition_matrix(action) @ values, dtype=float).ravel()
                for action in range(problem.num_actions)
            ],
            axis=1,
        )
        q_values[terminal] = 0.0
        updated = q_values.max(axis=1)
        delta = float(np.max(np.abs(updated - values)))
        values = updated
        if delta < tolerance:
            break

    q_values.setflags(write=False)
    return q_values


__all__ = ["AlphaVectorPolicy", "QMDPPolicy", "mdp_action_values"]
