"""Generic finite POMDP defined by explicit probability tables.

The class in this module is a concrete problem implementation used by the
built-in problems and by tests; the evaluation engine only depends on the
:class:`~suggestion_eval.core.contracts.POMDPProblem` protocol.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
from scipy import sparse

from suggestion_eval.belief import normalize_belief, point_mass
from suggestion_eval.core.errors import InvalidConfigurationError

_ROW_ATOL = 1e-8


class TabularPOMDP:
    """Finite POMDP backed by transition, observation and reward tables.

    Parameters
    ----------
    transitions : numpy.ndarray | Sequence
        Either a dense array of shape ``(A, S, S)`` or a length-``A``
        sequence of ``(S, S)`` dense/``scipy.sparse`` matrices.
        ``transitions[a][s, s']`` is ``P(s' | s, a)``.
    observations : numpy.ndarray
        Array of shape ``(A, S, O)``; ``observations[a, s', o]`` is
        ``P(o | s', a)``.
    rewards : numpy.ndarray
        Array of shape ``(S, A)`` with immediate rewards.
    discount : float
        Discount factor in ``(0, 1]``.
    initial_distribution : Sequence[float] | None, optional
        Distribution of the true initial state and the agent's initial
        belief. Defaults to uniform over non-terminal states.
    terminal_states : Sequence[int], optional
        States that end a trial.
    action_names, observation_names, state_names : Sequence[str] | None, optional
        Labels used for logging.

    Raises
    ------
    InvalidConfigurationError
        If shapes disagree, rows are not probability distributions, or the
        discount is out of range.

    Notes
    -----
    Dense tables are stored read-only so that a single instance can be read by
    concurrent trials without synchronization.
    """

    supports_advisor_belief = False

    def __init__(
        self,
        *,
        transitions: Any,
        observations: np.ndarray,
        rewards: np.ndarray,
        discount: float,
        initial_distribution: Sequence[float] | None = None,
        terminal_states: Sequence[int] = (),
        action_names: Sequence[str] | None = None,
        observation_names: Sequence[str] | None = None,
        state_names: Sequence[str] | None = None,
    ) -> None:
        obs_table = np.array(observations, dtype=float)
        if obs_table.ndim != 3:
            raise InvalidConfigurationError("observations must have shape (A, S, O)")
        num_actions, num_states, num_observations = obs_table.shape

        self._transitions = _freeze_transitions(transitions, num_actions=num_actions, num_states=num_states)

        if not np.allclose(obs_table.sum(axis=2), 1.0, atol=_ROW_ATOL) or np.any(obs_table < 0.0):
            raise InvalidConfigurationError("observation rows must be probability distributions")
        obs_table.setflags(write=False)
        self._observations = obs_table

        reward_table = np.array(rewards, dtype=float)
        if reward_table.shape != (num_states, num_actions):
            raise InvalidConfigurationError(
                f"rewards must have shape {(num_states, num_actions)}, got {reward_table.shape}"
            )
        reward_table.setflags(write=False)
        self._rewards = reward_table

        if not 0.0 < float(discount) <= 1.0:
            raise InvalidConfigurationError("discount must be in (0, 1]")
        self.discount = float(discount)

        terminal = np.zeros(num_states, dtype=bool)
        for state in terminal_states:
            terminal[int(state)] = True
        terminal.setflags(write=False)
        self._terminal = terminal

        if initial_distribution is None:
            if np.all(terminal):
                raise InvalidConfigurationError("at least one state must be non-terminal")
            initial = normalize_belief((~terminal).astype(float))
        else:
            initial = np.array(initial_distribution, dtype=float)
            if initial.shape != (num_states,):
                raise InvalidConfigurationError(
                    f"initial_distribution must have length {num_states}"
                )
            initial = normalize_belief(initial)
        initial.setflags(write=False)
        self._initial = initial

        self.num_states = int(num_states)
        self.num_actions = int(num_actions)
        self.num_observations = int(num_observations)
        self.action_names = _labels(action_names, num_actions, prefix="a")
        self.observation_names = _labels(observation_names, num_observations, prefix="o")
        self._state_names = _labels(state_names, num_states, prefix="s")

    def transition_matrix(self, action: int) -> Any:
        """Return the ``(S, S)`` transition matrix of ``action``."""

        return self._transitions[action]

    def observation_likelihoods(self, action: int, observation: int) -> np.ndarray:
        """Return ``P(observation | s', action)`` over next states."""

        return self._observations[action, :, observation]

    def reward_vector(self, action: int) -> np.ndarray:
        """Return immediate rewards of ``action`` over states."""

        return self._rewards[:, action]

    def generate(
        self,
        state: int,
        action: int,
        rng: np.random.Generator,
    ) -> tuple[int, int, float]:
        """Sample next state, observation and reward."""

        row = _dense_row(self._transitions[action], state)
        next_state = int(rng.choice(self.num_states, p=row))
        observation = int(rng.choice(self.num_observations, p=self._observations[action, next_state]))
        return next_state, observation, float(self._rewards[state, action])

    def is_terminal(self, state: int) -> bool:
        """Return whether ``state`` is terminal."""

        return bool(self._terminal[state])

    def sample_initial_state(self, rng: np.random.Generator) -> int:
        """Sample a true initial state from the initial distribution."""

        return int(rng.choice(self.num_states, p=self._initial))

    def initial_belief(self) -> np.ndarray:
        """Return a fresh copy of the initial belief."""

        return np.array(self._initial)

    def advisor_belief(self, true_state: int, prior: Sequence[float] | None = None) -> np.ndarray:
        """Return a perfect-knowledge suggester belief.

        Parameters
        ----------
        true_state : int
            True initial state.
        prior : Sequence[float] | None, optional
            Explicit suggester belief over all states. When omitted the
            suggester knows the true state.

        Raises
        ------
        InvalidConfigurationError
            If ``prior`` has the wrong length.
        """

        if prior is None:
            return point_mass(self.num_states, true_state)
        values = np.asarray(prior, dtype=float)
        if values.shape != (self.num_states,):
            raise InvalidConfigurationError(
                f"suggester prior must have length {self.num_states}, got {values.shape[0] if values.ndim else 0}"
            )
        return normalize_belief(values)

    def resolve_initial_state(self, override: Any) -> int:
        """Validate an explicit initial state index."""

        if isinstance(override, bool) or not isinstance(override, (int, np.integer)):
            raise InvalidConfigurationError(f"initial state override must be a state index, got {override!r}")
        state = int(override)
        if not 0 <= state < self.num_states:
            raise InvalidConfigurationError(f"initial state {state} out of range")
        return state

    def state_label(self, state: int) -> str:
        """Return the state name."""

        return self._state_names[state]


def _freeze_transitions(transitions: Any, *, num_actions: int, num_states: int) -> tuple[Any, ...]:
    """Validate per-action transition matrices and mark them read-only."""

    if isinstance(transitions, np.ndarray):
        matrices = [transitions[action] for action in range(transitions.shape[0])]
    else:
        matrices = list(transitions)
    if len(matrices) != num_actions:
        raise InvalidConfigurationError(
            f"transitions must define {num_actions} actions, got {len(matrices)}"
        )

    frozen: list[Any] = []
    for action, matrix in enumerate(matrices):
        if sparse.issparse(matrix):
            table = sparse.csr_matrix(matrix, dtype=float)
            table.sum_duplicates()
            row_sums = np.asarray(table.sum(axis=1)).ravel()
            negative = bool(np.any(table.data < 0.0))
        else:
            table = np.array(matrix, dtype=float)
            table.setflags(write=False)
            row_sums = table.sum(axis=1)
            negative = bool(np.any(table < 0.0))
        if table.shape != (num_states, num_states):
            raise InvalidConfigurationError(
                f"transition matrix for action {action} must have shape {(num_states, num_states)}"
            )
        if negative or not np.allclose(row_sums, 1.0, atol=_ROW_ATOL):
            raise InvalidConfigurationError(f"transition rows for action {action} must sum to 1")
        frozen.append(table)
    return tuple(frozen)


def _dense_row(matrix: Any, state: int) -> np.ndarray:
    """Return one transition row as a dense normalized probability vector."""

    if sparse.issparse(matrix):
        row = np.asarray(matrix.getrow(state).toarray(), dtype=float).ravel()
    else:
        row = np.asarray(matrix[state], dtype=float)
    return row / float(row.sum())


def _labels(names: Sequence[str] | None, count: int, *, prefix: str) -> tuple[str, ...]:
    """Return validated labels or generated defaults."""

    if names is None:
        return tuple(f"{prefix}{index}" for index in range(count))
    labels = tuple(str(name) for name in names)
    if len(labels) != count:
        raise InvalidConfigurationError(f"expected {count} labels, got {len(labels)}")
    return labels


__all__ = ["TabularPOMDP"]
