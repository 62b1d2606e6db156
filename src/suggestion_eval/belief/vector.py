"""Dense belief vectors and Bayesian filtering.

Beliefs are plain ``numpy`` arrays of shape ``(num_states,)`` with
non-negative entries summing to one. The filter and the suggestion-fusion
updates both renormalize through :func:`normalize_belief`.
"""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np

from suggestion_eval.core.contracts import POMDPProblem
from suggestion_eval.core.errors import DegenerateBeliefError, InvalidObservationError

BELIEF_ATOL = 1e-9


def normalize_belief(weights: np.ndarray) -> np.ndarray:
    """Validate and renormalize unnormalized belief weights.

    Parameters
    ----------
    weights : numpy.ndarray
        Non-negative state weights.

    Returns
    -------
    numpy.ndarray
        New array summing to one.

    Raises
    ------
    DegenerateBeliefError
        If weights are negative, non-finite, or sum to zero.
    """

    values = np.asarray(weights, dtype=float)
    if values.ndim != 1:
        raise DegenerateBeliefError(f"belief must be one-dimensional, got shape {values.shape}")
    if not np.all(np.isfinite(values)):
        raise DegenerateBeliefError("belief contains non-finite weights")
    if np.any(values < 0.0):
        raise DegenerateBeliefError("belief contains negative weights")

    total = float(np.sum(values))
    if total <= 0.0:
        raise DegenerateBeliefError("belief weights sum to zero")
    return values / total


def is_valid_belief(belief: np.ndarray, *, atol: float = BELIEF_ATOL) -> bool:
    """Return whether ``belief`` is a non-negative vector summing to one."""

    values = np.asarray(belief, dtype=float)
    return bool(
        values.ndim == 1
        and np.all(np.isfinite(values))
        and np.all(values >= 0.0)
        and abs(float(np.sum(values)) - 1.0) <= atol
    )


def uniform_belief(num_states: int) -> np.ndarray:
    """Return the uniform belief over ``num_states`` states."""

    if num_states <= 0:
        raise ValueError("num_states must be > 0")
    return np.full(num_states, 1.0 / float(num_states))


def point_mass(num_states: int, state: int) -> np.ndarray:
    """Return a belief that puts all mass on ``state``."""

    if not 0 <= state < num_states:
        raise IndexError(f"state {state} out of range for {num_states} states")
    belief = np.zeros(num_states, dtype=float)
    belief[state] = 1.0
    return belief


def belief_from_mapping(num_states: int, probabilities: Mapping[int, float]) -> np.ndarray:
    """Build a dense belief from a sparse ``{state: probability}`` mapping."""

    weights = np.zeros(num_states, dtype=float)
    for state, probability in probabilities.items():
        if not 0 <= int(state) < num_states:
            raise IndexError(f"state {state} out of range for {num_states} states")
        weights[int(state)] += float(probability)
    return normalize_belief(weights)


def belief_support(belief: np.ndarray, *, atol: float = BELIEF_ATOL) -> dict[int, float]:
    """Return the sparse view ``{state: probability}`` of states above ``atol``."""

    values = np.asarray(belief, dtype=float)
    indices = np.flatnonzero(values > atol)
    return {int(index): float(values[index]) for index in indices}


def predict_belief(problem: POMDPProblem, belief: np.ndarray, action: int) -> np.ndarray:
    """Propagate a belief through the transition model without normalizing.

    Returns
    -------
    numpy.ndarray
        ``sum_s b[s] * T(s, action, s')`` for every ``s'``.
    """

    transition = problem.transition_matrix(action)
    # Works for dense arrays and scipy.sparse matrices alike.
    return np.asarray(transition.T @ np.asarray(belief, dtype=float), dtype=float).ravel()


def filter_belief(
    problem: POMDPProblem,
    belief: np.ndarray,
    action: int,
    observation: int,
) -> np.ndarray:
    """Apply one discrete Bayes-filter update.

    Parameters
    ----------
    problem : POMDPProblem
        Problem providing transition and observation models.
    belief : numpy.ndarray
        Current belief.
    action : int
        Executed action.
    observation : int
        Realized observation.

    Returns
    -------
    numpy.ndarray
        Posterior belief summing to one.

    Raises
    ------
    InvalidObservationError
        If ``observation`` has zero probability under every reachable next
        state.
    """

    predicted = predict_belief(problem, belief, action)
    joint = predicted * np.asarray(problem.observation_likelihoods(action, observation), dtype=float)
    try:
        return normalize_belief(joint)
    except DegenerateBeliefError as exc:
        raise InvalidObservationError(action, observation) from exc


__all__ = [
    "BELIEF_ATOL",
    "belief_from_mapping",
    "belief_support",
    "filter_belief",
    "is_valid_belief",
    "normalize_belief",
    "point_mass",
    "predict_belief",
    "uniform_belief",
]
