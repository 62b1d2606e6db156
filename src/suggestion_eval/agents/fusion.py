"""Suggestion fusion: turning a suggested action into a belief update.

A suggestion is treated as an observation of the suggester's behaviour. Each
fusion kind defines a likelihood ``P(suggestion | s)`` and the belief is
updated by Bayes' rule in log space::

    log b'(s) = log b(s) + log P(suggestion | s) - log Z

- ``naive`` and ``scaled`` use ``log P = 0`` where the suggestion is the
  state-optimal action and ``-tau`` elsewhere (``naive`` fixes ``tau``).
- ``noisy`` uses the Boltzmann probability of the suggestion under
  ``lam * Q[s, :]``.

Only the ``naive`` kind draws randomness here (the follow-or-ignore coin).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.special import logsumexp

from suggestion_eval.agents.kinds import AgentKind, NaiveAgent, NoisyAgent, ScaledAgent
from suggestion_eval.belief import normalize_belief
from suggestion_eval.core.errors import MissingResourceError
from suggestion_eval.policies import PolicyQueryAdapter

NAIVE_SUGGESTION_WEIGHT = 1.0


@dataclass(frozen=True, slots=True)
class FusionResult:
    """Updated belief and the action chosen after fusing a suggestion."""

    belief: np.ndarray
    action: int


def scaled_log_likelihoods(consistent: np.ndarray, tau: float) -> np.ndarray:
    """Return ``0`` for suggestion-consistent states and ``-tau`` elsewhere.

    Parameters
    ----------
    consistent : numpy.ndarray
        Boolean mask of states whose optimal action equals the suggestion.
    tau : float
        Non-negative sharpness; ``inf`` zeroes inconsistent states.
    """

    mask = np.asarray(consistent, dtype=bool)
    # np.where avoids 0 * inf when tau is infinite.
    return np.where(mask, 0.0, -float(tau))


def noisy_log_likelihoods(action_values: np.ndarray, suggestion: int, lam: float) -> np.ndarray:
    """Return ``log softmax(lam * Q[s, :])[suggestion]`` for every state."""

    logits = float(lam) * np.asarray(action_values, dtype=float)
    return logits[:, suggestion] - logsumexp(logits, axis=1)


def reweight_belief(belief: np.ndarray, log_likelihoods: np.ndarray) -> np.ndarray:
    """Apply a log-space Bayes update and renormalize.

    States without prior mass stay at zero. When every supported state has
    likelihood zero the suggestion carries no usable information and the
    belief is returned unchanged.
    """

    prior = np.asarray(belief, dtype=float)
    support = prior > 0.0
    log_post = np.full(prior.shape, -np.inf)
    log_post[support] = np.log(prior[support]) + np.asarray(log_likelihoods, dtype=float)[support]

    if not np.any(np.isfinite(log_post)):
        return normalize_belief(prior)
    return normalize_belief(np.exp(log_post - logsumexp(log_post)))


def suggestion_posterior(
    kind: AgentKind,
    belief: np.ndarray,
    policy: PolicyQueryAdapter,
    suggestion: int,
    *,
    action_values: np.ndarray | None = None,
) -> np.ndarray:
    """Return the belief after treating ``suggestion`` as evidence.

    Raises
    ------
    MissingResourceError
        If ``kind`` is noisy and ``action_values`` is missing or misshapen.
    TypeError
        If ``kind`` does not use suggestions.
    """

    if isinstance(kind, NoisyAgent):
        table = require_action_values(action_values, num_states=policy.num_states, num_actions=policy.num_actions)
        return reweight_belief(belief, noisy_log_likelihoods(table, suggestion, kind.lam))

    if isinstance(kind, ScaledAgent):
        tau = kind.tau
    elif isinstance(kind, NaiveAgent):
        tau = NAIVE_SUGGESTION_WEIGHT
    else:
        raise TypeError(f"agent kind {kind.name!r} does not fuse suggestions")

    consistent = policy.state_actions() == int(suggestion)
    return reweight_belief(belief, scaled_log_likelihoods(consistent, tau))


def fuse(
    kind: AgentKind,
    belief: np.ndarray,
    policy: PolicyQueryAdapter,
    suggestion: int,
    *,
    baseline_action: int,
    rng: np.random.Generator,
    action_values: np.ndarray | None = None,
) -> FusionResult:
    """Fuse an admitted suggestion into the agent's belief and action.

    Parameters
    ----------
    kind : AgentKind
        ``NaiveAgent``, ``ScaledAgent`` or ``NoisyAgent``.
    belief : numpy.ndarray
        Agent belief before the suggestion.
    policy : PolicyQueryAdapter
        Agent policy; supplies state-optimal actions and the post-fusion action.
    suggestion : int
        Admitted suggested action.
    baseline_action : int
        Action the agent would take without the suggestion.
    rng : numpy.random.Generator
        Trial-local generator, used only by the naive coin flip.
    action_values : numpy.ndarray | None, optional
        ``(S, A)`` action-value table, required for ``NoisyAgent``.

    Returns
    -------
    FusionResult
        Renormalized belief and the action to execute.

    Notes
    -----
    The naive agent keeps the updated belief for later steps even though the
    executed action ignores it.
    """

    posterior = suggestion_posterior(kind, belief, policy, suggestion, action_values=action_values)
    if isinstance(kind, NaiveAgent):
        action = int(suggestion) if rng.random() < kind.nu else int(baseline_action)
    else:
        action = policy.action_from_belief(posterior)
    return FusionResult(belief=posterior, action=action)


def require_action_values(
    action_values: np.ndarray | None,
    *,
    num_states: int,
    num_actions: int,
) -> np.ndarray:
    """Validate the action-value table needed by the noisy kind.

    Raises
    ------
    MissingResourceError
        If the table is absent or not shaped ``(num_states, num_actions)``.
    """

    if action_values is None:
        raise MissingResourceError("the noisy agent requires an action-value table")
    table = np.asarray(action_values, dtype=float)
    if table.shape != (num_states, num_actions):
        raise MissingResourceError(
            f"action-value table must have shape {(num_states, num_actions)}, got {table.shape}"
        )
    return table


__all__ = [
    "FusionResult",
    "NAIVE_SUGGESTION_WEIGHT",
    "fuse",
    "noisy_log_likelihoods",
    "require_action_values",
    "reweight_belief",
    "scaled_log_likelihoods",
    "suggestion_posterior",
]
