"""Query adapter around an opaque solved policy."""

from __future__ import annotations

import numpy as np

from suggestion_eval.core.contracts import SolvedPolicy


class PolicyQueryAdapter:
    """Expose belief-based and state-based action queries with validation.

    Parameters
    ----------
    policy : SolvedPolicy
        Solved policy. It must not be shared with another thread if it keeps
        mutable query caches.
    num_actions : int
        Size of the action space, used to validate returned actions.
    num_states : int
        Size of the state space, used by :meth:`state_actions`.

    Notes
    -----
    The table of state-optimal actions is computed on first use and cached on
    the adapter. Adapters are created per trial, so the cache is never shared
    between workers.
    """

    def __init__(self, policy: SolvedPolicy, *, num_actions: int, num_states: int) -> None:
        self.policy = policy
        self.num_actions = int(num_actions)
        self.num_states = int(num_states)
        self._state_actions: np.ndarray | None = None

    def action_from_belief(self, belief: np.ndarray) -> int:
        """Return the policy action for ``belief``."""

        return self._checked(self.policy.action(belief))

    def action_from_state(self, state: int) -> int:
        """Return the perfect-knowledge action for ``state``."""

        return self._checked(self.policy.action_for_state(state))

    def state_actions(self) -> np.ndarray:
        """Return the perfect-knowledge action of every state."""

        if self._state_actions is None:
            table = np.array([self.action_from_state(state) for state in range(self.num_states)], dtype=int)
            table.setflags(write=False)
            self._state_actions = table
        return self._state_actions

    def _checked(self, action: int) -> int:
        value = int(action)
        if not 0 <= value < self.num_actions:
            raise ValueError(f"policy returned action {action!r} outside 0..{self.num_actions - 1}")
        return value


__all__ = ["PolicyQueryAdapter"]
