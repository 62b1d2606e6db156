"""Exception taxonomy for suggestion evaluation runs.

Configuration problems are detected before any trial starts. Degenerate
beliefs and missing action-value tables surface inside one trial and abort
the whole run; none of these errors are transient, so nothing retries them.
"""

from __future__ import annotations


class SuggestionEvalError(Exception):
    """Base class for all package-specific errors."""


class InvalidConfigurationError(SuggestionEvalError, ValueError):
    """Raised for unknown identifiers or malformed run parameters."""


class DegenerateBeliefError(SuggestionEvalError, ValueError):
    """Raised when a belief cannot be renormalized (zero or non-finite mass)."""


class InvalidObservationError(DegenerateBeliefError):
    """Raised when an observation has zero probability under every reachable state.

    Parameters
    ----------
    action : int
        Executed action used for the belief update.
    observation : int
        Realized observation.

    Notes
    -----
    This signals an inconsistency between the generative model and the
    belief, not a user error.
    """

    def __init__(self, action: int, observation: int) -> None:
        self.action = int(action)
        self.observation = int(observation)
        super().__init__(
            f"observation {self.observation} has zero probability after action "
            f"{self.action} under the current belief"
        )


class MissingResourceError(SuggestionEvalError, LookupError):
    """Raised when a required external resource (action-value table) is absent."""


__all__ = [
    "DegenerateBeliefError",
    "InvalidConfigurationError",
    "InvalidObservationError",
    "MissingResourceError",
    "SuggestionEvalError",
]
