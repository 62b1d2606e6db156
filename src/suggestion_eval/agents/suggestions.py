"""Suggestion generator with tunable reliability."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from suggestion_eval.core.errors import InvalidConfigurationError


@dataclass(frozen=True, slots=True)
class SuggestionEvent:
    """Per-step suggestion record.

    Parameters
    ----------
    suggested_action : int
        Action proposed by the suggester.
    accepted : bool
        Whether the suggestion passed every admission gate.
    """

    suggested_action: int
    accepted: bool


@dataclass(frozen=True, slots=True)
class SuggestionGenerator:
    """Mix of informed and uniformly random suggestions.

    Parameters
    ----------
    mix_ratio : float
        Probability in ``[0, 1]`` of an informed suggestion. ``1`` always
        suggests the informed action, ``0`` always a random one.
    num_actions : int
        Size of the action space for random suggestions.
    """

    mix_ratio: float
    num_actions: int

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.mix_ratio) <= 1.0:
            raise InvalidConfigurationError("mix_ratio must be in [0, 1]")
        if self.num_actions <= 0:
            raise InvalidConfigurationError("num_actions must be > 0")

    def suggest(
        self,
        rng: np.random.Generator,
        perfect_action: int,
        advisor_action: Callable[[], int] | None = None,
    ) -> int:
        """Draw one suggestion.

        Parameters
        ----------
        rng : numpy.random.Generator
            Trial-local generator.
        perfect_action : int
            Action optimal for the true state.
        advisor_action : Callable[[], int] | None, optional
            Lazy query of the suggester's belief-based action. When omitted
            the informed suggestion is ``perfect_action``.

        Returns
        -------
        int
            Suggested action.
        """

        if rng.random() < self.mix_ratio:
            return int(advisor_action()) if advisor_action is not None else int(perfect_action)
        return int(rng.integers(self.num_actions))


__all__ = ["SuggestionEvent", "SuggestionGenerator"]
