"""Agent kinds evaluated by the simulator.

Each kind is a frozen dataclass that carries only its own hyperparameter, so
invalid combinations (a Boltzmann ``lam`` on a naive agent, say) cannot be
expressed. Only :class:`NaiveAgent`, :class:`ScaledAgent` and
:class:`NoisyAgent` receive suggestions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from suggestion_eval.core.errors import InvalidConfigurationError


@dataclass(frozen=True, slots=True)
class NormalAgent:
    """Acts on its own belief and never looks at suggestions."""

    name: ClassVar[str] = "normal"
    uses_suggestions: ClassVar[bool] = False

    def describe(self) -> str:
        return f"Agent: {self.name}"


@dataclass(frozen=True, slots=True)
class PerfectAgent:
    """Acts as if the true state were known (upper-bound baseline)."""

    name: ClassVar[str] = "perfect"
    uses_suggestions: ClassVar[bool] = False

    def describe(self) -> str:
        return f"Agent: {self.name}"


@dataclass(frozen=True, slots=True)
class RandomAgent:
    """Executes a uniformly random action every step."""

    name: ClassVar[str] = "random"
    uses_suggestions: ClassVar[bool] = False

    def describe(self) -> str:
        return f"Agent: {self.name}"


@dataclass(frozen=True, slots=True)
class NaiveAgent:
    """Nudges its belief toward the suggestion and follows it with probability ``nu``.

    Parameters
    ----------
    nu : float
        Probability in ``[0, 1]`` of executing an admitted suggestion verbatim.
    """

    nu: float = 1.0
    name: ClassVar[str] = "naive"
    uses_suggestions: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.nu) <= 1.0:
            raise InvalidConfigurationError("nu must be in [0, 1]")

    def describe(self) -> str:
        return f"Agent: {self.name}, ν = {self.nu:.2f}"


@dataclass(frozen=True, slots=True)
class ScaledAgent:
    """Treats the suggestion as evidence that it is optimal in the true state.

    Parameters
    ----------
    tau : float
        Sharpness ``>= 0``. States whose optimal action differs from the
        suggestion are down-weighted by ``exp(-tau)``; ``inf`` is allowed.
    """

    tau: float = 1.0
    name: ClassVar[str] = "scaled"
    uses_suggestions: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if math.isnan(float(self.tau)) or float(self.tau) < 0.0:
            raise InvalidConfigurationError("tau must be >= 0")

    def describe(self) -> str:
        return f"Agent: {self.name}, τ = {self.tau:.2f}"


@dataclass(frozen=True, slots=True)
class NoisyAgent:
    """Models the suggester as Boltzmann-rational over action values.

    Parameters
    ----------
    lam : float
        Rationality coefficient ``>= 0``. ``0`` makes suggestions
        uninformative; larger values trust the action-value signal more.
    """

    lam: float = 1.0
    name: ClassVar[str] = "noisy"
    uses_suggestions: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if not math.isfinite(float(self.lam)) or float(self.lam) < 0.0:
            raise InvalidConfigurationError("lam must be a finite value >= 0")

    def describe(self) -> str:
        return f"Agent: {self.name}, λ = {self.lam:.2f}"


AgentKind = Union[NormalAgent, PerfectAgent, RandomAgent, NaiveAgent, ScaledAgent, NoisyAgent]

AGENT_KINDS: tuple[type, ...] = (NormalAgent, PerfectAgent, RandomAgent, NaiveAgent, ScaledAgent, NoisyAgent)


def parse_agent_kind(name: str, **hyperparameters: Any) -> AgentKind:
    """Build an agent kind from its name and optional hyperparameters.

    Parameters
    ----------
    name : str
        One of ``normal``, ``perfect``, ``random``, ``naive``, ``scaled`` or
        ``noisy``.
    **hyperparameters : Any
        ``nu``, ``tau`` or ``lam``. ``None`` values are ignored so callers can
        forward optional CLI flags unchanged.

    Returns
    -------
    AgentKind
        Constructed agent kind.

    Raises
    ------
    InvalidConfigurationError
        If the name is unknown or a hyperparameter does not belong to the kind.
    """

    kinds = {kind.name: kind for kind in AGENT_KINDS}
    kind = kinds.get(str(name).strip().lower())
    if kind is None:
        raise InvalidConfigurationError(f"unknown agent {name!r}; available: {', '.join(kinds)}")

    params = {key: float(value) for key, value in hyperparameters.items() if value is not None}
    try:
        return kind(**params)
    except TypeError:
        raise InvalidConfigurationError(
            f"agent {kind.name!r} does not accept hyperparameters {sorted(params)}"
        ) from None


__all__ = [
    "AGENT_KINDS",
    "AgentKind",
    "NaiveAgent",
    "NoisyAgent",
    "NormalAgent",
    "PerfectAgent",
    "RandomAgent",
    "ScaledAgent",
    "parse_agent_kind",
]
