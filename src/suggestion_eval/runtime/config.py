"""Run configuration for suggestion-evaluation simulations."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from suggestion_eval.agents.kinds import AGENT_KINDS, AgentKind, NormalAgent, parse_agent_kind
from suggestion_eval.core.config_validation import (
    coerce_non_negative_float,
    coerce_positive_int,
    coerce_probability,
    coerce_seed,
    require_bool,
    require_mapping,
    validate_allowed_keys,
    validate_required_keys,
)
from suggestion_eval.core.errors import InvalidConfigurationError


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Runtime configuration for a batch of independent trials.

    Parameters
    ----------
    num_steps : int, optional
        Step budget per trial.
    num_sims : int, optional
        Number of trials.
    agent : AgentKind, optional
        Agent kind with its hyperparameter.
    max_suggestions : float, optional
        Maximum admitted suggestions per trial. ``inf`` means unbounded.
    msg_reception_rate : float, optional
        Probability in ``[0, 1]`` that a novel suggestion is received.
    mix_ratio : float, optional
        Probability in ``[0, 1]`` that a suggestion is informed rather than
        uniformly random.
    verbose : bool, optional
        Log per-step details at INFO level.
    render : bool, optional
        Send pre/post-action frames to the renderer.
    seed : int | None, optional
        Root seed for per-trial random streams. ``None`` uses OS entropy.
    num_workers : int | None, optional
        Worker threads. ``None`` picks ``min(32, cpu_count)``; ``1`` runs
        trials inline.
    progress : bool, optional
        Show a progress bar.
    initial_state : Any, optional
        Problem-specific initial-condition override (state index, or a rock
        vector for RockSample).
    suggester_prior : Sequence[float] | None, optional
        Problem-specific hint for the suggester's initial belief.

    Raises
    ------
    InvalidConfigurationError
        If any value is out of range.
    """

    num_steps: int = 50
    num_sims: int = 1
    agent: AgentKind = field(default_factory=NormalAgent)
    max_suggestions: float = math.inf
    msg_reception_rate: float = 1.0
    mix_ratio: float = 1.0
    verbose: bool = False
    render: bool = False
    seed: int | None = None
    num_workers: int | None = None
    progress: bool = False
    initial_state: Any = None
    suggester_prior: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        coerce_positive_int(self.num_steps, field_name="num_steps")
        coerce_positive_int(self.num_sims, field_name="num_sims")
        coerce_non_negative_float(self.max_suggestions, field_name="max_suggestions")
        coerce_probability(self.msg_reception_rate, field_name="msg_reception_rate")
        coerce_probability(self.mix_ratio, field_name="mix_ratio")
        if self.num_workers is not None:
            coerce_positive_int(self.num_workers, field_name="num_workers")
        coerce_seed(self.seed, field_name="seed")
        for flag in ("verbose", "render", "progress"):
            require_bool(getattr(self, flag), field_name=flag)
        if not isinstance(self.agent, AGENT_KINDS):
            raise InvalidConfigurationError(f"agent must be an agent kind, got {self.agent!r}")
        if self.suggester_prior is not None:
            object.__setattr__(self, "suggester_prior", tuple(float(value) for value in self.suggester_prior))


_SIMULATION_KEYS = (
    "num_steps",
    "num_sims",
    "max_suggestions",
    "msg_reception_rate",
    "mix_ratio",
    "verbose",
    "render",
    "seed",
    "num_workers",
    "progress",
    "initial_state",
    "suggester_prior",
)


def agent_from_mapping(raw: Mapping[str, Any]) -> AgentKind:
    """Parse ``{"kind": ..., "nu"|"tau"|"lam": ...}`` into an agent kind."""

    mapping = require_mapping(raw, field_name="agent")
    validate_allowed_keys(mapping, field_name="agent", allowed_keys=("kind", "nu", "tau", "lam"))
    validate_required_keys(mapping, field_name="agent", required_keys=("kind",))
    params = {key: value for key, value in mapping.items() if key != "kind"}
    return parse_agent_kind(str(mapping["kind"]), **params)


def run_config_from_mapping(
    simulation: Mapping[str, Any] | None,
    *,
    agent: AgentKind,
) -> RunConfig:
    """Build a :class:`RunConfig` from a declarative ``simulation`` mapping.

    Parameters
    ----------
    simulation : Mapping[str, Any] | None
        Mapping with :class:`RunConfig` field names. ``max_suggestions`` may
        be ``null`` for unbounded.
    agent : AgentKind
        Parsed agent kind.

    Returns
    -------
    RunConfig
        Validated configuration.
    """

    mapping = dict(require_mapping(simulation if simulation is not None else {}, field_name="simulation"))
    validate_allowed_keys(mapping, field_name="simulation", allowed_keys=_SIMULATION_KEYS)

    if "max_suggestions" in mapping and mapping["max_suggestions"] is None:
        mapping["max_suggestions"] = math.inf
    if isinstance(mapping.get("initial_state"), list):
        mapping["initial_state"] = tuple(mapping["initial_state"])
    prior = mapping.get("suggester_prior")
    if prior is not None and not isinstance(prior, Sequence):
        raise InvalidConfigurationError("simulation.suggester_prior must be an array")

    return RunConfig(agent=agent, **mapping)


__all__ = ["RunConfig", "agent_from_mapping", "run_config_from_mapping"]
