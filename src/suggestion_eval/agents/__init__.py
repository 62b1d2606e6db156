"""Agent kinds, suggestion generation and suggestion fusion."""

from .fusion import (
    NAIVE_SUGGESTION_WEIGHT,
    FusionResult,
    fuse,
    noisy_log_likelihoods,
    require_action_values,
    reweight_belief,
    scaled_log_likelihoods,
    suggestion_posterior,
)
from .kinds import (
    AGENT_KINDS,
    AgentKind,
    NaiveAgent,
    NoisyAgent,
    NormalAgent,
    PerfectAgent,
    RandomAgent,
    ScaledAgent,
    parse_agent_kind,
)
from .suggestions import SuggestionEvent, SuggestionGenerator

__all__ = [
    "AGENT_KINDS",
    "AgentKind",
    "FusionResult",
    "NAIVE_SUGGESTION_WEIGHT",
    "NaiveAgent",
    "NoisyAgent",
    "NormalAgent",
    "PerfectAgent",
    "RandomAgent",
    "ScaledAgent",
    "SuggestionEvent",
    "SuggestionGenerator",
    "fuse",
    "noisy_log_likelihoods",
    "parse_agent_kind",
    "require_action_values",
    "reweight_belief",
    "scaled_log_likelihoods",
    "suggestion_posterior",
]
