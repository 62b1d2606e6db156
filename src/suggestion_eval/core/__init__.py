"""Core contracts, errors and configuration helpers."""

from .config_loading import SUPPORTED_CONFIG_SUFFIXES, load_config_mapping
from .contracts import POMDPProblem, SolvedPolicy
from .errors import (
    DegenerateBeliefError,
    InvalidConfigurationError,
    InvalidObservationError,
    MissingResourceError,
    SuggestionEvalError,
)

__all__ = [
    "DegenerateBeliefError",
    "InvalidConfigurationError",
    "InvalidObservationError",
    "MissingResourceError",
    "POMDPProblem",
    "SUPPORTED_CONFIG_SUFFIXES",
    "SolvedPolicy",
    "SuggestionEvalError",
    "load_config_mapping",
]
