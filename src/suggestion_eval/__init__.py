"""Top-level package for ``suggestion_eval``.

The package evaluates how a POMDP agent reacts to external action
suggestions:

1. a :class:`~suggestion_eval.core.contracts.POMDPProblem` defines the
   environment,
2. a :class:`~suggestion_eval.core.contracts.SolvedPolicy` picks actions from
   beliefs or known states,
3. an agent kind (:mod:`suggestion_eval.agents`) decides whether and how to
   fuse suggestions into its belief,
4. :func:`~suggestion_eval.runtime.driver.run_simulations` runs independent
   trials in parallel and aggregates reward, step and suggestion statistics.
"""

from .agents import (
    NaiveAgent,
    NoisyAgent,
    NormalAgent,
    PerfectAgent,
    RandomAgent,
    ScaledAgent,
    parse_agent_kind,
)
from .analysis import format_statistics_table, print_statistics
from .core import (
    InvalidConfigurationError,
    InvalidObservationError,
    MissingResourceError,
    POMDPProblem,
    SolvedPolicy,
)
from .runtime import RunConfig, SimulationResult, TrialResult, run_simulation_from_config, run_simulations

__all__ = [
    "InvalidConfigurationError",
    "InvalidObservationError",
    "MissingResourceError",
    "NaiveAgent",
    "NoisyAgent",
    "NormalAgent",
    "POMDPProblem",
    "PerfectAgent",
    "RandomAgent",
    "RunConfig",
    "ScaledAgent",
    "SimulationResult",
    "SolvedPolicy",
    "TrialResult",
    "format_statistics_table",
    "parse_agent_kind",
    "print_statistics",
    "run_simulation_from_config",
    "run_simulations",
]
