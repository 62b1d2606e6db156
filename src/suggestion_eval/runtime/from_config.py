"""Config-driven simulation runs.

This module turns declarative mapping/JSON/YAML configs into executable runs
using the plugin registry for problem selection.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from suggestion_eval.core import load_config_mapping
from suggestion_eval.core.config_validation import (
    coerce_non_empty_str,
    require_mapping,
    validate_allowed_keys,
    validate_required_keys,
)
from suggestion_eval.plugins import PluginRegistry, build_default_registry
from suggestion_eval.policies import QMDPPolicy, mdp_action_values
from suggestion_eval.runtime.config import agent_from_mapping, run_config_from_mapping
from suggestion_eval.runtime.driver import SimulationResult, run_simulations


@dataclass(frozen=True, slots=True)
class ComponentRef:
    """Registry component reference.

    Parameters
    ----------
    component_id : str
        Component ID in the plugin registry.
    kwargs : dict[str, Any]
        Constructor keyword arguments applied on creation.
    """

    component_id: str
    kwargs: dict[str, Any]


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a run config file (`.json`, `.yaml`, or `.yml`) as a dictionary."""

    return load_config_mapping(path)


def run_simulation_from_config(
    config: dict[str, Any],
    *,
    registry: PluginRegistry | None = None,
) -> SimulationResult:
    """Run simulations from a declarative configuration.

    Parameters
    ----------
    config : dict[str, Any]
        Mapping with ``problem``, ``agent`` and optional ``simulation``
        sections.
    registry : PluginRegistry | None, optional
        Optional pre-built registry. Defaults to built-in registry.

    Returns
    -------
    SimulationResult
        Run result.

    Notes
    -----
    The agent and the suggester both use a QMDP policy derived from the
    problem's fully observable action values; the same table feeds the noisy
    kind.
    """

    reg = registry if registry is not None else build_default_registry()
    validate_allowed_keys(config, field_name="config", allowed_keys=("problem", "agent", "simulation"))
    validate_required_keys(config, field_name="config", required_keys=("problem", "agent"))

    problem_ref = _parse_component_ref(require_mapping(config["problem"], field_name="problem"), field_name="problem")
    agent = agent_from_mapping(config["agent"])
    run_config = run_config_from_mapping(config.get("simulation"), agent=agent)

    problem = reg.create_problem(problem_ref.component_id, **problem_ref.kwargs)
    action_values = mdp_action_values(problem)
    return run_simulations(problem, QMDPPolicy(action_values), run_config, action_values=action_values)


def _parse_component_ref(raw: dict[str, Any], *, field_name: str) -> ComponentRef:
    """Parse one component reference mapping."""

    validate_allowed_keys(raw, field_name=field_name, allowed_keys=("component_id", "kwargs"))
    component_id = coerce_non_empty_str(raw.get("component_id"), field_name=f"{field_name}.component_id")
    kwargs = require_mapping(raw.get("kwargs", {}), field_name=f"{field_name}.kwargs")
    return ComponentRef(component_id=component_id, kwargs=dict(kwargs))


__all__ = ["ComponentRef", "load_config", "run_simulation_from_config"]
