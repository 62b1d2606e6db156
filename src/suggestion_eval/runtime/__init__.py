"""Step executor, trial runner and parallel trial driver."""

from .config import RunConfig, agent_from_mapping, run_config_from_mapping
from .driver import (
    SimulationResult,
    resolve_num_workers,
    run_simulations,
    trial_seed_sequences,
    validate_run_inputs,
)
from .from_config import ComponentRef, load_config, run_simulation_from_config
from .step import RenderFrame, Renderer, StepContext, StepRecord, TrialState, execute_step, log_render_frame
from .trial import TrialResult, initial_trial_state, run_trial

__all__ = [
    "ComponentRef",
    "RenderFrame",
    "Renderer",
    "RunConfig",
    "SimulationResult",
    "StepContext",
    "StepRecord",
    "TrialResult",
    "TrialState",
    "agent_from_mapping",
    "execute_step",
    "initial_trial_state",
    "load_config",
    "log_render_frame",
    "resolve_num_workers",
    "run_config_from_mapping",
    "run_simulation_from_config",
    "run_simulations",
    "trial_seed_sequences",
    "validate_run_inputs",
]
