"""Built-in problem implementations."""

from .rock_sample import RockSampleProblem, create_rock_sample_problem
from .tabular import TabularPOMDP
from .tiger import TigerProblem, create_tiger_problem

__all__ = [
    "RockSampleProblem",
    "TabularPOMDP",
    "TigerProblem",
    "create_rock_sample_problem",
    "create_tiger_problem",
]
