"""Belief-vector representation and Bayesian filtering."""

from .vector import (
    BELIEF_ATOL,
    belief_from_mapping,
    belief_support,
    filter_belief,
    is_valid_belief,
    normalize_belief,
    point_mass,
    predict_belief,
    uniform_belief,
)

__all__ = [
    "BELIEF_ATOL",
    "belief_from_mapping",
    "belief_support",
    "filter_belief",
    "is_valid_belief",
    "normalize_belief",
    "point_mass",
    "predict_belief",
    "uniform_belief",
]
