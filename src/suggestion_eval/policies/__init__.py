"""Solved-policy representations and the query adapter."""

from .adapter import PolicyQueryAdapter
from .alpha_vectors import AlphaVectorPolicy, QMDPPolicy, mdp_action_values

__all__ = ["AlphaVectorPolicy", "PolicyQueryAdapter", "QMDPPolicy", "mdp_action_values"]
