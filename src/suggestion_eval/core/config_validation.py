"""Shared helpers for strict run-parameter validation."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np

from suggestion_eval.core.errors import InvalidConfigurationError


def validate_allowed_keys(
    mapping: Mapping[str, Any],
    *,
    field_name: str,
    allowed_keys: Iterable[str],
) -> None:
    """Validate that a mapping only contains allowed keys.

    Parameters
    ----------
    mapping : Mapping[str, Any]
        Configuration mapping to validate.
    field_name : str
        Human-readable path used in error messages.
    allowed_keys : Iterable[str]
        Allowed key names for ``mapping``.

    Raises
    ------
    InvalidConfigurationError
        If unknown keys are present.
    """

    allowed = set(str(key) for key in allowed_keys)
    unknown = sorted(str(key) for key in mapping if str(key) not in allowed)
    if unknown:
        raise InvalidConfigurationError(f"{field_name} has unknown keys: {unknown}")


def validate_required_keys(
    mapping: Mapping[str, Any],
    *,
    field_name: str,
    required_keys: Iterable[str],
) -> None:
    """Validate that required keys are present in a mapping.

    Raises
    ------
    InvalidConfigurationError
        If required keys are missing.
    """

    required = set(str(key) for key in required_keys)
    missing = sorted(key for key in required if key not in mapping)
    if missing:
        raise InvalidConfigurationError(f"{field_name} is missing required keys: {missing}")


def require_mapping(raw: Any, *, field_name: str) -> dict[str, Any]:
    """Require a dictionary value in config."""

    if not isinstance(raw, dict):
        raise InvalidConfigurationError(f"{field_name} must be an object")
    return raw


def coerce_probability(raw: Any, *, field_name: str) -> float:
    """Coerce a float in ``[0, 1]``."""

    value = float(raw)
    if not 0.0 <= value <= 1.0:
        raise InvalidConfigurationError(f"{field_name} must be in [0, 1]")
    return value


def coerce_positive_int(raw: Any, *, field_name: str) -> int:
    """Coerce a strictly positive integer."""

    if raw is None:
        raise InvalidConfigurationError(f"{field_name} is required")
    if isinstance(raw, bool) or int(raw) != raw:
        raise InvalidConfigurationError(f"{field_name} must be an integer")

    value = int(raw)
    if value <= 0:
        raise InvalidConfigurationError(f"{field_name} must be > 0")
    return value


def coerce_non_negative_float(raw: Any, *, field_name: str) -> float:
    """Coerce a float ``>= 0``; ``inf`` is accepted."""

    value = float(raw)
    if math.isnan(value) or value < 0.0:
        raise InvalidConfigurationError(f"{field_name} must be >= 0")
    return value


def require_bool(raw: Any, *, field_name: str) -> bool:
    """Require a literal boolean; strings such as ``"no"`` are rejected."""

    if not isinstance(raw, bool):
        raise InvalidConfigurationError(f"{field_name} must be true or false, got {raw!r}")
    return raw


def coerce_seed(raw: Any, *, field_name: str) -> int | None:
    """Coerce an optional non-negative integer seed."""

    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, np.integer)) or raw < 0:
        raise InvalidConfigurationError(f"{field_name} must be a non-negative integer, got {raw!r}")
    return int(raw)


def coerce_non_empty_str(raw: Any, *, field_name: str) -> str:
    """Coerce non-empty string with explicit field context."""

    if raw is None:
        raise InvalidConfigurationError(f"{field_name} must be a non-empty string")

    value = str(raw).strip()
    if not value:
        raise InvalidConfigurationError(f"{field_name} must be a non-empty string")
    return value


__all__ = [
    "coerce_non_empty_str",
    "coerce_non_negative_float",
    "coerce_positive_int",
    "coerce_probability",
    "coerce_seed",
    "require_bool",
    "require_mapping",
    "validate_allowed_keys",
    "validate_required_keys",
]
