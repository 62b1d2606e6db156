"""Read run configuration files into plain mappings.

The file suffix selects the parser. YAML support needs the optional PyYAML
dependency and is imported on first use.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

from suggestion_eval.core.errors import InvalidConfigurationError


def _parse_json(text: str) -> Any:
    return json.loads(text)


def _parse_yaml(text: str) -> Any:
    try:
        import yaml
    except ImportError as exc:  # pragma: no cover - exercised only without pyyaml
        raise ImportError(
            "YAML run configs require PyYAML. Install with `pip install suggestion-eval[yaml]`."
        ) from exc
    return yaml.safe_load(text)


_PARSERS: dict[str, Callable[[str], Any]] = {
    ".json": _parse_json,
    ".yaml": _parse_yaml,
    ".yml": _parse_yaml,
}

SUPPORTED_CONFIG_SUFFIXES: tuple[str, ...] = tuple(_PARSERS)


def load_config_mapping(path: str | Path) -> dict[str, Any]:
    """Parse one run config file whose top level is a mapping.

    Parameters
    ----------
    path : str | pathlib.Path
        File ending in ``.json``, ``.yaml`` or ``.yml``.

    Returns
    -------
    dict[str, Any]
        Top-level config mapping (``problem``, ``agent``, ``simulation``).

    Raises
    ------
    InvalidConfigurationError
        If the suffix is unknown, the file is empty, or the top level is not
        a mapping.
    ImportError
        If a YAML file is given and PyYAML is not installed.
    """

    config_path = Path(path)
    parser = _PARSERS.get(config_path.suffix.lower())
    if parser is None:
        raise InvalidConfigurationError(
            f"unsupported config file extension {config_path.suffix!r}; "
            f"expected one of {', '.join(SUPPORTED_CONFIG_SUFFIXES)}"
        )

    raw = parser(config_path.read_text(encoding="utf-8"))
    if raw is None:
        raise InvalidConfigurationError(f"config file {config_path} is empty")
    if not isinstance(raw, dict):
        raise InvalidConfigurationError("config root must be a JSON/YAML object")
    return raw


__all__ = ["SUPPORTED_CONFIG_SUFFIXES", "load_config_mapping"]
