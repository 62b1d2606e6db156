"""Problem manifests and package auto-discovery.

Problem modules advertise themselves through a module-level
``PLUGIN_MANIFESTS`` list. :func:`build_default_registry` walks
:mod:`suggestion_eval.problems` and registers every manifest it finds, so a new
problem only needs a module with a manifest to become selectable from configs
and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
import importlib
import pkgutil
from typing import Any, Callable, Literal

from suggestion_eval.core.errors import InvalidConfigurationError

ComponentKind = Literal["problem"]

DEFAULT_PROBLEM_PACKAGE = "suggestion_eval.problems"


@dataclass(frozen=True, slots=True)
class ComponentManifest:
    """Discoverable component entry.

    Parameters
    ----------
    kind : {"problem"}
        Component category.
    component_id : str
        Identifier used in configs and on the command line.
    factory : Callable[..., Any]
        Keyword-only constructor for the component.
    description : str, optional
        One-line summary shown by ``--list-problems``.
    """

    kind: ComponentKind
    component_id: str
    factory: Callable[..., Any]
    description: str = ""


class PluginRegistry:
    """Mapping from ``(kind, component_id)`` to manifests."""

    def __init__(self) -> None:
        self._manifests: dict[tuple[ComponentKind, str], ComponentManifest] = {}

    def register(self, manifest: ComponentManifest) -> None:
        """Add ``manifest``; registering the identical manifest twice is a no-op.

        Raises
        ------
        ValueError
            If another manifest already uses the same kind and ID.
        """

        key = (manifest.kind, manifest.component_id)
        existing = self._manifests.setdefault(key, manifest)
        if existing != manifest:
            raise ValueError(f"manifest conflict for {manifest.kind}:{manifest.component_id}; already registered")

    def get(self, kind: ComponentKind, component_id: str) -> ComponentManifest:
        """Return the manifest for ``component_id``.

        Raises
        ------
        InvalidConfigurationError
            If nothing is registered under that ID; the message lists the
            registered IDs.
        """

        manifest = self._manifests.get((kind, component_id))
        if manifest is None:
            available = ", ".join(item.component_id for item in self.list(kind))
            raise InvalidConfigurationError(f"unknown {kind} {component_id!r}; available: {available}")
        return manifest

    def list(self, kind: ComponentKind | None = None) -> tuple[ComponentManifest, ...]:
        """Return registered manifests ordered by kind and ID."""

        return tuple(
            sorted(
                (item for item in self._manifests.values() if kind is None or item.kind == kind),
                key=lambda item: (item.kind, item.component_id),
            )
        )

    def create(self, kind: ComponentKind, component_id: str, **kwargs: Any) -> Any:
        """Build a component from its factory.

        Raises
        ------
        InvalidConfigurationError
            If the ID is unknown or the factory rejects ``kwargs``.
        """

        manifest = self.get(kind, component_id)
        try:
            return manifest.factory(**kwargs)
        except TypeError as exc:
            raise InvalidConfigurationError(f"invalid arguments for {kind} {component_id!r}: {exc}") from exc

    def create_problem(self, component_id: str, **kwargs: Any) -> Any:
        """Build a problem by ID."""

        return self.create("problem", component_id, **kwargs)

    def discover(self, package_name: str) -> tuple[ComponentManifest, ...]:
        """Import every module under ``package_name`` and register its manifests.

        Returns
        -------
        tuple[ComponentManifest, ...]
            Manifests found during this scan.

        Raises
        ------
        TypeError
            If a module's ``PLUGIN_MANIFESTS`` holds anything but manifests.
        """

        package = importlib.import_module(package_name)
        modules = [package]
        for module_info in pkgutil.walk_packages(getattr(package, "__path__", ()), prefix=f"{package_name}."):
            modules.append(importlib.import_module(module_info.name))

        found: list[ComponentManifest] = []
        for module in modules:
            for manifest in getattr(module, "PLUGIN_MANIFESTS", ()):
                if not isinstance(manifest, ComponentManifest):
                    raise TypeError(f"{module.__name__}.PLUGIN_MANIFESTS must contain ComponentManifest objects")
                self.register(manifest)
                found.append(manifest)
        return tuple(found)


def build_default_registry() -> PluginRegistry:
    """Return a registry holding every built-in problem."""

    registry = PluginRegistry()
    registry.discover(DEFAULT_PROBLEM_PACKAGE)
    return registry
