# src/layout/registry.py — v1
"""Strategy registry — maps diagram types to layout strategies.

Every diagram type must be served by exactly one strategy; ambiguity and
gaps are configuration defects surfaced at startup by
``validate_coverage``.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable

from narragraph.config.settings import ConfigurationError
from narragraph.core.models import DIAGRAM_TYPES
from narragraph.layout.base_strategy import LayoutStrategy

logger = logging.getLogger(__name__)

BUILTIN_STRATEGIES: list[str] = [
    "narragraph.layout.strategies.hierarchical.HierarchicalStrategy",
    "narragraph.layout.strategies.timeline.TimelineStrategy",
    "narragraph.layout.strategies.grid.GridStrategy",
    "narragraph.layout.strategies.circular.CircularStrategy",
]


class RegistryError(ConfigurationError):
    """Raised when strategy registration or resolution fails."""


class StrategyRegistry:
    """Registry of layout strategies keyed by unique name."""

    def __init__(self) -> None:
        self._strategies: dict[str, LayoutStrategy] = {}

    @classmethod
    def with_builtin(cls) -> StrategyRegistry:
        """Registry pre-loaded with the built-in strategies."""
        registry = cls()
        for class_path in BUILTIN_STRATEGIES:
            registry.register(_import_strategy(class_path))
        return registry

    @property
    def names(self) -> list[str]:
        """Return sorted list of registered strategy names."""
        return sorted(self._strategies)

    def register(self, strategy: LayoutStrategy) -> None:
        """Add a strategy; names must be unique."""
        if strategy.name in self._strategies:
            raise RegistryError(f"Strategy '{strategy.name}' is already registered")
        self._strategies[strategy.name] = strategy
        logger.debug(
            "Registered layout strategy %s for %s",
            strategy.name, ", ".join(sorted(strategy.supported_types)),
        )

    def get(self, name: str) -> LayoutStrategy | None:
        return self._strategies.get(name)

    def resolve(self, diagram_type: str) -> LayoutStrategy:
        """Return the single strategy supporting a diagram type."""
        matches = [s for s in self._strategies.values() if s.supports(diagram_type)]
        if not matches:
            raise RegistryError(f"No layout strategy supports '{diagram_type}'")
        if len(matches) > 1:
            names = ", ".join(sorted(s.name for s in matches))
            raise RegistryError(f"Ambiguous layout strategies for '{diagram_type}': {names}")
        return matches[0]

    def validate_coverage(self, diagram_types: Iterable[str] = DIAGRAM_TYPES) -> None:
        """Check every type resolves to exactly one strategy.

        Raises:
            RegistryError: Listing every uncovered or ambiguous type.
        """
        errors: list[str] = []
        for diagram_type in diagram_types:
            try:
                self.resolve(diagram_type)
            except RegistryError as e:
                errors.append(str(e))
        if errors:
            raise RegistryError("; ".join(errors))


def _import_strategy(class_path: str) -> LayoutStrategy:
    """Import and instantiate a strategy from a dotted class path."""
    parts = class_path.rsplit(".", 1)
    if len(parts) != 2:
        raise RegistryError(f"Invalid class path: {class_path}")
    module_path, class_name = parts

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise RegistryError(f"Cannot import module {module_path}: {exc}") from exc

    cls = getattr(module, class_name, None)
    if cls is None:
        raise RegistryError(f"Class {class_name} not found in {module_path}")

    if not isinstance(cls, type) or not issubclass(cls, LayoutStrategy):
        raise RegistryError(f"{class_path} is not a LayoutStrategy subclass")

    return cls()
