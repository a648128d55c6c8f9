# src/layout/base_strategy.py — v1
"""Standard interface for layout strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod

from narragraph.core.models import DiagramAnalysis
from narragraph.layout.models import LayoutConfig, PositionedEdge, PositionedNode


class LayoutStrategy(ABC):
    """Places the nodes of one family of diagram types.

    ``compute`` receives a sanitized analysis (unique ids, no dangling
    edges, at least one node) and returns rectangles in any coordinate
    origin; the engine normalizes them afterwards.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique strategy identifier (e.g., 'hierarchical')."""

    @property
    @abstractmethod
    def supported_types(self) -> frozenset[str]:
        """Diagram types this strategy lays out."""

    def supports(self, diagram_type: str) -> bool:
        return diagram_type in self.supported_types

    @abstractmethod
    def compute(
        self, analysis: DiagramAnalysis, config: LayoutConfig,
    ) -> tuple[list[PositionedNode], list[PositionedEdge]]:
        """Return positioned nodes and routed edges."""
