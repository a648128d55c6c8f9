# src/layout/strategies/hierarchical.py — v1
"""Top-to-bottom layered layout for flows and trees."""

from __future__ import annotations

from narragraph.core.models import DiagramAnalysis
from narragraph.layout.base_strategy import LayoutStrategy
from narragraph.layout.models import LayoutConfig, PositionedEdge, PositionedNode
from narragraph.layout.strategies.layered import layered_layout


class HierarchicalStrategy(LayoutStrategy):

    @property
    def name(self) -> str:
        return "hierarchical"

    @property
    def supported_types(self) -> frozenset[str]:
        return frozenset({"flow", "tree"})

    def compute(
        self, analysis: DiagramAnalysis, config: LayoutConfig,
    ) -> tuple[list[PositionedNode], list[PositionedEdge]]:
        return layered_layout(analysis, config, direction="TB")
