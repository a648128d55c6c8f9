# src/layout/strategies/timeline.py — v1
"""Left-to-right layered layout for timelines.

Without any edges the events are placed in input order, one per rank.
"""

from __future__ import annotations

from narragraph.core.models import DiagramAnalysis
from narragraph.layout.base_strategy import LayoutStrategy
from narragraph.layout.models import LayoutConfig, PositionedEdge, PositionedNode
from narragraph.layout.strategies.layered import layered_layout


class TimelineStrategy(LayoutStrategy):

    @property
    def name(self) -> str:
        return "timeline"

    @property
    def supported_types(self) -> frozenset[str]:
        return frozenset({"timeline"})

    def compute(
        self, analysis: DiagramAnalysis, config: LayoutConfig,
    ) -> tuple[list[PositionedNode], list[PositionedEdge]]:
        ranks = None
        if not analysis.edges:
            ranks = {n.id: i for i, n in enumerate(analysis.nodes)}
        return layered_layout(analysis, config, direction="LR", ranks=ranks)
