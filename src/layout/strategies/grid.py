# src/layout/strategies/grid.py — v1
"""Near-square grid of uniform cells, used for matrices and as the fallback."""

from __future__ import annotations

import math

from narragraph.core.models import DiagramAnalysis
from narragraph.layout.base_strategy import LayoutStrategy
from narragraph.layout.geometry import node_size, straight_edges
from narragraph.layout.models import LayoutConfig, PositionedEdge, PositionedNode


def grid_layout(
    analysis: DiagramAnalysis, config: LayoutConfig, edge_type: str = "default",
) -> tuple[list[PositionedNode], list[PositionedEdge]]:
    """Row-major placement; each node centered in a cell of the largest node size."""
    n = len(analysis.nodes)
    cols = max(1, math.ceil(math.sqrt(n)))
    sizes = [node_size(node.label, config) for node in analysis.nodes]
    cell_w = max(w for w, _ in sizes)
    cell_h = max(h for _, h in sizes)

    nodes: list[PositionedNode] = []
    for i, (node, (w, h)) in enumerate(zip(analysis.nodes, sizes)):
        row, col = divmod(i, cols)
        x = col * (cell_w + config.node_separation) + (cell_w - w) / 2
        y = row * (cell_h + config.rank_separation) + (cell_h - h) / 2
        nodes.append(PositionedNode(id=node.id, x=x, y=y, w=w, h=h, label=node.label, type=node.kind))

    edges = straight_edges([(e.from_, e.to, e.label) for e in analysis.edges], edge_type)
    return nodes, edges


class GridStrategy(LayoutStrategy):

    @property
    def name(self) -> str:
        return "grid"

    @property
    def supported_types(self) -> frozenset[str]:
        return frozenset({"matrix"})

    def compute(
        self, analysis: DiagramAnalysis, config: LayoutConfig,
    ) -> tuple[list[PositionedNode], list[PositionedEdge]]:
        return grid_layout(analysis, config)
