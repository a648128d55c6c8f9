# src/layout/strategies/circular.py — v1
"""Circular layout for cycles.

The radius makes the chord between neighbouring centers at least the
largest node diagonal plus ``node_separation``, so no two rectangles
can intersect.
"""

from __future__ import annotations

import math

from narragraph.core.models import DiagramAnalysis
from narragraph.layout.base_strategy import LayoutStrategy
from narragraph.layout.geometry import node_size, straight_edges
from narragraph.layout.models import LayoutConfig, PositionedEdge, PositionedNode


def circle_radius(count: int, max_diagonal: float, separation: float) -> float:
    if count < 2:
        return 0.0
    return (max_diagonal + separation) / (2 * math.sin(math.pi / count))


class CircularStrategy(LayoutStrategy):

    @property
    def name(self) -> str:
        return "circular"

    @property
    def supported_types(self) -> frozenset[str]:
        return frozenset({"cycle"})

    def compute(
        self, analysis: DiagramAnalysis, config: LayoutConfig,
    ) -> tuple[list[PositionedNode], list[PositionedEdge]]:
        n = len(analysis.nodes)
        sizes = [node_size(node.label, config) for node in analysis.nodes]
        max_diagonal = math.hypot(max(w for w, _ in sizes), max(h for _, h in sizes))
        radius = circle_radius(n, max_diagonal, config.node_separation)

        nodes: list[PositionedNode] = []
        for i, (node, (w, h)) in enumerate(zip(analysis.nodes, sizes)):
            # first node at 12 o'clock, clockwise
            angle = -math.pi / 2 + 2 * math.pi * i / n
            cx, cy = radius * math.cos(angle), radius * math.sin(angle)
            nodes.append(
                PositionedNode(
                    id=node.id, x=cx - w / 2, y=cy - h / 2, w=w, h=h,
                    label=node.label, type=node.kind,
                )
            )

        edges = straight_edges([(e.from_, e.to, e.label) for e in analysis.edges], "cycle")
        return nodes, edges
