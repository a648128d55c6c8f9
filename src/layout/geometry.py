# src/layout/geometry.py — v1
"""Node sizing, overlap detection and coordinate normalization."""

from __future__ import annotations

import numpy as np

from narragraph.layout.models import Bounds, LayoutConfig, Point, PositionedEdge, PositionedNode

# Tolerance for float noise; rectangles that only touch do not overlap.
OVERLAP_EPSILON = 1e-6


def node_size(label: str, config: LayoutConfig) -> tuple[float, float]:
    """Width from label length clamped to the configured range; fixed height."""
    width = len(label) * config.char_width + 2 * config.node_padding
    width = min(max(width, config.min_node_width), config.max_node_width)
    return width, config.node_height


def find_overlaps(nodes: list[PositionedNode]) -> list[tuple[str, str]]:
    """Return id pairs of rectangles whose interiors intersect."""
    if len(nodes) < 2:
        return []
    x1 = np.array([n.x for n in nodes], dtype=float)
    y1 = np.array([n.y for n in nodes], dtype=float)
    x2 = x1 + np.array([n.w for n in nodes], dtype=float)
    y2 = y1 + np.array([n.h for n in nodes], dtype=float)

    overlap_x = (x1[:, None] < x2[None, :] - OVERLAP_EPSILON) & (
        x1[None, :] < x2[:, None] - OVERLAP_EPSILON
    )
    overlap_y = (y1[:, None] < y2[None, :] - OVERLAP_EPSILON) & (
        y1[None, :] < y2[:, None] - OVERLAP_EPSILON
    )
    pairs = np.argwhere(np.triu(overlap_x & overlap_y, k=1))
    return [(nodes[i].id, nodes[j].id) for i, j in pairs]


def normalize(
    nodes: list[PositionedNode],
    edges: list[PositionedEdge],
    config: LayoutConfig,
) -> tuple[list[PositionedNode], list[PositionedEdge], Bounds]:
    """Shift geometry so it starts at the margins; compute covering bounds."""
    min_x = min(n.x for n in nodes)
    min_y = min(n.y for n in nodes)
    dx = config.margin_x - min_x
    dy = config.margin_y - min_y

    shifted = [n.model_copy(update={"x": n.x + dx, "y": n.y + dy}) for n in nodes]
    routed = [
        e.model_copy(update={"points": [Point(x=p.x + dx, y=p.y + dy) for p in e.points]})
        if e.points else e
        for e in edges
    ]
    bounds = Bounds(
        width=max(n.x + n.w for n in shifted) + config.margin_x,
        height=max(n.y + n.h for n in shifted) + config.margin_y,
        margin_x=config.margin_x,
        margin_y=config.margin_y,
    )
    return shifted, routed, bounds


def straight_edges(
    edges: list[tuple[str, str, str | None]],
    edge_type: str = "default",
) -> list[PositionedEdge]:
    """Edges without bend points, ids e1..eN in input order."""
    return [
        PositionedEdge(
            id=f"e{i + 1}", source=src, target=dst, type=edge_type, label=label,
        )
        for i, (src, dst, label) in enumerate(edges)
    ]
