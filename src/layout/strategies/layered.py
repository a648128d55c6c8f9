# src/layout/strategies/layered.py — v1
"""Shared layered placement for the hierarchical and timeline strategies.

Ranks run along the main axis (top-to-bottom or left-to-right); nodes of
one rank are packed along the cross axis with ``node_separation`` and
centered against the widest rank.
"""

from __future__ import annotations

import logging
from typing import Literal

from narragraph.core.models import DiagramAnalysis
from narragraph.layout.geometry import node_size
from narragraph.layout.models import LayoutConfig, Point, PositionedEdge, PositionedNode
from narragraph.layout.ranking import assign_ranks, count_crossings, order_layers

logger = logging.getLogger(__name__)

Direction = Literal["TB", "LR"]


def layered_layout(
    analysis: DiagramAnalysis,
    config: LayoutConfig,
    direction: Direction = "TB",
    ranks: dict[str, int] | None = None,
) -> tuple[list[PositionedNode], list[PositionedEdge]]:
    node_ids = [n.id for n in analysis.nodes]
    pairs = [(e.from_, e.to) for e in analysis.edges]
    if ranks is None:
        ranks = assign_ranks(node_ids, pairs)
    layers = order_layers(node_ids, ranks, pairs, sweeps=config.crossing_sweeps)
    logger.debug(
        "Layered %s layout: %d ranks, %d crossings",
        direction, len(layers), count_crossings(layers, pairs),
    )

    sizes = {n.id: node_size(n.label, config) for n in analysis.nodes}
    horizontal = direction == "LR"

    # main axis: rank offsets; cross axis: packing within a rank
    def main_extent(nid: str) -> float:
        w, h = sizes[nid]
        return w if horizontal else h

    def cross_extent(nid: str) -> float:
        w, h = sizes[nid]
        return h if horizontal else w

    thickness = [max(main_extent(nid) for nid in layer) for layer in layers]
    rank_offset: list[float] = []
    offset = 0.0
    for t in thickness:
        rank_offset.append(offset)
        offset += t + config.rank_separation

    spans = [
        sum(cross_extent(nid) for nid in layer) + config.node_separation * (len(layer) - 1)
        for layer in layers
    ]
    widest = max(spans)

    centers: dict[str, tuple[float, float]] = {}
    nodes: list[PositionedNode] = []
    by_id = {n.id: n for n in analysis.nodes}
    for r, layer in enumerate(layers):
        cursor = (widest - spans[r]) / 2
        for nid in layer:
            w, h = sizes[nid]
            main = rank_offset[r] + (thickness[r] - main_extent(nid)) / 2
            x, y = (main, cursor) if horizontal else (cursor, main)
            cursor += cross_extent(nid) + config.node_separation
            centers[nid] = (x + w / 2, y + h / 2)
            node = by_id[nid]
            nodes.append(PositionedNode(id=nid, x=x, y=y, w=w, h=h, label=node.label, type=node.kind))

    # keep input order for renderers that rely on it
    order = {nid: i for i, nid in enumerate(node_ids)}
    nodes.sort(key=lambda n: order[n.id])

    edges: list[PositionedEdge] = []
    for i, e in enumerate(analysis.edges):
        ru, rv = ranks[e.from_], ranks[e.to]
        points = None
        if abs(rv - ru) > 1:
            points = _bend_points(
                centers[e.from_], centers[e.to], ru, rv, rank_offset, thickness, horizontal,
            )
        edges.append(
            PositionedEdge(
                id=f"e{i + 1}",
                source=e.from_,
                target=e.to,
                type="back" if rv < ru else "default",
                label=e.label,
                points=points,
            )
        )
    return nodes, edges


def _bend_points(
    start: tuple[float, float],
    end: tuple[float, float],
    ru: int,
    rv: int,
    rank_offset: list[float],
    thickness: list[float],
    horizontal: bool,
) -> list[Point]:
    """One point per intermediate rank, interpolated along the cross axis."""
    step = 1 if rv > ru else -1
    span = abs(rv - ru)
    (sx, sy), (ex, ey) = start, end
    points: list[Point] = []
    for k, rank in enumerate(range(ru + step, rv, step), start=1):
        t = k / span
        main = rank_offset[rank] + thickness[rank] / 2
        if horizontal:
            points.append(Point(x=main, y=sy + (ey - sy) * t))
        else:
            points.append(Point(x=sx + (ex - sx) * t, y=main))
    return points
