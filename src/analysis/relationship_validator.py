# src/analysis/relationship_validator.py — v1
"""Edge resolution, structural checks and confidence recalibration.

Pure: returns a new DiagramAnalysis, the input is never mutated.
Cycles and sparse graphs are reported, not rejected.
"""

from __future__ import annotations

import logging

from narragraph.config.settings import Settings
from narragraph.core.models import (
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    DiagramAnalysis,
    DiagramEdge,
    ValidationReport,
)

logger = logging.getLogger(__name__)

SPARSE_EDGE_RATIO = 0.5
DISCONNECTED_SHARE = 0.3

_WHITE, _GRAY, _BLACK = 0, 1, 2


def validate_analysis(
    analysis: DiagramAnalysis, settings: Settings | None = None,
) -> DiagramAnalysis:
    """Filter dangling edges, detect cycles and isolated nodes, recalibrate confidence."""
    sparse_penalty = settings.sparse_edge_penalty if settings else 0.1
    disconnected_penalty = settings.disconnected_penalty if settings else 0.1

    node_ids = analysis.node_ids
    valid = [e for e in analysis.edges if e.from_ in node_ids and e.to in node_ids]
    dropped = len(analysis.edges) - len(valid)
    if dropped:
        logger.warning("Dropped %d edge(s) referencing unknown nodes", dropped)

    n = len(analysis.nodes)
    edge_ratio = len(valid) / max(n - 1, 1)
    has_cycles = detect_cycle([node.id for node in analysis.nodes], valid)

    touched = {e.from_ for e in valid} | {e.to for e in valid}
    disconnected = [node.id for node in analysis.nodes if node.id not in touched]

    confidence = analysis.confidence
    if edge_ratio < SPARSE_EDGE_RATIO and n > 2:
        confidence -= sparse_penalty
    if len(disconnected) > DISCONNECTED_SHARE * n:
        confidence -= disconnected_penalty
    confidence = round(min(max(confidence, MIN_CONFIDENCE), MAX_CONFIDENCE), 4)

    reasoning = analysis.reasoning
    if dropped:
        note = f"{dropped} edge(s) with unknown endpoints removed"
        reasoning = f"{reasoning} ({note})" if reasoning else note

    report = ValidationReport(
        dropped_edges=dropped,
        edge_ratio=round(edge_ratio, 4),
        has_cycles=has_cycles,
        disconnected_nodes=disconnected,
        confidence_before=analysis.confidence,
        confidence_after=confidence,
    )
    return analysis.model_copy(
        update={
            "edges": [e.model_copy() for e in valid],
            "nodes": [node.model_copy() for node in analysis.nodes],
            "confidence": confidence,
            "reasoning": reasoning,
            "quality": report,
        }
    )


def detect_cycle(node_ids: list[str], edges: list[DiagramEdge]) -> bool:
    """Iterative white/gray/black DFS; True if a back edge exists."""
    adjacency: dict[str, list[str]] = {nid: [] for nid in node_ids}
    for e in edges:
        adjacency.setdefault(e.from_, []).append(e.to)
        adjacency.setdefault(e.to, [])

    color = dict.fromkeys(adjacency, _WHITE)
    for root in adjacency:
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        stack = [(root, iter(adjacency[root]))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                color[node] = _BLACK
                stack.pop()
            elif color[child] == _GRAY:
                return True
            elif color[child] == _WHITE:
                color[child] = _GRAY
                stack.append((child, iter(adjacency[child])))
    return False
