# src/layout/fallback.py — v1
"""Deterministic layout used when a strategy fails or overlaps."""

from __future__ import annotations

from narragraph.core.models import DiagramAnalysis
from narragraph.layout.models import LayoutConfig, PositionedEdge, PositionedNode
from narragraph.layout.strategies.grid import grid_layout

FALLBACK_STRATEGY = "grid-fallback"


def fallback_layout(
    analysis: DiagramAnalysis, config: LayoutConfig,
) -> tuple[list[PositionedNode], list[PositionedEdge]]:
    """Grid placement; cannot overlap since every cell holds the largest node."""
    return grid_layout(analysis, config, edge_type="fallback")
