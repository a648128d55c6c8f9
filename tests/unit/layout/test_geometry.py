# tests/unit/layout/test_geometry.py — v1
"""Tests for layout/geometry.py — sizing, overlap detection, normalization."""

from __future__ import annotations

from narragraph.layout.geometry import find_overlaps, node_size, normalize
from narragraph.layout.models import LayoutConfig, Point, PositionedEdge, PositionedNode


def _node(nid: str, x: float, y: float, w: float = 100, h: float = 50) -> PositionedNode:
    return PositionedNode(id=nid, x=x, y=y, w=w, h=h, label=nid)


class TestNodeSize:
    def test_min_width(self):
        assert node_size("ab", LayoutConfig()) == (120.0, 60.0)

    def test_scales_with_label(self):
        w, _ = node_size("x" * 20, LayoutConfig())
        assert w == 20 * 8 + 2 * 16

    def test_max_width(self):
        w, _ = node_size("x" * 200, LayoutConfig())
        assert w == 320.0


class TestFindOverlaps:
    def test_overlap(self):
        assert find_overlaps([_node("a", 0, 0), _node("b", 50, 25)]) == [("a", "b")]

    def test_touching_is_not_overlap(self):
        assert find_overlaps([_node("a", 0, 0), _node("b", 100, 0)]) == []
        assert find_overlaps([_node("a", 0, 0), _node("b", 0, 50)]) == []

    def test_separate(self):
        nodes = [_node("a", 0, 0), _node("b", 200, 0), _node("c", 0, 200)]
        assert find_overlaps(nodes) == []

    def test_single_node(self):
        assert find_overlaps([_node("a", 0, 0)]) == []


class TestNormalize:
    def test_shift_to_margins(self):
        config = LayoutConfig(margin_x=10, margin_y=20)
        nodes = [_node("a", -50, -30), _node("b", 100, 40)]
        edges = [PositionedEdge(id="e1", source="a", target="b", points=[Point(x=0, y=0)])]
        shifted, routed, bounds = normalize(nodes, edges, config)

        assert min(n.x for n in shifted) == 10
        assert min(n.y for n in shifted) == 20
        assert routed[0].points[0] == Point(x=60, y=50)
        assert bounds.width == 10 + 250 + 10
        assert bounds.height == 20 + 120 + 20

    def test_bounds_cover_nodes(self):
        config = LayoutConfig()
        shifted, _, bounds = normalize([_node("a", 5, 5), _node("b", 300, 90)], [], config)
        for n in shifted:
            assert n.x + n.w <= bounds.width - bounds.margin_x
            assert n.y + n.h <= bounds.height - bounds.margin_y
