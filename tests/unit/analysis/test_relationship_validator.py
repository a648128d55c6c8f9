# tests/unit/analysis/test_relationship_validator.py — v1
"""Tests for analysis/relationship_validator.py — edge resolution and confidence."""

from __future__ import annotations

from narragraph.analysis.relationship_validator import detect_cycle, validate_analysis
from narragraph.config.settings import Settings
from narragraph.core.models import DiagramAnalysis, DiagramEdge, DiagramNode


def _analysis(node_count: int, edges: list[tuple[str, str]], confidence: float = 0.9) -> DiagramAnalysis:
    return DiagramAnalysis(
        type="flow",
        confidence=confidence,
        nodes=[DiagramNode(id=f"n{i + 1}", label=f"N{i + 1}") for i in range(node_count)],
        edges=[DiagramEdge(from_=a, to=b) for a, b in edges],
        reasoning="base",
    )


class TestValidateAnalysis:
    def test_clean_chain_unchanged_confidence(self, flow_analysis):
        result = validate_analysis(flow_analysis)
        assert result.confidence == 0.9
        assert result.quality.edge_ratio == 1.0
        assert result.quality.dropped_edges == 0
        assert result.quality.has_cycles is False
        assert result.reasoning == "sample"

    def test_dangling_edges_dropped(self):
        analysis = _analysis(3, [("n1", "n2"), ("n2", "n3"), ("n3", "ghost"), ("x", "n1")])
        result = validate_analysis(analysis)
        assert len(result.edges) == 2
        assert result.quality.dropped_edges == 2
        assert "2 edge(s)" in result.reasoning
        ids = result.node_ids
        assert all(e.from_ in ids and e.to in ids for e in result.edges)

    def test_cycle_detected(self):
        result = validate_analysis(_analysis(3, [("n1", "n2"), ("n2", "n3"), ("n3", "n1")]))
        assert result.quality.has_cycles is True
        assert result.confidence == 0.9

    def test_sparse_and_disconnected_penalties(self):
        result = validate_analysis(_analysis(4, [("n1", "n2")]))
        assert result.quality.disconnected_nodes == ["n3", "n4"]
        assert result.confidence == 0.7
        assert result.quality.confidence_before == 0.9

    def test_clamped_to_floor(self):
        result = validate_analysis(_analysis(5, [], confidence=0.55))
        assert result.confidence == 0.5

    def test_clamped_to_ceiling(self):
        result = validate_analysis(_analysis(2, [("n1", "n2")], confidence=1.0))
        assert result.confidence == 1.0

    def test_custom_penalties(self):
        settings = Settings(_env_file=None, sparse_edge_penalty=0.2, disconnected_penalty=0.0)
        result = validate_analysis(_analysis(4, [("n1", "n2")]), settings)
        assert result.confidence == 0.7

    def test_input_not_mutated(self):
        analysis = _analysis(3, [("n1", "n2"), ("n2", "zz")])
        validate_analysis(analysis)
        assert len(analysis.edges) == 2
        assert analysis.quality is None
        assert analysis.confidence == 0.9

    def test_confidence_always_in_bounds(self):
        for count in range(1, 8):
            for conf in (0.5, 0.6, 0.75, 1.0):
                result = validate_analysis(_analysis(count, [], confidence=conf))
                assert 0.5 <= result.confidence <= 1.0


class TestDetectCycle:
    def test_acyclic(self):
        edges = [DiagramEdge(from_="a", to="b"), DiagramEdge(from_="a", to="c")]
        assert detect_cycle(["a", "b", "c"], edges) is False

    def test_self_loop(self):
        assert detect_cycle(["a"], [DiagramEdge(from_="a", to="a")]) is True

    def test_diamond_is_not_cycle(self):
        edges = [
            DiagramEdge(from_="a", to="b"), DiagramEdge(from_="a", to="c"),
            DiagramEdge(from_="b", to="d"), DiagramEdge(from_="c", to="d"),
        ]
        assert detect_cycle(["a", "b", "c", "d"], edges) is False
