# tests/integration/pipeline/test_diagram_scenarios.py — v1
"""End-to-end scenarios: text in, positioned diagram out.

Uses the real extractor, validator, cache and layout engine; only the
model client is mocked.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from narragraph.analysis.rule_extractor import RuleBasedExtractor
from narragraph.cache.semantic_cache import SemanticCache
from narragraph.config.settings import Settings
from narragraph.core.models import TextSegment
from narragraph.layout.engine import LayoutEngine
from narragraph.layout.geometry import find_overlaps
from narragraph.llm.models import LLMResponse
from narragraph.pipeline.factory import build_pipeline
from tests.conftest import SEQUENTIAL_TEXT

BASE_TEXT = "First, collect user input. Then, validate the data. Finally, store the result."
SYNONYM = "First, gather user input. Then, validate the data. Finally, store the result."


class TestSequentialWithoutModel:
    @pytest.mark.asyncio
    async def test_flow_diagram(self):
        settings = Settings(_env_file=None, google_api_key="", anthropic_api_key="")
        pipeline = build_pipeline(settings)
        pipeline.start()
        try:
            result = await pipeline.process_segment(TextSegment(text=SEQUENTIAL_TEXT))
        finally:
            pipeline.shutdown()

        analysis = result.analysis
        assert analysis.type == "flow"
        assert [n.label for n in analysis.nodes] == [
            "Collect user input", "Validate it", "Store the result",
        ]
        assert [(e.from_, e.to) for e in analysis.edges] == [("n1", "n2"), ("n2", "n3")]
        assert analysis.source == "rule"
        assert analysis.confidence == pytest.approx(0.6)
        assert result.reasons == ["model_disabled"]

        layout = result.layout
        assert layout.strategy == "hierarchical"
        assert not layout.fallback_used
        assert find_overlaps(layout.nodes) == []
        ys = [layout.node_by_id(nid).y for nid in ("n1", "n2", "n3")]
        assert ys == sorted(ys)
        assert len(set(ys)) == 3


class TestFuzzyCacheHit:
    def test_similar_text_reuses_layout(self, clock):
        cache = SemanticCache(clock=clock)
        engine = LayoutEngine(cache=cache)
        rules = RuleBasedExtractor()

        base_fp = cache.fingerprint(BASE_TEXT)
        first = engine.layout_cached(rules.extract(BASE_TEXT), base_fp, BASE_TEXT)

        synonym_fp = cache.fingerprint(SYNONYM)
        assert synonym_fp.semantic_hash != base_fp.semantic_hash
        second = engine.layout_cached(rules.extract(SYNONYM), synonym_fp, SYNONYM)

        assert [(n.x, n.y) for n in second.nodes] == [(n.x, n.y) for n in first.nodes]
        expected = list(synonym_fp.key_terms[: len(second.nodes)])
        assert [n.label for n in second.nodes][: len(expected)] == expected

        stats = cache.stats()
        assert stats.entries == 1
        assert stats.fuzzy_hits == 1
        assert stats.misses == 1


class TestModelTimeout:
    @pytest.mark.asyncio
    async def test_degrades_to_rules(self, mock_llm_client):
        async def hang(*args, **kwargs) -> LLMResponse:
            await asyncio.sleep(5)
            return LLMResponse(content="{}", model="m", provider="mock")

        mock_llm_client.complete = AsyncMock(side_effect=hang)
        settings = Settings(_env_file=None, model_timeout_ms=50)
        pipeline = build_pipeline(settings, llm_client=mock_llm_client)

        result = await pipeline.process_segment(TextSegment(text=SEQUENTIAL_TEXT, segment_id="s1"))

        assert result.degraded
        assert result.reasons == ["timeout"]
        assert result.analysis.source == "rule"
        assert result.analysis.type == "flow"
        assert len(result.layout.nodes) == 3
        assert find_overlaps(result.layout.nodes) == []


class TestModelRecovery:
    @pytest.mark.asyncio
    async def test_layout_follows_recovered_analysis(self, mock_llm_client, mock_llm_response):
        mock_llm_client.complete = AsyncMock(
            side_effect=[RuntimeError("503 unavailable"), mock_llm_response],
        )
        settings = Settings(_env_file=None, model_max_retries=0)
        pipeline = build_pipeline(settings, llm_client=mock_llm_client)

        first = await pipeline.process_segment(TextSegment(text=SEQUENTIAL_TEXT))
        assert first.reasons == ["retry_exhausted"]
        assert {n.id for n in first.layout.nodes} == {"n1", "n2", "n3"}

        second = await pipeline.process_segment(TextSegment(text=SEQUENTIAL_TEXT))
        assert not second.degraded
        assert second.analysis.source == "model"
        layout_ids = {n.id for n in second.layout.nodes}
        assert layout_ids == {n.id for n in second.analysis.nodes} == {"1", "2", "3"}
        assert len(pipeline._cache) == 1
