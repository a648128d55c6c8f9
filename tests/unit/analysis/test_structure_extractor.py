# tests/unit/analysis/test_structure_extractor.py — v1
"""Tests for analysis/structure_extractor.py — tier selection and degradation."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from narragraph.analysis.model_extractor import ModelBackedExtractor
from narragraph.analysis.structure_extractor import ExtractionOptions, StructureExtractor
from narragraph.cache.semantic_cache import SemanticCache
from narragraph.config.settings import Settings
from narragraph.llm.models import LLMResponse
from tests.conftest import SEQUENTIAL_TEXT


def _extractor(settings, client, cache=None) -> StructureExtractor:
    return StructureExtractor(settings, ModelBackedExtractor(client, settings), cache=cache)


async def _slow_reply(*args, **kwargs) -> LLMResponse:
    await asyncio.sleep(5)
    return LLMResponse(content="{}", model="m", provider="mock")


class TestStructureExtractor:
    @pytest.mark.asyncio
    async def test_no_model_degrades_to_rules(self, settings):
        result = await StructureExtractor(settings).extract(SEQUENTIAL_TEXT)
        assert result.is_degraded
        assert result.reason == "model_disabled"
        assert result.value.type == "flow"
        assert len(result.value.nodes) == 3
        assert len(result.value.edges) == 2

    @pytest.mark.asyncio
    async def test_model_success(self, settings, mock_llm_client):
        result = await _extractor(settings, mock_llm_client).extract(SEQUENTIAL_TEXT)
        assert not result.is_degraded
        assert result.value.source == "model"

    @pytest.mark.asyncio
    async def test_disabled_by_settings(self, mock_llm_client):
        settings = Settings(_env_file=None, model_extraction_enabled=False)
        result = await _extractor(settings, mock_llm_client).extract(SEQUENTIAL_TEXT)
        assert result.reason == "model_disabled"
        mock_llm_client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_force_rule_tier(self, settings, mock_llm_client):
        result = await _extractor(settings, mock_llm_client).extract(
            SEQUENTIAL_TEXT, ExtractionOptions(force_tier="rule"),
        )
        assert not result.is_degraded
        assert result.value.source == "rule"
        mock_llm_client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout(self, settings, mock_llm_client):
        mock_llm_client.complete = AsyncMock(side_effect=_slow_reply)
        result = await _extractor(settings, mock_llm_client).extract(
            SEQUENTIAL_TEXT, ExtractionOptions(timeout_ms=50),
        )
        assert result.reason == "timeout"
        assert result.value.source == "rule"

    @pytest.mark.asyncio
    async def test_cancel_event_during_call(self, settings, mock_llm_client):
        mock_llm_client.complete = AsyncMock(side_effect=_slow_reply)
        event = asyncio.Event()
        loop = asyncio.get_running_loop()
        loop.call_later(0.02, event.set)

        result = await _extractor(settings, mock_llm_client).extract(
            SEQUENTIAL_TEXT, ExtractionOptions(cancel_event=event),
        )
        assert result.reason == "cancelled"
        assert result.value.type == "flow"

    @pytest.mark.asyncio
    async def test_cancel_event_already_set(self, settings, mock_llm_client):
        event = asyncio.Event()
        event.set()
        result = await _extractor(settings, mock_llm_client).extract(
            SEQUENTIAL_TEXT, ExtractionOptions(cancel_event=event),
        )
        assert result.reason == "cancelled"
        mock_llm_client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_payload(self, settings, mock_llm_client):
        mock_llm_client.complete.return_value = LLMResponse(
            content='{"type": "flowchart", "nodes": "oops"}', model="m", provider="mock",
        )
        result = await _extractor(settings, mock_llm_client).extract(SEQUENTIAL_TEXT)
        assert result.reason == "malformed_response"

    @pytest.mark.asyncio
    async def test_retry_exhausted(self, mock_llm_client):
        settings = Settings(_env_file=None, model_max_retries=0)
        mock_llm_client.complete = AsyncMock(side_effect=RuntimeError("boom"))
        result = await _extractor(settings, mock_llm_client).extract(SEQUENTIAL_TEXT)
        assert result.reason == "retry_exhausted"

    @pytest.mark.asyncio
    async def test_analysis_cached_by_hash(self, settings, mock_llm_client):
        cache = SemanticCache()
        extractor = _extractor(settings, mock_llm_client, cache=cache)
        first = await extractor.extract(SEQUENTIAL_TEXT)
        second = await extractor.extract(SEQUENTIAL_TEXT)
        assert first.value.source == "model"
        assert second.value.source == "cache"
        assert second.value.nodes == first.value.nodes
        mock_llm_client.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_outer_cancellation_cancels_model_call(self, settings, mock_llm_client):
        started = asyncio.Event()
        inner_cancelled = asyncio.Event()

        async def slow(*args, **kwargs) -> LLMResponse:
            started.set()
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                inner_cancelled.set()
                raise
            return LLMResponse(content="{}", model="m", provider="mock")

        mock_llm_client.complete = AsyncMock(side_effect=slow)
        task = asyncio.ensure_future(_extractor(settings, mock_llm_client).extract(SEQUENTIAL_TEXT))
        await asyncio.wait_for(started.wait(), timeout=1)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.wait_for(inner_cancelled.wait(), timeout=1)
        assert inner_cancelled.is_set()
