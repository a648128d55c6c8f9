# tests/unit/logging/test_unit_context.py — v1
"""Tests for logging/context.py — contextual logging variables."""

from __future__ import annotations

import asyncio

import pytest

from narragraph.logging.context import (
    clear_context,
    get_context,
    set_document_context,
    set_segment_context,
    set_stage,
)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_initial_state(self):
        ctx = get_context()
        assert ctx.document_id is None
        assert ctx.segment_id is None
        assert ctx.stage is None

    def test_set_segment_context(self):
        set_document_context("doc1")
        set_segment_context("seg-3", stage="extract")
        set_stage("validate")
        ctx = get_context()
        assert (ctx.document_id, ctx.segment_id, ctx.stage) == ("doc1", "seg-3", "validate")

    def test_as_dict_filters_none(self):
        set_document_context("doc1")
        d = get_context().as_dict()
        assert d == {"document_id": "doc1"}

    @pytest.mark.asyncio
    async def test_tasks_are_isolated(self):
        async def worker(seg: str) -> str | None:
            set_segment_context(seg)
            await asyncio.sleep(0)
            return get_context().segment_id

        results = await asyncio.gather(worker("a"), worker("b"))
        assert results == ["a", "b"]
        assert get_context().segment_id is None
