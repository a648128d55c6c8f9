# tests/unit/pipeline/test_factory.py — v1
"""Tests for pipeline/factory.py — model tier wiring."""

from __future__ import annotations

from narragraph.config.settings import Settings
from narragraph.llm.adapters.google_adapter import GoogleAdapter
from narragraph.pipeline.factory import build_pipeline


class TestBuildPipeline:
    def test_no_key_no_model(self):
        settings = Settings(_env_file=None, google_api_key="")
        pipeline = build_pipeline(settings)
        assert not pipeline._extractor.model_enabled
        assert pipeline._cache is not None

    def test_injected_client(self, mock_llm_client):
        pipeline = build_pipeline(Settings(_env_file=None), llm_client=mock_llm_client)
        assert pipeline._extractor.model_enabled

    def test_clients_from_api_key(self):
        settings = Settings(_env_file=None, google_api_key="g-key")
        pipeline = build_pipeline(settings)
        assert pipeline._extractor.model_enabled
        assert isinstance(pipeline._extractor._model._client_for("heavy"), GoogleAdapter)

    def test_extraction_disabled(self, mock_llm_client):
        settings = Settings(_env_file=None, model_extraction_enabled=False)
        pipeline = build_pipeline(settings, llm_client=mock_llm_client)
        assert not pipeline._extractor.model_enabled

    def test_cache_disabled(self):
        pipeline = build_pipeline(Settings(_env_file=None, cache_enabled=False, google_api_key=""))
        assert pipeline._cache is None

    def test_start_with_builtin_strategies(self):
        pipeline = build_pipeline(Settings(_env_file=None, google_api_key=""))
        pipeline.start()
        pipeline.shutdown()
