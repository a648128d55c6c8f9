# src/pipeline/factory.py — v1
"""Pipeline factory — wires settings, model clients, cache and layout engine.

The model tier is enabled only when extraction is switched on and either
a client is injected or the configured provider has an API key.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from narragraph.analysis.model_extractor import ModelBackedExtractor
from narragraph.analysis.structure_extractor import StructureExtractor
from narragraph.cache.semantic_cache import SemanticCache
from narragraph.config.settings import Settings, load_settings
from narragraph.layout.engine import LayoutEngine
from narragraph.layout.registry import StrategyRegistry
from narragraph.llm.base_client import BaseLLMClient
from narragraph.llm.client_factory import create_tier_clients
from narragraph.logging.logger import setup_logging
from narragraph.pipeline.diagram_pipeline import DiagramPipeline

logger = logging.getLogger(__name__)


def build_pipeline(
    settings: Settings | None = None,
    llm_client: BaseLLMClient | Mapping[str, BaseLLMClient] | None = None,
    registry: StrategyRegistry | None = None,
    configure_logging: bool = False,
) -> DiagramPipeline:
    """Assemble a ready-to-start DiagramPipeline.

    Args:
        settings: Application settings (loaded from .env when omitted).
        llm_client: Client (or tier → client mapping) for model extraction.
            When omitted, clients are created from the configured provider
            if its API key is set.
        registry: Strategy registry (built-in strategies when omitted).
        configure_logging: Install the narragraph log handlers from settings.

    Returns:
        DiagramPipeline; call start() to validate strategy coverage.
    """
    settings = settings or load_settings()
    if configure_logging:
        setup_logging(
            level=settings.log_level,
            log_format=settings.log_format,
            log_file=str(settings.log_file) if settings.log_file else None,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
        )

    cache = SemanticCache.from_settings(settings) if settings.cache_enabled else None

    model_extractor = None
    if settings.model_extraction_enabled:
        clients = llm_client if llm_client is not None else _clients_from_settings(settings)
        if clients is not None:
            model_extractor = ModelBackedExtractor(clients, settings)

    extractor = StructureExtractor(settings, model_extractor=model_extractor, cache=cache)
    engine = LayoutEngine.from_settings(settings, registry=registry, cache=cache)
    return DiagramPipeline(settings, extractor, engine, cache=cache)


def _clients_from_settings(settings: Settings) -> dict[str, BaseLLMClient] | None:
    api_key = getattr(settings, f"{settings.llm_provider}_api_key", "")
    if not api_key:
        logger.info(
            "No API key for provider %s, model extraction disabled", settings.llm_provider,
        )
        return None
    return create_tier_clients(settings)
