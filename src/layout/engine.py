# src/layout/engine.py — v1
"""Layout engine: input sanitation, strategy dispatch, overlap guard.

``layout`` raises only InvalidGraphInput (no nodes) and RegistryError
(unresolvable type). Any strategy failure or overlap is replaced by the
grid fallback with ``fallback_used=True``.
"""

from __future__ import annotations

import logging
import time

from narragraph.cache.models import ContentFingerprint
from narragraph.cache.semantic_cache import SemanticCache
from narragraph.config.settings import Settings
from narragraph.core.models import DiagramAnalysis, DiagramEdge, DiagramNode
from narragraph.layout.errors import InvalidGraphInput, LayoutAlgorithmFailure
from narragraph.layout.fallback import FALLBACK_STRATEGY, fallback_layout
from narragraph.layout.geometry import find_overlaps, normalize
from narragraph.layout.models import LayoutConfig, LayoutData
from narragraph.layout.registry import StrategyRegistry

logger = logging.getLogger(__name__)

STRATEGY_QUALITY = 1.0
FALLBACK_QUALITY = 0.5


class LayoutEngine:
    """Computes overlap-free layouts for diagram analyses."""

    def __init__(
        self,
        registry: StrategyRegistry | None = None,
        config: LayoutConfig | None = None,
        cache: SemanticCache | None = None,
    ) -> None:
        self._registry = registry or StrategyRegistry.with_builtin()
        self._config = config or LayoutConfig()
        self._cache = cache

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        registry: StrategyRegistry | None = None,
        cache: SemanticCache | None = None,
    ) -> LayoutEngine:
        return cls(registry=registry, config=LayoutConfig.from_settings(settings), cache=cache)

    @property
    def registry(self) -> StrategyRegistry:
        return self._registry

    def layout(self, analysis: DiagramAnalysis, config: LayoutConfig | None = None) -> LayoutData:
        cfg = config or self._config
        clean = sanitize_graph(analysis)
        strategy = self._registry.resolve(clean.type)

        try:
            nodes, edges = strategy.compute(clean, cfg)
            overlaps = find_overlaps(nodes)
            if overlaps:
                raise LayoutAlgorithmFailure(
                    strategy.name, f"{len(overlaps)} overlapping pair(s), first {overlaps[0]}",
                )
            strategy_name, fallback_used = strategy.name, False
        except Exception as e:
            logger.warning("Layout fallback for %s diagram: %s", clean.type, e)
            nodes, edges = fallback_layout(clean, cfg)
            if find_overlaps(nodes):
                logger.error("Grid fallback overlaps with %s, retrying without separation", cfg)
                tight = cfg.model_copy(update={"node_separation": 0.0, "rank_separation": 0.0})
                nodes, edges = fallback_layout(clean, tight)
            strategy_name, fallback_used = FALLBACK_STRATEGY, True

        nodes, edges, bounds = normalize(nodes, edges, cfg)
        return LayoutData(
            nodes=nodes,
            edges=edges,
            bounds=bounds,
            strategy=strategy_name,
            fallback_used=fallback_used,
        )

    def layout_cached(
        self,
        analysis: DiagramAnalysis,
        fingerprint: ContentFingerprint,
        text_preview: str = "",
        config: LayoutConfig | None = None,
    ) -> LayoutData:
        """Reuse a cached layout of the same graph for this fingerprint, or compute and store one."""
        if self._cache is None:
            return self.layout(analysis, config)

        # a reused layout must describe the same graph as the analysis
        node_ids = sanitize_graph(analysis).node_ids
        cached = self._cache.lookup(fingerprint, node_ids=node_ids)
        if cached.hit and cached.layout is not None:
            logger.debug("Layout cache %s hit", cached.match)
            return cached.layout

        start = time.monotonic()
        result = self.layout(analysis, config)
        cost_ms = int((time.monotonic() - start) * 1000)
        self._cache.store(
            fingerprint,
            result,
            quality_score=FALLBACK_QUALITY if result.fallback_used else STRATEGY_QUALITY,
            compute_cost_ms=cost_ms,
            text_preview=text_preview,
        )
        return result


def sanitize_graph(analysis: DiagramAnalysis) -> DiagramAnalysis:
    """Drop duplicate node ids (keep first) and dangling edges.

    Raises:
        InvalidGraphInput: If the analysis has no nodes.
    """
    if not analysis.nodes:
        raise InvalidGraphInput("Cannot lay out a diagram with zero nodes")

    nodes: list[DiagramNode] = []
    seen: set[str] = set()
    for node in analysis.nodes:
        if node.id in seen:
            continue
        seen.add(node.id)
        nodes.append(node)
    if len(nodes) < len(analysis.nodes):
        logger.warning("Dropped %d duplicate node id(s)", len(analysis.nodes) - len(nodes))

    edges: list[DiagramEdge] = [e for e in analysis.edges if e.from_ in seen and e.to in seen]
    if len(edges) < len(analysis.edges):
        logger.warning("Dropped %d dangling edge(s)", len(analysis.edges) - len(edges))

    return analysis.model_copy(update={"nodes": nodes, "edges": edges})
