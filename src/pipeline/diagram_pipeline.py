# src/pipeline/diagram_pipeline.py — v1
"""Segment pipeline: extract → validate → layout, per transcription segment.

Stages run sequentially within a segment; segments of a document run
concurrently under a semaphore. Per-segment failures never propagate:
each degrades to the most conservative fallback and is recorded in
``SegmentDiagram.reasons``.
"""

from __future__ import annotations

import asyncio
import logging
import time

from pydantic import BaseModel, Field

from narragraph.analysis.relationship_validator import validate_analysis
from narragraph.analysis.rule_extractor import RuleBasedExtractor
from narragraph.analysis.structure_extractor import ExtractionOptions, StructureExtractor
from narragraph.cache.semantic_cache import SemanticCache
from narragraph.config.settings import Settings
from narragraph.core.models import DiagramAnalysis, TextSegment
from narragraph.layout.engine import LayoutEngine
from narragraph.layout.errors import InvalidGraphInput
from narragraph.layout.models import Bounds, LayoutConfig, LayoutData, PositionedNode
from narragraph.logging.context import set_document_context, set_segment_context, set_stage

logger = logging.getLogger(__name__)

PLACEHOLDER_LABEL = "No diagram"


class SegmentDiagram(BaseModel):
    """Renderer input for one segment."""

    segment: TextSegment
    analysis: DiagramAnalysis
    layout: LayoutData
    degraded: bool = False
    reasons: list[str] = Field(default_factory=list)


class DiagramPipeline:
    """Turns transcription segments into laid-out diagrams.

    Args:
        settings: Application settings.
        extractor: Two-tier structure extractor.
        engine: Layout engine (its registry is checked on start()).
        cache: Optional semantic cache for layouts; shut down with the pipeline.
    """

    def __init__(
        self,
        settings: Settings,
        extractor: StructureExtractor,
        engine: LayoutEngine,
        cache: SemanticCache | None = None,
    ) -> None:
        self._settings = settings
        self._extractor = extractor
        self._engine = engine
        self._cache = cache
        self._layout_config = LayoutConfig.from_settings(settings)
        self._started = False

    def start(self) -> None:
        """Validate strategy coverage; raises RegistryError on a gap or ambiguity."""
        self._engine.registry.validate_coverage()
        self._started = True
        logger.info(
            "Diagram pipeline started (strategies: %s, model tier: %s, cache: %s)",
            ", ".join(self._engine.registry.names),
            "on" if self._extractor.model_enabled else "off",
            "on" if self._cache is not None else "off",
        )

    def shutdown(self) -> None:
        if self._cache is not None:
            self._cache.shutdown()
        self._started = False

    async def process_segment(
        self, segment: TextSegment, opts: ExtractionOptions | None = None,
    ) -> SegmentDiagram:
        if not self._started:
            self.start()

        start = time.monotonic()
        segment_id = segment.segment_id or "segment"
        set_segment_context(segment_id, stage="extract")
        reasons: list[str] = []

        extraction = await self._extractor.extract(segment.text, opts)
        reasons.extend(extraction.reasons)

        set_stage("validate")
        analysis = validate_analysis(extraction.value, self._settings)

        set_stage("layout")
        layout, layout_reason = self._layout(analysis, segment.text)
        if layout_reason:
            reasons.append(layout_reason)
        set_stage(None)

        logger.info(
            "Segment %s: %s diagram, %d nodes, confidence %.2f%s (%.0fms)",
            segment_id, analysis.type, len(analysis.nodes), analysis.confidence,
            f", degraded: {', '.join(reasons)}" if reasons else "",
            (time.monotonic() - start) * 1000,
        )
        return SegmentDiagram(
            segment=segment,
            analysis=analysis,
            layout=layout,
            degraded=bool(reasons),
            reasons=reasons,
        )

    async def process_document(
        self,
        segments: list[TextSegment],
        opts: ExtractionOptions | None = None,
        document_id: str | None = None,
    ) -> list[SegmentDiagram]:
        """Process all segments concurrently; results keep input order."""
        if not self._started:
            self.start()
        if document_id:
            set_document_context(document_id)

        semaphore = asyncio.Semaphore(self._settings.max_concurrent_segments)

        async def run(index: int, segment: TextSegment) -> SegmentDiagram:
            if segment.segment_id is None:
                segment = segment.model_copy(update={"segment_id": f"seg-{index}"})
            async with semaphore:
                return await self._process_safely(segment, opts)

        start = time.monotonic()
        results = await asyncio.gather(*(run(i, s) for i, s in enumerate(segments)))
        logger.info(
            "Document %s: %d segments (%d degraded) in %.1fs",
            document_id or "-", len(results),
            sum(1 for r in results if r.degraded), time.monotonic() - start,
        )
        return list(results)

    async def _process_safely(
        self, segment: TextSegment, opts: ExtractionOptions | None,
    ) -> SegmentDiagram:
        try:
            return await self.process_segment(segment, opts)
        except Exception:
            logger.exception("Segment %s failed, using rule-based fallback", segment.segment_id)
            rules = RuleBasedExtractor(
                confidence=self._settings.rule_confidence,
                max_nodes=self._settings.max_diagram_nodes,
            )
            return SegmentDiagram(
                segment=segment,
                analysis=rules.extract(segment.text),
                layout=placeholder_layout(self._layout_config),
                degraded=True,
                reasons=["segment_error"],
            )

    def _layout(self, analysis: DiagramAnalysis, text: str) -> tuple[LayoutData, str | None]:
        try:
            if self._cache is not None:
                fingerprint = self._cache.fingerprint(text)
                layout = self._engine.layout_cached(analysis, fingerprint, text_preview=text)
            else:
                layout = self._engine.layout(analysis)
        except InvalidGraphInput as e:
            logger.warning("Invalid graph, emitting placeholder: %s", e)
            return placeholder_layout(self._layout_config), "invalid_graph"
        return layout, "layout_fallback" if layout.fallback_used else None


def placeholder_layout(config: LayoutConfig) -> LayoutData:
    """Single-node layout shown when a segment has nothing to draw."""
    node = PositionedNode(
        id="placeholder",
        x=config.margin_x,
        y=config.margin_y,
        w=config.min_node_width,
        h=config.node_height,
        label=PLACEHOLDER_LABEL,
        type="placeholder",
    )
    return LayoutData(
        nodes=[node],
        edges=[],
        bounds=Bounds(
            width=node.w + 2 * config.margin_x,
            height=node.h + 2 * config.margin_y,
            margin_x=config.margin_x,
            margin_y=config.margin_y,
        ),
        strategy="placeholder",
        fallback_used=True,
    )
