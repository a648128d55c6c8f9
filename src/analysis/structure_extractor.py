# src/analysis/structure_extractor.py — v1
"""Two-tier structure extraction with graceful degradation.

Tier 2 (model) is tried first when available; any failure returns the
Tier 1 (rule) result marked degraded. ``extract`` never raises.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from narragraph.analysis.model_extractor import ModelBackedExtractor, ModelResponseError
from narragraph.analysis.rule_extractor import RuleBasedExtractor
from narragraph.config.settings import Settings
from narragraph.core.models import DiagramAnalysis
from narragraph.core.results import ExtractionDegraded, StageResult
from narragraph.llm.retry import LLMRetryExhausted

if TYPE_CHECKING:
    from narragraph.cache.semantic_cache import SemanticCache

logger = logging.getLogger(__name__)


@dataclass
class ExtractionOptions:
    """Per-call extraction options."""

    timeout_ms: int | None = None
    preferred_language: str | None = None
    force_tier: Literal["rule", "model"] | None = None
    cancel_event: asyncio.Event | None = None


class StructureExtractor:
    """Routes text to the model tier or the rule tier."""

    def __init__(
        self,
        settings: Settings,
        model_extractor: ModelBackedExtractor | None = None,
        rule_extractor: RuleBasedExtractor | None = None,
        cache: SemanticCache | None = None,
    ) -> None:
        self._settings = settings
        self._model = model_extractor
        self._rules = rule_extractor or RuleBasedExtractor(
            confidence=settings.rule_confidence,
            max_nodes=settings.max_diagram_nodes,
        )
        self._cache = cache

    @property
    def model_enabled(self) -> bool:
        return self._model is not None and self._settings.model_extraction_enabled

    async def extract(
        self, text: str, opts: ExtractionOptions | None = None,
    ) -> StageResult[DiagramAnalysis]:
        opts = opts or ExtractionOptions()

        if opts.force_tier == "rule":
            return StageResult.ok(self._rules.extract(text))

        fingerprint = None
        if self._cache is not None:
            fingerprint = self._cache.fingerprint(text)
            cached = self._cache.get_analysis(fingerprint)
            if cached is not None:
                logger.debug("Analysis cache hit for %s", fingerprint.semantic_hash[:12])
                return StageResult.ok(cached.model_copy(update={"source": "cache"}))

        if not self.model_enabled:
            return self._degrade(text, ExtractionDegraded.MODEL_DISABLED)
        if opts.cancel_event is not None and opts.cancel_event.is_set():
            return self._degrade(text, ExtractionDegraded.CANCELLED)

        timeout_ms = opts.timeout_ms or self._settings.model_timeout_ms
        outcome = await self._run_model(text, opts, timeout_ms / 1000.0)
        if isinstance(outcome, ExtractionDegraded):
            return self._degrade(text, outcome)

        if self._cache is not None and fingerprint is not None:
            self._cache.store_analysis(fingerprint, outcome)
        return StageResult.ok(outcome)

    async def _run_model(
        self, text: str, opts: ExtractionOptions, timeout_s: float,
    ) -> DiagramAnalysis | ExtractionDegraded:
        """Race the model call against the timeout and the cancel event."""
        assert self._model is not None
        model_task = asyncio.ensure_future(
            self._model.extract(text, preferred_language=opts.preferred_language)
        )
        waiters: set[asyncio.Future] = {model_task}
        cancel_task: asyncio.Future | None = None
        if opts.cancel_event is not None:
            cancel_task = asyncio.ensure_future(opts.cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout_s, return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if cancel_task is not None:
                cancel_task.cancel()
            # also reached when the caller cancels extract() itself
            if not model_task.done():
                model_task.cancel()

        if model_task not in done:
            if cancel_task is not None and cancel_task in done:
                return ExtractionDegraded.CANCELLED
            logger.warning("Tier 2 extraction timed out after %.1fs", timeout_s)
            return ExtractionDegraded.TIMEOUT

        try:
            return model_task.result()
        except LLMRetryExhausted as e:
            logger.warning("Tier 2 extraction failed: %s", e)
            return ExtractionDegraded.RETRY_EXHAUSTED
        except ModelResponseError as e:
            logger.warning("Tier 2 returned an unusable payload: %s", e)
            return ExtractionDegraded.MALFORMED_RESPONSE
        except Exception:
            logger.exception("Unexpected Tier 2 failure")
            return ExtractionDegraded.MODEL_ERROR

    def _degrade(self, text: str, reason: ExtractionDegraded) -> StageResult[DiagramAnalysis]:
        logger.info("Structure extraction degraded to Tier 1 (%s)", reason.value)
        return StageResult.degraded(self._rules.extract(text), reason.value)
