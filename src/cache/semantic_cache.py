# src/cache/semantic_cache.py — v1
"""In-memory semantic cache for layouts and extraction results.

Layouts are matched exactly on the semantic hash first, then fuzzily on
weighted fingerprint similarity. Entries are deep-copied on the way in
and on the way out; callers never share objects with the cache.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Callable, Collection
from datetime import datetime, timezone

from pydantic import ValidationError

from narragraph.cache.fingerprint import compute_fingerprint
from narragraph.cache.models import (
    CachedLayoutEntry,
    CacheLookupResult,
    CacheStats,
    ContentFingerprint,
    SimilarityScore,
)
from narragraph.cache.rwlock import ReadWriteLock
from narragraph.config.settings import Settings
from narragraph.core.models import DiagramAnalysis
from narragraph.layout.models import LayoutData

logger = logging.getLogger(__name__)

TERM_WEIGHT = 0.4
STRUCTURE_WEIGHT = 0.3
COMPLEXITY_WEIGHT = 0.2
HINT_WEIGHT = 0.1
STRUCTURE_MISMATCH_CREDIT = 0.5
HINT_MISMATCH_CREDIT = 0.3
EVICTION_FRACTION = 0.25
MIN_AGE_DAYS = 1.0 / 1440  # one minute
PREVIEW_CHARS = 100


class CacheCorruption(RuntimeError):
    """A cached entry failed to copy or validate."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_similarity(a: ContentFingerprint, b: ContentFingerprint) -> SimilarityScore:
    """Weighted similarity of two fingerprints in [0, 1]."""
    longest = max(len(a.key_terms), len(b.key_terms))
    if longest:
        common = sum(1 for term in a.key_terms if term in b.key_terms)
        term_similarity = common / longest
    else:
        term_similarity = 0.0
    structure_match = 1.0 if a.structure_pattern == b.structure_pattern else STRUCTURE_MISMATCH_CREDIT
    complexity_similarity = 1.0 - abs(a.complexity - b.complexity)
    hint_match = 1.0 if a.diagram_hint == b.diagram_hint else HINT_MISMATCH_CREDIT

    score = (
        TERM_WEIGHT * term_similarity
        + STRUCTURE_WEIGHT * structure_match
        + COMPLEXITY_WEIGHT * complexity_similarity
        + HINT_WEIGHT * hint_match
    )
    return SimilarityScore(
        score=round(score, 4),
        term_similarity=term_similarity,
        structure_match=structure_match,
        complexity_similarity=complexity_similarity,
        hint_match=hint_match,
    )


def adapt_layout(layout: LayoutData, key_terms: tuple[str, ...]) -> LayoutData:
    """Relabel the first nodes of a reused layout with the new key terms."""
    nodes = [
        node.model_copy(update={"label": key_terms[i]}) if i < len(key_terms) else node
        for i, node in enumerate(layout.nodes)
    ]
    return layout.model_copy(update={"nodes": nodes})


class SemanticCache:
    """Bounded layout cache with fuzzy matching and usage-weighted eviction.

    Args:
        capacity: Maximum number of layout entries (and analysis entries).
        similarity_threshold: Minimum score for a fuzzy hit.
        clock: Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        capacity: int = 100,
        similarity_threshold: float = 0.7,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._capacity = capacity
        self._threshold = similarity_threshold
        self._clock = clock or _utcnow
        self._entries: dict[str, CachedLayoutEntry] = {}
        self._analyses: OrderedDict[str, DiagramAnalysis] = OrderedDict()
        self._lock = ReadWriteLock()
        self._hits = 0
        self._fuzzy_hits = 0
        self._misses = 0
        self._evictions = 0

    @classmethod
    def from_settings(
        cls, settings: Settings, clock: Callable[[], datetime] | None = None,
    ) -> SemanticCache:
        return cls(
            capacity=settings.cache_capacity,
            similarity_threshold=settings.similarity_threshold,
            clock=clock,
        )

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def fingerprint(self, text: str) -> ContentFingerprint:
        return compute_fingerprint(text)

    # --- Layout level ---

    def lookup(
        self, fingerprint: ContentFingerprint, node_ids: Collection[str] | None = None,
    ) -> CacheLookupResult:
        """Exact match on the semantic hash, else best fuzzy match above threshold.

        With ``node_ids``, only entries whose layout has exactly those node
        ids are eligible; a stale entry for the same text is a miss.
        """
        wanted = frozenset(node_ids) if node_ids is not None else None
        with self._lock.read():
            key, match, similarity = self._find_locked(fingerprint, wanted)
            entry = self._entries.get(key) if key is not None else None
            layout: LayoutData | None = None
            corrupt = False
            if entry is not None:
                try:
                    layout = _copy_layout(entry.layout)
                except CacheCorruption as e:
                    logger.warning("Dropping corrupt cache entry %s: %s", key[:12], e)
                    corrupt = True

        with self._lock.write():
            if corrupt and key is not None:
                self._entries.pop(key, None)
                self._evictions += 1
            if layout is None:
                self._misses += 1
                return CacheLookupResult()

            stored = self._entries.get(key)
            if stored is not None:
                stored.usage_count += 1
                stored.last_used_at = self._clock()
            self._hits += 1
            if match == "fuzzy":
                self._fuzzy_hits += 1

        if match == "fuzzy":
            layout = adapt_layout(layout, fingerprint.key_terms)
            logger.debug("Fuzzy layout hit (score=%.3f)", similarity.score)
        return CacheLookupResult(hit=True, match=match, layout=layout, similarity=similarity)

    def store(
        self,
        fingerprint: ContentFingerprint,
        layout: LayoutData,
        quality_score: float = 1.0,
        compute_cost_ms: int = 0,
        text_preview: str = "",
    ) -> None:
        """Insert or overwrite the entry for this fingerprint, then evict if over capacity."""
        now = self._clock()
        entry = CachedLayoutEntry(
            fingerprint=fingerprint,
            layout=_copy_layout(layout),
            quality_score=quality_score,
            created_at=now,
            last_used_at=now,
            compute_cost_ms=compute_cost_ms,
            node_count=len(layout.nodes),
            edge_count=len(layout.edges),
            text_preview=text_preview[:PREVIEW_CHARS],
        )
        with self._lock.write():
            self._entries[fingerprint.semantic_hash] = entry
            self._evict_locked(now)

    def evict(self) -> int:
        """Evict low-retention entries if over capacity; returns number removed."""
        with self._lock.write():
            return self._evict_locked(self._clock())

    def _find_locked(
        self, fingerprint: ContentFingerprint, wanted: frozenset[str] | None = None,
    ) -> tuple[str | None, str | None, SimilarityScore | None]:
        exact_entry = self._entries.get(fingerprint.semantic_hash)
        if exact_entry is not None and _has_node_ids(exact_entry, wanted):
            exact = SimilarityScore(
                score=1.0, term_similarity=1.0, structure_match=1.0,
                complexity_similarity=1.0, hint_match=1.0,
            )
            return fingerprint.semantic_hash, "exact", exact

        best_key: str | None = None
        best: SimilarityScore | None = None
        for key, entry in self._entries.items():
            if not _has_node_ids(entry, wanted):
                continue
            score = compute_similarity(fingerprint, entry.fingerprint)
            if best is None or score.score > best.score:
                best_key, best = key, score

        if best is not None and best.score >= self._threshold:
            return best_key, "fuzzy", best
        return None, None, best

    def _evict_locked(self, now: datetime) -> int:
        if len(self._entries) <= self._capacity:
            return 0

        def retention(item: tuple[str, CachedLayoutEntry]) -> tuple[float, datetime, str]:
            key, entry = item
            age_days = (now - entry.last_used_at).total_seconds() / 86400
            return entry.usage_count / max(age_days, MIN_AGE_DAYS), entry.last_used_at, key

        ranked = sorted(self._entries.items(), key=retention)
        count = max(1, int(len(ranked) * EVICTION_FRACTION))
        for key, _ in ranked[:count]:
            del self._entries[key]
        self._evictions += count
        logger.info("Evicted %d cache entries (%d remain)", count, len(self._entries))
        return count

    # --- Analysis level (exact hash only) ---

    def get_analysis(self, fingerprint: ContentFingerprint) -> DiagramAnalysis | None:
        with self._lock.read():
            analysis = self._analyses.get(fingerprint.semantic_hash)
            return analysis.model_copy(deep=True) if analysis is not None else None

    def store_analysis(self, fingerprint: ContentFingerprint, analysis: DiagramAnalysis) -> None:
        copy = analysis.model_copy(deep=True)
        with self._lock.write():
            self._analyses[fingerprint.semantic_hash] = copy
            self._analyses.move_to_end(fingerprint.semantic_hash)
            while len(self._analyses) > self._capacity:
                self._analyses.popitem(last=False)

    # --- Maintenance ---

    def stats(self) -> CacheStats:
        with self._lock.read():
            return CacheStats(
                entries=len(self._entries),
                analysis_entries=len(self._analyses),
                hits=self._hits,
                fuzzy_hits=self._fuzzy_hits,
                misses=self._misses,
                evictions=self._evictions,
            )

    def clear(self) -> None:
        with self._lock.write():
            self._entries.clear()
            self._analyses.clear()

    def shutdown(self) -> None:
        stats = self.stats()
        logger.info(
            "Semantic cache shutdown: %d entries, hit rate %.2f (%d fuzzy), %d evictions",
            stats.entries, stats.hit_rate, stats.fuzzy_hits, stats.evictions,
        )
        self.clear()


def _has_node_ids(entry: CachedLayoutEntry, wanted: frozenset[str] | None) -> bool:
    return wanted is None or {node.id for node in entry.layout.nodes} == wanted


def _copy_layout(layout: LayoutData) -> LayoutData:
    """Deep copy through a validation round trip."""
    try:
        return LayoutData.model_validate(layout.model_dump())
    except ValidationError as e:
        raise CacheCorruption(str(e)) from e
