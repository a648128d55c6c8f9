# src/cache/models.py — v1
"""Cache domain models: ContentFingerprint, CachedLayoutEntry, CacheLookupResult."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from narragraph.layout.models import LayoutData

StructurePattern = Literal[
    "sequential", "conditional", "comparison", "process", "hierarchical", "general",
]
DiagramHint = Literal["flow", "tree", "matrix", "timeline", "general"]


class ContentFingerprint(BaseModel):
    """Deterministic semantic summary of a text segment."""

    model_config = ConfigDict(frozen=True)

    semantic_hash: str
    structure_pattern: StructurePattern
    key_terms: tuple[str, ...] = ()
    complexity: float = Field(ge=0.0, le=1.0)
    diagram_hint: DiagramHint = "general"


class SimilarityScore(BaseModel):
    """Weighted similarity between two fingerprints with its components."""

    score: float
    term_similarity: float
    structure_match: float
    complexity_similarity: float
    hint_match: float


class CachedLayoutEntry(BaseModel):
    """Stored layout with usage bookkeeping."""

    fingerprint: ContentFingerprint
    layout: LayoutData
    quality_score: float = 1.0
    usage_count: int = Field(default=1, ge=1)
    created_at: datetime
    last_used_at: datetime
    compute_cost_ms: int = 0
    node_count: int = 0
    edge_count: int = 0
    text_preview: str = ""


class CacheLookupResult(BaseModel):
    """Outcome of a layout lookup."""

    hit: bool = False
    match: Literal["exact", "fuzzy"] | None = None
    layout: LayoutData | None = None
    similarity: SimilarityScore | None = None


class CacheStats(BaseModel):
    """Counters for cache efficiency reporting."""

    entries: int = 0
    analysis_entries: int = 0
    hits: int = 0
    fuzzy_hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0
