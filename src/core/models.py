# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DiagramType = Literal["flow", "tree", "timeline", "matrix", "cycle"]
DIAGRAM_TYPES: tuple[str, ...] = ("flow", "tree", "timeline", "matrix", "cycle")

MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 1.0


# === TRANSCRIPTION INPUT ===


class TextSegment(BaseModel):
    """One transcribed span of narrative, as delivered by the transcriber."""

    text: str
    start_ms: int = 0
    end_ms: int = 0
    segment_id: str | None = None


# === DIAGRAM GRAPH ===


class DiagramNode(BaseModel):
    """Labeled node of an abstract diagram."""

    id: str
    label: str
    kind: str | None = None


class DiagramEdge(BaseModel):
    """Directed relationship between two nodes (JSON key ``from`` is aliased)."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    label: str | None = None


class ValidationReport(BaseModel):
    """Quality metadata produced by the relationship validator."""

    dropped_edges: int = 0
    edge_ratio: float = 0.0
    has_cycles: bool = False
    disconnected_nodes: list[str] = Field(default_factory=list)
    confidence_before: float
    confidence_after: float


class DiagramAnalysis(BaseModel):
    """Typed graph extracted from one text segment."""

    type: DiagramType
    confidence: float = Field(ge=0.0, le=1.0)
    nodes: list[DiagramNode]
    edges: list[DiagramEdge] = Field(default_factory=list)
    reasoning: str = ""
    source: Literal["rule", "model", "cache"] = "rule"
    quality: ValidationReport | None = None

    @property
    def node_ids(self) -> set[str]:
        """Set of node ids in this analysis."""
        return {n.id for n in self.nodes}
