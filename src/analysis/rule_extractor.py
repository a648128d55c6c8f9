# src/analysis/rule_extractor.py — v1
"""Tier 1 structure extraction: deterministic keyword cues + clause segmentation.

Always succeeds. Text without any usable clause degrades to a single-node
analysis instead of an error.
"""

from __future__ import annotations

import logging
import re
from typing import Literal

from narragraph.core.models import DiagramAnalysis, DiagramEdge, DiagramNode, DiagramType

logger = logging.getLogger(__name__)

CuePattern = Literal[
    "cycle", "timeline", "hierarchical", "comparison",
    "sequential", "conditional", "process",
]

# Ordered: on equal scores the earlier pattern wins.
_CUE_PATTERNS: dict[str, list[str]] = {
    "cycle": [
        r"\bcycles?\b", r"\bloops?\b", r"\brepeat\w*\b", r"\bback to\b",
        r"\bagain\b", r"\bcontinuous\w*\b", r"\biterat\w*\b", r"\brecurring\b",
        r"繰り返", r"循環",
    ],
    "timeline": [
        r"\b(?:19|20)\d{2}\b", r"\btimeline\b", r"\bhistory\b", r"\bchronolog\w*\b",
        r"\bdecades?\b", r"\bcentur(?:y|ies)\b", r"\bperiod\b",
        r"\d+年", r"年表", r"歴史",
    ],
    "hierarchical": [
        r"\bhierarch\w*\b", r"\bparent\b", r"\bchild(?:ren)?\b", r"\bbranch\w*\b",
        r"\broot\b", r"\bcategor\w*\b", r"\borgani[sz]ation\b", r"\bconsists? of\b",
        r"\bunder\b", r"\bsubordinate\w*\b",
        r"階層", r"組織", r"分類",
    ],
    "comparison": [
        r"\bcompar\w*\b", r"\bversus\b", r"\bvs\.?\b", r"\bdifferen\w*\b",
        r"\bwhereas\b", r"\bunlike\b", r"\bon the other hand\b", r"\bpros?\b",
        r"比較", r"違い",
    ],
    "sequential": [
        r"\bfirst(?:ly)?\b", r"\bthen\b", r"\bnext\b", r"\bfinally\b",
        r"\bafter that\b", r"\bsecond(?:ly)?\b", r"\blastly\b", r"\bafterwards\b",
        r"まず", r"次に", r"最後に", r"その後",
    ],
    "conditional": [
        r"\bif\b", r"\botherwise\b", r"\bunless\b", r"\bwhen\b",
        r"\bconditions?\b", r"\bin case\b",
        r"もし", r"場合",
    ],
    "process": [
        r"\bprocess\w*\b", r"\bsteps?\b", r"\bphases?\b", r"\bstages?\b",
        r"\bprocedures?\b", r"\bworkflows?\b",
        r"手順", r"工程",
    ],
}

_PATTERN_TO_TYPE: dict[str, DiagramType] = {
    "cycle": "cycle",
    "timeline": "timeline",
    "hierarchical": "tree",
    "comparison": "matrix",
    "sequential": "flow",
    "conditional": "flow",
    "process": "flow",
    "general": "flow",
}

_CLAUSE_SPLIT = re.compile(r"[.!?;\n。！？；]+|,?\s+and then\s+|,\s+then\s+", re.IGNORECASE)
_LEADING_MARKER = re.compile(
    r"^(?:(?:and\s+)?(?:first(?:ly)?|then|next|finally|after that|afterwards|"
    r"second(?:ly)?|third(?:ly)?|lastly|so)\b[\s,]*|まず|次に|最後に|その後)[、,\s]*",
    re.IGNORECASE,
)

MAX_LABEL_CHARS = 60
DEFAULT_MAX_NODES = 10


class RuleBasedExtractor:
    """Deterministic fallback extractor (Tier 1)."""

    def __init__(self, confidence: float = 0.6, max_nodes: int = DEFAULT_MAX_NODES) -> None:
        self._confidence = confidence
        self._max_nodes = max_nodes

    def extract(self, text: str) -> DiagramAnalysis:
        """Build a DiagramAnalysis from keyword cues and clauses."""
        pattern, score = detect_cue_pattern(text)
        diagram_type = _PATTERN_TO_TYPE[pattern]
        clauses = segment_clauses(text)[: self._max_nodes]

        if not clauses:
            label = _truncate(text.strip()) or "Concept"
            nodes = [DiagramNode(id="n1", label=label, kind="concept")]
            edges: list[DiagramEdge] = []
        else:
            nodes, edges = _build_elements(clauses, diagram_type)

        reasoning = (
            f"Rule-based extraction: {pattern} cues ({score} matches) "
            f"mapped to {diagram_type}; {len(nodes)} clauses"
        )
        logger.debug(
            "Tier 1 detected %s (%s, score=%d): %d nodes, %d edges",
            diagram_type, pattern, score, len(nodes), len(edges),
        )
        return DiagramAnalysis(
            type=diagram_type,
            confidence=self._confidence,
            nodes=nodes,
            edges=edges,
            reasoning=reasoning,
            source="rule",
        )


def detect_cue_pattern(text: str) -> tuple[str, int]:
    """Return the dominant cue pattern and its match count ("general" if none)."""
    lowered = text.lower()
    scores = {
        name: sum(len(re.findall(p, lowered)) for p in patterns)
        for name, patterns in _CUE_PATTERNS.items()
    }
    best = max(scores, key=scores.get)  # type: ignore[arg-type]
    if scores[best] == 0:
        return "general", 0
    return best, scores[best]


def segment_clauses(text: str) -> list[str]:
    """Split text into clauses, stripping leading sequence markers."""
    clauses: list[str] = []
    for raw in _CLAUSE_SPLIT.split(text):
        clause = _LEADING_MARKER.sub("", raw.strip()).strip(" ,、-—:")
        if not clause or not re.search(r"\w", clause):
            continue
        clauses.append(_truncate(clause[0].upper() + clause[1:]))
    return clauses


def _build_elements(
    clauses: list[str], diagram_type: DiagramType,
) -> tuple[list[DiagramNode], list[DiagramEdge]]:
    ids = [f"n{i + 1}" for i in range(len(clauses))]
    last = len(clauses) - 1

    if diagram_type == "tree":
        nodes = [
            DiagramNode(id=nid, label=label, kind="root" if i == 0 else "child")
            for i, (nid, label) in enumerate(zip(ids, clauses))
        ]
        edges = [DiagramEdge(from_=ids[0], to=nid) for nid in ids[1:]]
        return nodes, edges

    if diagram_type == "matrix":
        nodes = [DiagramNode(id=nid, label=label, kind="cell") for nid, label in zip(ids, clauses)]
        return nodes, []

    kind_for: dict[str, str] = {"timeline": "event", "cycle": "step"}
    nodes = []
    for i, (nid, label) in enumerate(zip(ids, clauses)):
        kind = kind_for.get(diagram_type)
        if kind is None:
            kind = "start" if i == 0 else "end" if i == last else "process"
        nodes.append(DiagramNode(id=nid, label=label, kind=kind))

    edges = [DiagramEdge(from_=a, to=b) for a, b in zip(ids, ids[1:])]
    if diagram_type == "cycle" and len(ids) > 2:
        edges.append(DiagramEdge(from_=ids[-1], to=ids[0], label="repeat"))
    return nodes, edges


def _truncate(label: str) -> str:
    if len(label) <= MAX_LABEL_CHARS:
        return label
    return label[: MAX_LABEL_CHARS - 3].rstrip() + "..."
