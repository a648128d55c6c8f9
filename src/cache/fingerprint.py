# src/cache/fingerprint.py — v1
"""Content fingerprinting for semantic layout reuse.

The hash identifies the exact normalized text; the remaining fields
(structure pattern, key terms, complexity, diagram hint) let the cache
recognise near-duplicates.
"""

from __future__ import annotations

import hashlib
import re
from collections import Counter

from narragraph.analysis.complexity import classify_complexity
from narragraph.cache.models import ContentFingerprint

MAX_KEY_TERMS = 10
MIN_TERM_LENGTH = 4

_STOPWORDS = frozenset({
    "the", "is", "at", "which", "on", "and", "a", "to", "are", "as", "was",
    "with", "for", "this", "that", "then", "than", "from", "have", "will",
    "into", "when", "what", "there", "their", "they", "these", "those",
    "been", "were", "also", "after", "before", "first", "next", "finally",
})

# First match wins, in this order.
_STRUCTURE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("sequential", re.compile(r"\b(?:first|then|next|finally)\b", re.IGNORECASE)),
    ("conditional", re.compile(r"\b(?:if|when|case|conditions?)\b", re.IGNORECASE)),
    ("comparison", re.compile(r"\b(?:compare\w*|versus|vs|differen\w*)\b", re.IGNORECASE)),
    ("process", re.compile(r"\b(?:process\w*|steps?|phases?|stages?)\b", re.IGNORECASE)),
    ("hierarchical", re.compile(r"\b(?:hierarch\w*|parent|child\w*|tree)\b", re.IGNORECASE)),
]

_DIAGRAM_HINTS: list[tuple[str, tuple[str, ...]]] = [
    ("flow", ("process", "flow", "step", "procedure")),
    ("tree", ("hierarchy", "structure", "organization", "taxonomy")),
    ("matrix", ("compare", "matrix", "table", "grid")),
    ("timeline", ("timeline", "history", "sequence", "chronology")),
]

_WORD = re.compile(r"\w+")


def compute_fingerprint(text: str) -> ContentFingerprint:
    """Compute the content fingerprint of a text segment. Deterministic."""
    key_terms = extract_key_terms(text)
    return ContentFingerprint(
        semantic_hash=semantic_hash(text),
        structure_pattern=detect_structure_pattern(text),
        key_terms=tuple(key_terms),
        complexity=classify_complexity(text).score,
        diagram_hint=diagram_hint(key_terms),
    )


def semantic_hash(text: str) -> str:
    """SHA-256 on normalized text (case/whitespace/punctuation stripped)."""
    return hashlib.sha256(_normalize_text(text).encode("utf-8")).hexdigest()


def detect_structure_pattern(text: str) -> str:
    for name, pattern in _STRUCTURE_PATTERNS:
        if pattern.search(text):
            return name
    return "general"


def extract_key_terms(text: str, limit: int = MAX_KEY_TERMS) -> list[str]:
    """Most frequent significant words; ties keep first-occurrence order."""
    words = [
        w for w in _WORD.findall(text.lower())
        if len(w) >= MIN_TERM_LENGTH and w not in _STOPWORDS and not w.isdigit()
    ]
    return [word for word, _ in Counter(words).most_common(limit)]


def diagram_hint(key_terms: list[str]) -> str:
    for hint, keywords in _DIAGRAM_HINTS:
        if any(kw in term for term in key_terms for kw in keywords):
            return hint
    return "general"


def _normalize_text(text: str) -> str:
    """Normalize text: lowercase, strip whitespace and punctuation."""
    text = text.lower()
    text = re.sub(r"[^\w\s]", "", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text
