# src/analysis/complexity.py — v1
"""Text complexity scoring and model tier recommendation.

Combines average sentence length (characters, normalized against a fixed
ceiling) with lexical diversity (unique/total word ratio) into one score.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

ComplexityLevel = Literal["low", "medium", "high"]
ModelTier = Literal["light", "heavy"]

SENTENCE_LENGTH_CEILING = 100.0
LENGTH_WEIGHT = 0.5
DIVERSITY_WEIGHT = 0.5
LOW_THRESHOLD = 0.4
HIGH_THRESHOLD = 0.7

_SENTENCE_SPLIT = re.compile(r"[.!?。！？]+")
_WORD = re.compile(r"\w+")


@dataclass(frozen=True)
class ComplexityAssessment:
    """Result of complexity classification."""

    level: ComplexityLevel
    score: float
    recommended_tier: ModelTier | None
    avg_sentence_length: float
    lexical_diversity: float


def classify_complexity(text: str) -> ComplexityAssessment:
    """Score text complexity and recommend a model tier.

    ``medium`` carries no recommendation; the caller decides.
    """
    sentences = [s for s in _SENTENCE_SPLIT.split(text) if s.strip()]
    if not sentences:
        return ComplexityAssessment("low", 0.0, "light", 0.0, 0.0)

    avg_length = len(text.strip()) / len(sentences)
    words = [w.lower() for w in _WORD.findall(text)]
    diversity = len(set(words)) / len(words) if words else 0.0

    length_score = min(avg_length / SENTENCE_LENGTH_CEILING, 1.0)
    score = LENGTH_WEIGHT * length_score + DIVERSITY_WEIGHT * diversity
    score = round(min(max(score, 0.0), 1.0), 4)

    level: ComplexityLevel
    tier: ModelTier | None
    if score < LOW_THRESHOLD:
        level, tier = "low", "light"
    elif score >= HIGH_THRESHOLD:
        level, tier = "high", "heavy"
    else:
        level, tier = "medium", None

    return ComplexityAssessment(
        level=level,
        score=score,
        recommended_tier=tier,
        avg_sentence_length=avg_length,
        lexical_diversity=diversity,
    )
