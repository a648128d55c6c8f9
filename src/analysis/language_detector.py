# src/analysis/language_detector.py — v1
"""Language detection used to pick the Tier 2 prompt template.

Latin-script languages are scored by the share of closed-class function
words among tokens; Japanese, Chinese and Korean by Unicode block
membership among non-space characters. Detection never blocks: a weak
signal falls back to the configured language.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SAMPLE_CHARS = 500

_FUNCTION_WORDS: dict[str, frozenset[str]] = {
    "en": frozenset({
        "the", "and", "is", "are", "of", "to", "in", "it", "that", "for",
        "with", "this", "then", "on", "as", "be", "by", "from", "a", "an",
        "or", "we", "you", "at", "was", "were", "will", "if", "into",
    }),
    "fr": frozenset({
        "le", "la", "les", "des", "une", "un", "dans", "pour", "avec", "est",
        "sont", "cette", "par", "qui", "que", "sur", "pas", "aux", "ses",
        "et", "du", "au", "puis", "ensuite", "nous", "vous",
    }),
    "de": frozenset({
        "der", "die", "das", "und", "ist", "ein", "eine", "den", "nicht",
        "sich", "mit", "dann", "auf", "für", "von", "zu", "wir", "sind",
        "im", "dem", "des",
    }),
    "es": frozenset({
        "el", "los", "las", "del", "una", "por", "con", "para", "es", "son",
        "que", "y", "luego", "después", "se", "su", "como", "al", "lo",
    }),
    "it": frozenset({
        "il", "gli", "della", "delle", "che", "per", "con", "sono", "è",
        "poi", "una", "di", "non", "nel", "alla", "dei", "questo",
    }),
    "pt": frozenset({
        "os", "das", "dos", "uma", "para", "com", "não", "são", "depois",
        "que", "em", "no", "na", "ao", "pelo", "pela", "isso",
    }),
}

_KANA = re.compile(r"[぀-ゟ゠-ヿ]")
_HANGUL = re.compile(r"[가-힯ᄀ-ᇿ]")
_CJK = re.compile(r"[一-鿿㐀-䶿]")
_TOKEN = re.compile(r"[^\W\d_]+", re.UNICODE)


@dataclass
class LanguageResult:
    """Result of language detection."""

    language: str
    confidence: float
    is_fallback: bool = False
    scores: dict[str, float] = field(default_factory=dict)


def detect_language(
    text: str,
    fallback: str = "en",
    floor: float = 0.15,
    preferred: str | None = None,
) -> LanguageResult:
    """Detect the dominant language of a text sample.

    Args:
        text: Input text; only the first 500 characters are inspected.
        fallback: ISO 639-1 code returned when no language reaches the floor.
        floor: Minimum normalized score to accept a detection.
        preferred: Explicit language override (skips detection).

    Returns:
        LanguageResult with the winning language and its normalized score.
    """
    if preferred:
        return LanguageResult(language=preferred, confidence=1.0)

    sample = text[:SAMPLE_CHARS]
    scores = _score_scripts(sample)
    scores.update(_score_function_words(sample))

    if not scores:
        return LanguageResult(language=fallback, confidence=0.0, is_fallback=True)

    best = max(scores, key=scores.get)  # type: ignore[arg-type]
    confidence = round(scores[best], 4)
    if confidence < floor:
        logger.debug(
            "Language signal too weak (%s=%.2f < %.2f), using fallback %s",
            best, confidence, floor, fallback,
        )
        return LanguageResult(
            language=fallback, confidence=confidence, is_fallback=True, scores=scores,
        )
    return LanguageResult(language=best, confidence=confidence, scores=scores)


def _score_scripts(sample: str) -> dict[str, float]:
    """Unicode block scoring for logographic and syllabic scripts."""
    chars = [c for c in sample if not c.isspace()]
    if not chars:
        return {}
    total = len(chars)
    kana = len(_KANA.findall(sample))
    hangul = len(_HANGUL.findall(sample))
    cjk = len(_CJK.findall(sample))

    scores: dict[str, float] = {}
    if kana:
        # Japanese mixes kana with kanji
        scores["ja"] = (kana + cjk) / total
    elif cjk:
        scores["zh"] = cjk / total
    if hangul:
        scores["ko"] = hangul / total
    return scores


def _score_function_words(sample: str) -> dict[str, float]:
    """Share of each language's function words among Latin tokens."""
    tokens = [t.lower() for t in _TOKEN.findall(sample) if t.isascii() or _is_latin(t)]
    if not tokens:
        return {}
    total = len(tokens)
    return {
        lang: sum(1 for t in tokens if t in words) / total
        for lang, words in _FUNCTION_WORDS.items()
    }


def _is_latin(token: str) -> bool:
    return all(ord(c) < 0x0250 for c in token)
