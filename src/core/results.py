# src/core/results.py — v1
"""Per-stage result wrapper: a value that is either clean or degraded.

Stages that must never raise (extraction, layout within the pipeline)
return a StageResult so callers can inspect why a fallback was used.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Literal, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of a pipeline stage."""

    value: T
    status: Literal["ok", "degraded"] = "ok"
    reasons: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def ok(cls, value: T) -> StageResult[T]:
        return cls(value=value)

    @classmethod
    def degraded(cls, value: T, reason: str) -> StageResult[T]:
        return cls(value=value, status="degraded", reasons=(reason,))

    @property
    def is_degraded(self) -> bool:
        return self.status == "degraded"

    @property
    def reason(self) -> str | None:
        """First degradation reason, if any."""
        return self.reasons[0] if self.reasons else None


class ExtractionDegraded(str, Enum):
    """Why structure extraction fell back to the rule-based tier."""

    MODEL_DISABLED = "model_disabled"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    RETRY_EXHAUSTED = "retry_exhausted"
    MALFORMED_RESPONSE = "malformed_response"
    MODEL_ERROR = "model_error"
