# src/logging/context.py — v1
"""Contextual logging support — attach document_id, segment_id, stage to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging — set per segment execution.
_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_id", default=None
)
_segment_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "segment_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    document_id: str | None = None
    segment_id: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        document_id=_document_id.get(),
        segment_id=_segment_id.get(),
        stage=_stage.get(),
    )


def set_document_context(document_id: str) -> None:
    """Set document-level context (called once per document)."""
    _document_id.set(document_id)


def set_segment_context(segment_id: str, stage: str | None = None) -> None:
    """Set segment-level context (called per segment task)."""
    _segment_id.set(segment_id)
    _stage.set(stage)


def set_stage(stage: str | None) -> None:
    """Set the pipeline stage currently executing."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _document_id.set(None)
    _segment_id.set(None)
    _stage.set(None)
