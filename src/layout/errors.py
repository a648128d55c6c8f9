# src/layout/errors.py — v1
"""Layout error types."""

from __future__ import annotations


class InvalidGraphInput(ValueError):
    """The analysis cannot be laid out at all (e.g. it has no nodes)."""


class LayoutAlgorithmFailure(RuntimeError):
    """A strategy raised or produced overlapping rectangles."""

    def __init__(self, strategy: str, detail: str) -> None:
        self.strategy = strategy
        self.detail = detail
        super().__init__(f"Layout strategy '{strategy}' failed: {detail}")
