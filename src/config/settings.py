# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for model routing, extraction thresholds,
cache sizing, layout geometry and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDER (Tier 2 extraction) ===
    llm_provider: str = "google"
    llm_light_model: str = "gemini-2.5-flash"
    llm_heavy_model: str = "gemini-2.5-pro"
    llm_temperature: float = 0.1
    llm_max_output_tokens: int = 2048

    # Provider API keys
    anthropic_api_key: str = ""
    google_api_key: str = ""

    # === Structure extraction ===
    model_extraction_enabled: bool = True
    model_timeout_ms: int = 30_000
    model_max_retries: int = 2
    model_input_char_limit: int = 1000
    medium_complexity_tier: Literal["light", "heavy"] = "light"
    rule_confidence: float = 0.6
    model_confidence: float = 0.9
    max_diagram_nodes: int = 10

    # === Language detection ===
    language_fallback: str = "en"
    language_confidence_floor: float = 0.15

    # === Relationship validation ===
    sparse_edge_penalty: float = 0.1
    disconnected_penalty: float = 0.1

    # === Semantic cache ===
    cache_enabled: bool = True
    cache_capacity: int = 100
    similarity_threshold: float = 0.7

    # === Layout ===
    layout_rank_separation: float = 50.0
    layout_node_separation: float = 50.0
    layout_margin_x: float = 50.0
    layout_margin_y: float = 50.0
    layout_node_height: float = 60.0
    layout_min_node_width: float = 120.0
    layout_max_node_width: float = 320.0
    layout_char_width: float = 8.0
    layout_node_padding: float = 16.0
    layout_crossing_sweeps: int = 4

    # === Pipeline ===
    max_concurrent_segments: int = 4

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "rule_confidence", "model_confidence", "language_confidence_floor",
    )
    @classmethod
    def validate_unit_interval(cls, v: float, info) -> float:  # noqa: N805
        """Confidence-like values must lie in [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"{info.field_name} must be within [0, 1]")
        return v

    @field_validator("cache_capacity", "max_concurrent_segments", "model_timeout_ms")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator(
        "layout_rank_separation", "layout_node_separation",
        "layout_margin_x", "layout_margin_y",
    )
    @classmethod
    def validate_non_negative(cls, v: float, info) -> float:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @field_validator("model_max_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("model_max_retries must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not 0.0 < self.similarity_threshold <= 1.0:
            errors.append("SIMILARITY_THRESHOLD must be within (0, 1]")

        if self.layout_min_node_width > self.layout_max_node_width:
            errors.append(
                "LAYOUT_MIN_NODE_WIDTH must be <= LAYOUT_MAX_NODE_WIDTH"
            )

        if self.sparse_edge_penalty < 0 or self.disconnected_penalty < 0:
            errors.append("Confidence penalties must be non-negative")
        elif self.sparse_edge_penalty + self.disconnected_penalty > 0.5:
            errors.append(
                "SPARSE_EDGE_PENALTY + DISCONNECTED_PENALTY must not exceed 0.5"
            )

        if self.rule_confidence < 0.5 or self.model_confidence < 0.5:
            errors.append("Tier confidences must be >= 0.5")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def model_timeout_s(self) -> float:
        """Tier 2 timeout in seconds."""
        return self.model_timeout_ms / 1000.0

    def model_for_tier(self, tier: str) -> str:
        """Return the model name for a light/heavy tier."""
        return self.llm_heavy_model if tier == "heavy" else self.llm_light_model


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-document config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
