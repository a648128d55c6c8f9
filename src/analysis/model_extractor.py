# src/analysis/model_extractor.py — v1
"""Tier 2 structure extraction backed by an external language model.

The model reply is untrusted: it is parsed into a strict schema and any
deviation raises ModelResponseError, which the structure extractor turns
into a Tier 1 fallback.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from narragraph.analysis.complexity import classify_complexity
from narragraph.analysis.language_detector import detect_language
from narragraph.analysis.prompts import MAX_LABEL_CHARS, SYSTEM_PROMPT, build_extraction_prompt
from narragraph.config.settings import Settings
from narragraph.core.models import DiagramAnalysis, DiagramEdge, DiagramNode, DiagramType
from narragraph.llm.base_client import BaseLLMClient
from narragraph.llm.models import Message
from narragraph.llm.retry import LLMRetryExhausted, build_retry_configs, with_retry

logger = logging.getLogger(__name__)

_TYPE_VOCABULARY: dict[str, DiagramType] = {
    "flowchart": "flow",
    "flow": "flow",
    "process": "flow",
    "mindmap": "tree",
    "orgchart": "tree",
    "tree": "tree",
    "hierarchy": "tree",
    "timeline": "timeline",
    "matrix": "matrix",
    "table": "matrix",
    "comparison": "matrix",
    "cycle": "cycle",
    "loop": "cycle",
}

_FENCE_LINE = re.compile(r"^\s*```[\w-]*\s*$", re.MULTILINE)


class ModelResponseError(ValueError):
    """Model reply could not be parsed into a diagram payload."""


class PayloadNode(BaseModel):
    id: StrictStr = Field(min_length=1)
    label: StrictStr


class PayloadEdge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: StrictStr = Field(alias="from")
    to: StrictStr
    label: StrictStr | None = None


class ModelDiagramPayload(BaseModel):
    """Strict schema for the JSON object returned by the model."""

    title: StrictStr | None = None
    type: StrictStr
    nodes: list[PayloadNode] = Field(min_length=1)
    edges: list[PayloadEdge] = Field(default_factory=list)

    @field_validator("edges", mode="before")
    @classmethod
    def edges_default_to_empty(cls, v: Any) -> Any:
        """A missing or non-list ``edges`` becomes empty; mistyped items fail validation."""
        if not isinstance(v, list):
            return []
        return v


def map_model_type(raw: str) -> DiagramType:
    """Map the model's diagram vocabulary onto DiagramType (default flow)."""
    return _TYPE_VOCABULARY.get(raw.strip().lower(), "flow")


def parse_model_response(content: str) -> ModelDiagramPayload:
    """Extract and validate the first JSON object in a model reply.

    Raises:
        ModelResponseError: No JSON object, invalid JSON or schema mismatch.
    """
    text = _FENCE_LINE.sub("", content).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ModelResponseError("No JSON object in model response")

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ModelResponseError(f"Invalid JSON in model response: {e}") from e

    if not isinstance(data, dict):
        raise ModelResponseError("Model response is not a JSON object")

    try:
        return ModelDiagramPayload.model_validate(data)
    except ValidationError as e:
        raise ModelResponseError(
            f"Model response failed schema validation ({e.error_count()} errors)"
        ) from e


class ModelBackedExtractor:
    """Model-backed extractor (Tier 2).

    Args:
        clients: A single client used for every tier, or a mapping of
            tier name ("light", "heavy") to client.
        settings: Application settings.
    """

    def __init__(
        self,
        clients: BaseLLMClient | Mapping[str, BaseLLMClient],
        settings: Settings,
    ) -> None:
        if not isinstance(clients, Mapping):
            clients = {"light": clients, "heavy": clients}
        if not clients:
            raise ValueError("ModelBackedExtractor needs at least one client")
        self._clients = dict(clients)
        self._settings = settings
        self._retry_configs = build_retry_configs(settings.model_max_retries)

    def select_tier(self, text: str) -> str:
        """Pick the model tier from text complexity (medium follows settings)."""
        assessment = classify_complexity(text)
        return assessment.recommended_tier or self._settings.medium_complexity_tier

    async def extract(
        self,
        text: str,
        preferred_language: str | None = None,
    ) -> DiagramAnalysis:
        """Run model extraction, falling back from heavy to light on exhaustion.

        Raises:
            LLMRetryExhausted: Every eligible tier exhausted its retries.
            ModelResponseError: The reply could not be parsed.
        """
        s = self._settings
        tier = self.select_tier(text)
        language = detect_language(
            text,
            fallback=s.language_fallback,
            floor=s.language_confidence_floor,
            preferred=preferred_language,
        )
        prompt = build_extraction_prompt(
            text,
            language.language,
            max_nodes=s.max_diagram_nodes,
            char_limit=s.model_input_char_limit,
        )
        messages = [Message(role="user", content=prompt)]

        last_error: LLMRetryExhausted | None = None
        for candidate in self._tier_chain(tier):
            client = self._client_for(candidate)
            try:
                response = await with_retry(
                    client.complete,
                    messages,
                    system=SYSTEM_PROMPT,
                    max_tokens=s.llm_max_output_tokens,
                    temperature=s.llm_temperature,
                    operation=f"structure_extraction[{candidate}]",
                    retry_configs=self._retry_configs,
                )
            except LLMRetryExhausted as e:
                logger.warning("Tier 2 %s model exhausted: %s", candidate, e)
                last_error = e
                continue

            payload = parse_model_response(response.content)
            analysis = self._to_analysis(payload)
            logger.info(
                "Tier 2 extraction (%s, lang=%s): %s with %d nodes, %d edges",
                candidate, language.language, analysis.type,
                len(analysis.nodes), len(analysis.edges),
            )
            return analysis

        assert last_error is not None
        raise last_error

    def _tier_chain(self, tier: str) -> list[str]:
        if tier == "heavy" and self._client_for("heavy") is not self._client_for("light"):
            return ["heavy", "light"]
        return [tier]

    def _client_for(self, tier: str) -> BaseLLMClient:
        return self._clients.get(tier) or next(iter(self._clients.values()))

    def _to_analysis(self, payload: ModelDiagramPayload) -> DiagramAnalysis:
        nodes: list[DiagramNode] = []
        seen: set[str] = set()
        for item in payload.nodes:
            if item.id in seen:
                continue
            seen.add(item.id)
            nodes.append(DiagramNode(id=item.id, label=_truncate(item.label)))
            if len(nodes) >= self._settings.max_diagram_nodes:
                break

        edges = [DiagramEdge(from_=e.from_, to=e.to, label=e.label) for e in payload.edges]
        title = payload.title or "untitled"
        return DiagramAnalysis(
            type=map_model_type(payload.type),
            confidence=self._settings.model_confidence,
            nodes=nodes,
            edges=edges,
            reasoning=f"Model extraction: '{title}' as {payload.type}",
            source="model",
        )


def _truncate(label: str) -> str:
    if len(label) <= MAX_LABEL_CHARS:
        return label
    return label[: MAX_LABEL_CHARS - 3].rstrip() + "..."
