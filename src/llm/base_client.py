# src/llm/base_client.py — v1
"""Abstract LLM client interface — the external model capability used by Tier 2."""

from __future__ import annotations

from abc import ABC, abstractmethod

from narragraph.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.1,
    ) -> LLMResponse:
        """Text completion."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, google, ...)."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier this client targets."""
