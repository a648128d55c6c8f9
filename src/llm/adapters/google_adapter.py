# src/llm/adapters/google_adapter.py — v1
"""Google Gemini adapter implementing BaseLLMClient.

Uses the google-generativeai SDK with JSON response mime type, matching
the structured output the extraction prompt asks for.
"""

from __future__ import annotations

import time
from typing import Any

from narragraph.llm.base_client import BaseLLMClient
from narragraph.llm.models import LLMResponse, Message


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(self, model: str = "gemini-2.5-flash", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.1,
    ) -> LLMResponse:
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model, system_instruction=system)

        gen_config: dict[str, Any] = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
            "response_mime_type": "application/json",
        }

        contents = []
        for m in messages:
            role = "model" if m.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": m.content}]})

        t0 = time.monotonic()
        resp = await model.generate_content_async(contents, generation_config=gen_config)
        latency = int((time.monotonic() - t0) * 1000)

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=resp.text or "",
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def model_name(self) -> str:
        return self._model
