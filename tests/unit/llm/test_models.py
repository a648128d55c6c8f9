# tests/unit/llm/test_models.py — v1
"""Tests for llm/models.py."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from narragraph.llm.models import LLMResponse, Message


class TestMessage:
    def test_valid(self):
        assert Message(role="user", content="hi").role == "user"

    def test_invalid_role(self):
        with pytest.raises(ValidationError):
            Message(role="tool", content="hi")


class TestLLMResponse:
    def test_defaults(self):
        resp = LLMResponse(content="{}", model="m", provider="google")
        assert resp.input_tokens == 0
        assert resp.raw_response is None
