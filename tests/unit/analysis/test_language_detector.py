# tests/unit/analysis/test_language_detector.py — v1
"""Tests for analysis/language_detector.py."""

from __future__ import annotations

import pytest

from narragraph.analysis.language_detector import detect_language


class TestDetectLanguage:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("The system is ready and the data is in the queue for the team.", "en"),
            ("Le système est prêt et la file est dans le centre pour les équipes.", "fr"),
            ("Der Server ist bereit und die Daten sind in der Warteschlange.", "de"),
            ("まず、ユーザー入力を収集します。次に検証します。", "ja"),
            ("首先收集用户输入然后验证数据", "zh"),
            ("먼저 사용자 입력을 수집합니다", "ko"),
        ],
    )
    def test_detects(self, text, expected):
        result = detect_language(text)
        assert result.language == expected
        assert not result.is_fallback

    def test_weak_signal_falls_back(self):
        result = detect_language("xyzzy plugh frobnicate", fallback="en")
        assert result.language == "en"
        assert result.is_fallback

    def test_custom_fallback(self):
        assert detect_language("12345", fallback="ja").language == "ja"

    def test_preferred_language_skips_detection(self):
        result = detect_language("The data is in the queue.", preferred="ja")
        assert result.language == "ja"
        assert result.confidence == 1.0

    def test_only_first_500_chars_inspected(self):
        text = "x " * 300 + "まず、ユーザー入力を収集します。" * 5
        result = detect_language(text, fallback="en")
        assert result.is_fallback
        assert result.language == "en"
