# src/analysis/prompts.py — v1
"""Localized prompt templates for model-backed structure extraction."""

from __future__ import annotations

SYSTEM_PROMPT = (
    "You convert narrative text into diagram data. "
    "Reply with a single JSON object and nothing else."
)

_TEMPLATE_EN = """You are a data analyst. Analyze the text below and return diagram data as JSON.

Required fields:
- title: string
- type: one of "flowchart" | "mindmap" | "timeline" | "orgchart" | "matrix" | "cycle"
- nodes: array [{{"id": string, "label": string}}, ...]
- edges: array [{{"from": string, "to": string, "label": string (optional)}}, ...]

Rules:
1. No explanations and no code fences.
2. Return valid JSON only.
3. At most {max_nodes} nodes.
4. Labels must be {max_label} characters or fewer.
5. Extract relationships precisely: connectives such as "then", "after that", "because", "leads to" mark dependencies between nodes.
6. Preserve order: sequences and chronology must be expressed as edges.
7. Express hierarchy: for organizations and classifications, point edges from parent to child.

Text:
{text}

JSON:"""

_TEMPLATE_JA = """あなたはデータアナリストです。以下のテキストを分析し、図解データをJSON形式で出力してください。

必須フィールド:
- title: 文字列（タイトル）
- type: "flowchart" | "mindmap" | "timeline" | "orgchart" | "matrix" | "cycle" のいずれか
- nodes: 配列 [{{"id": 文字列, "label": 文字列}}, ...]
- edges: 配列 [{{"from": 文字列, "to": 文字列, "label": 文字列（任意）}}, ...]

重要な指示:
1. 説明文は一切不要です
2. コードブロックも不要です
3. 有効なJSON形式のみを返してください
4. ノードは最大{max_nodes}個まで
5. ラベルは{max_label}文字以内
6. 関係性を正確に抽出してください: 「次に」「その後」「から」「により」などの接続語に注目し、ノード間の依存関係を edges で表現してください
7. 時系列や手順がある場合、edges で順序関係を必ず表現してください
8. 組織図や分類の場合、上位→下位の関係を edges で明確に表現してください

テキスト:
{text}

JSON:"""

TEMPLATES: dict[str, str] = {
    "en": _TEMPLATE_EN,
    "ja": _TEMPLATE_JA,
}

MAX_LABEL_CHARS = 60


def build_extraction_prompt(
    text: str,
    language: str,
    max_nodes: int = 10,
    char_limit: int = 1000,
) -> str:
    """Render the extraction prompt for a language.

    Languages without a dedicated template use the English one.
    """
    template = TEMPLATES.get(language, TEMPLATES["en"])
    return template.format(
        text=text[:char_limit],
        max_nodes=max_nodes,
        max_label=MAX_LABEL_CHARS,
    )
