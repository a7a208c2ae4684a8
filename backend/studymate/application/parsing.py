"""Turn raw model output into a list of questions.

Models often wrap JSON in a Markdown fence (```json ... ```). The fence is
stripped, the remainder must be strict JSON of the shape
``{"questions": [{"id": ..., "question": ...}, ...]}``, and anything else is
rejected as a whole.
"""

from __future__ import annotations

import json
import re
from typing import Any

from studymate.core.errors import MalformedResponseError
from studymate.domain.models import Question

_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_code_fence(raw: str) -> str:
    text = _LEADING_FENCE.sub("", raw, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def _coerce_id(value: Any) -> str:
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return ""


def parse_questions(raw: str) -> list[Question]:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedResponseError("Model returned an empty response")

    try:
        data = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as exc:
        raise MalformedResponseError("Model response is not valid JSON") from exc

    items = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise MalformedResponseError("Model response has no questions list")
    if not items:
        raise MalformedResponseError("No questions found in the image")

    questions: list[Question] = []
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, dict):
            raise MalformedResponseError("Question entry is not an object")
        question_id = _coerce_id(item.get("id"))
        text = item.get("question")
        if not question_id or not isinstance(text, str):
            raise MalformedResponseError("Question entry is missing id or question text")
        if question_id in seen:
            raise MalformedResponseError(f"Duplicate question id {question_id!r}")
        seen.add(question_id)
        questions.append(Question(id=question_id, text=text.strip()))
    return questions
