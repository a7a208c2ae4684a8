from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

from studymate.core.errors import ServiceError
from studymate.infra.ports.llm import LLMPort
from studymate.infra.ports.ocr import OCRPort

QUESTIONS_REPLY = "```json\n" + json.dumps(
    {
        "questions": [
            {"id": "Q1", "question": "2+2=?"},
            {"id": "Q2", "question": "Solve $x^2 = 9$"},
        ]
    }
) + "\n```"


class StubOCR(OCRPort):
    def __init__(
        self,
        text: str = "1. 2+2=?\n2. Solve x^2 = 9",
        fail: bool = False,
        gate: asyncio.Event | None = None,
    ):
        self.text = text
        self.fail = fail
        self.gate = gate
        self.calls = 0

    async def extract_text(self, image_bytes, *, filename=None, content_type=None) -> str:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ServiceError("Failed to process image")
        return self.text


class StubLLM(LLMPort):
    """Replies with ``extraction`` for extraction prompts and ``answer(prompt)`` otherwise."""

    def __init__(
        self,
        extraction: str = QUESTIONS_REPLY,
        answer: Callable[[str], str] | None = None,
        gate: asyncio.Event | None = None,
    ):
        self.extraction = extraction
        self.answer = answer or (lambda prompt: f"Answer #{len(self.answer_prompts)}")
        self.gate = gate
        self.extraction_prompts: list[str] = []
        self.answer_prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.extraction_prompts) + len(self.answer_prompts)

    async def complete(self, prompt: str, *, model: str | None = None) -> str:
        if "Extracted text:" in prompt:
            self.extraction_prompts.append(prompt)
            return self.extraction
        self.answer_prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        return self.answer(prompt)


def failing_answer(prompt: str) -> str:
    raise ServiceError("Server error: 503")
