from __future__ import annotations

import json
import re

from studymate.infra.ports.llm import LLMPort

_QUESTION_LINE = re.compile(r"^\s*(?:Q?\d+[.)]|[-*])\s*(.+)$")


class MockLLM(LLMPort):
    provider_name = "mock"
    model_name = "mock-llm-v1"

    def __init__(self):
        self.prompts: list[str] = []

    async def complete(self, prompt: str, *, model: str | None = None) -> str:
        self.prompts.append(prompt)
        if "Extracted text:" in prompt:
            return self._extraction_reply(prompt)
        if "Question:" in prompt:
            question = prompt.split("Question:", 1)[1].strip().splitlines()[0]
            return f"**Answer** to {question}\n\n$$x = 4$$"
        return f"[mock] {prompt[:80]}"

    @staticmethod
    def _extraction_reply(prompt: str) -> str:
        text = prompt.split("Extracted text:", 1)[1]
        lines = [line for line in text.strip().splitlines() if line.strip()]
        questions = []
        for line in lines:
            match = _QUESTION_LINE.match(line)
            body = (match.group(1) if match else line).strip()
            if body:
                questions.append({"id": f"Q{len(questions) + 1}", "question": body})
        if not questions:
            questions.append({"id": "Q1", "question": "[mock] question"})
        return "```json\n" + json.dumps({"questions": questions}) + "\n```"
