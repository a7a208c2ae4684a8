import asyncio
import json

from studymate.application.parsing import parse_questions
from studymate.infra.image_host.mock import MockImageHost
from studymate.infra.llm.mock import MockLLM
from studymate.infra.ocr.mock import MockOCR


def test_mock_ocr_llm_and_image_host_work_together():
    text = asyncio.run(MockOCR().extract_text(b"img-bytes"))
    assert text.startswith("1. What is 2 + 2?")

    llm = MockLLM()
    raw = asyncio.run(llm.complete(f"Find the questions.\n\nExtracted text:\n{text}"))
    questions = parse_questions(raw)
    assert [q.id for q in questions] == ["Q1", "Q2"]

    answer = asyncio.run(llm.complete("Question: What is 2 + 2?\n\nSolve it."))
    assert "What is 2 + 2?" in answer
    assert len(llm.prompts) == 2

    uploaded = asyncio.run(MockImageHost().upload(b"img", filename="a.png", content_type="image/png", caption="c"))
    assert uploaded["caption"] == "c"
    assert json.dumps(uploaded)
