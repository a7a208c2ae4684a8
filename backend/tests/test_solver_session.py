from __future__ import annotations

import asyncio

import pytest

from studymate.application.solver import SolverSession
from studymate.core.errors import (
    InputValidationError,
    MalformedResponseError,
    NoAnswersError,
    ServiceError,
    SolverBusyError,
    StaleResultError,
    UnknownQuestionError,
)
from studymate.domain.models import ImageInput
from tests.stubs import StubLLM, StubOCR, failing_answer

IMAGE = ImageInput(payload=b"\x89PNG fake", filename="sheet.png", content_type="image/png")


def _session(ocr=None, llm=None, policy="append") -> SolverSession:
    return SolverSession(ocr=ocr or StubOCR(), llm=llm or StubLLM(), answer_policy=policy)


def test_submit_image_extracts_questions_and_moves_to_questions_ready():
    ocr = StubOCR(text="1. 2+2=?")
    llm = StubLLM()
    session = _session(ocr, llm)
    assert session.state == "idle"

    questions = asyncio.run(session.submit_image(IMAGE))

    assert [q.id for q in questions] == ["Q1", "Q2"]
    assert session.state == "questions_ready"
    assert session.view == "questions"
    assert session.image_filename == "sheet.png"
    assert ocr.calls == 1
    assert "1. 2+2=?" in llm.extraction_prompts[0]
    assert '"questions"' in llm.extraction_prompts[0]


@pytest.mark.parametrize(
    "image",
    [
        None,
        ImageInput(payload=b""),
        ImageInput(payload=b"%PDF", content_type="application/pdf"),
    ],
)
def test_invalid_image_is_rejected_before_any_network_call(image):
    ocr = StubOCR()
    llm = StubLLM()
    session = _session(ocr, llm)

    with pytest.raises(InputValidationError):
        asyncio.run(session.submit_image(image))

    assert ocr.calls == 0
    assert llm.calls == 0
    assert session.state == "idle"


def test_ocr_failure_leaves_previous_questions_untouched():
    session = _session()
    asyncio.run(session.submit_image(IMAGE))
    before = list(session.questions)

    session.ocr = StubOCR(fail=True)
    with pytest.raises(ServiceError):
        asyncio.run(session.submit_image(IMAGE))

    assert session.questions == before
    assert session.state == "questions_ready"
    assert session.last_error == "Failed to process image"


def test_malformed_extraction_reports_format_error():
    session = _session(llm=StubLLM(extraction="not json"))

    with pytest.raises(MalformedResponseError):
        asyncio.run(session.submit_image(IMAGE))

    assert session.questions == []
    assert session.state == "idle"
    assert session.last_error


def test_request_answer_records_answer_with_question_text():
    llm = StubLLM(answer=lambda prompt: "  **4**  ")
    session = _session(llm=llm)
    asyncio.run(session.submit_image(IMAGE))

    outcome = asyncio.run(session.request_answer("Q1", is_premium=False))

    assert outcome.kind == "answered"
    assert outcome.answer is not None
    assert outcome.answer.question_id == "Q1"
    assert outcome.answer.question_text == "2+2=?"
    assert outcome.answer.answer_text == "**4**"
    assert session.state == "answers_ready"
    assert session.view == "answers"
    prompt = llm.answer_prompts[0]
    assert "2+2=?" in prompt
    assert "$$" in prompt and "Markdown" in prompt


def test_free_tier_repeat_is_rejected_without_network_call():
    llm = StubLLM()
    session = _session(llm=llm)
    asyncio.run(session.submit_image(IMAGE))
    asyncio.run(session.request_answer("Q1", is_premium=False))
    calls = llm.calls

    outcome = asyncio.run(session.request_answer("Q1", is_premium=False))

    assert outcome.kind == "upgrade_required"
    assert outcome.answer is None
    assert llm.calls == calls
    assert len(session.book.answers) == 1


def test_premium_regeneration_appends_by_default():
    session = _session()
    asyncio.run(session.submit_image(IMAGE))

    asyncio.run(session.request_answer("Q1", is_premium=True))
    asyncio.run(session.request_answer("Q1", is_premium=True))

    assert [a.question_id for a in session.book.answers] == ["Q1", "Q1"]


def test_premium_regeneration_replaces_under_replace_policy():
    session = _session(policy="replace")
    asyncio.run(session.submit_image(IMAGE))

    asyncio.run(session.request_answer("Q1", is_premium=True))
    second = asyncio.run(session.request_answer("Q1", is_premium=True))

    assert session.book.answers == [second.answer]


def test_failed_answer_clears_loading_flag_and_allows_retry():
    llm = StubLLM(answer=failing_answer)
    session = _session(llm=llm)
    asyncio.run(session.submit_image(IMAGE))

    with pytest.raises(ServiceError):
        asyncio.run(session.request_answer("Q1", is_premium=False))

    assert not session.book.is_loading("Q1")
    assert session.book.answers == []
    assert session.can_answer("Q1", is_premium=False)
    assert session.state == "questions_ready"
    assert session.last_error == "Server error: 503"


def test_unknown_question_is_rejected():
    session = _session()
    asyncio.run(session.submit_image(IMAGE))

    with pytest.raises(UnknownQuestionError):
        asyncio.run(session.request_answer("Q99", is_premium=True))


def test_duplicate_request_while_pending_does_not_dispatch():
    async def scenario():
        gate = asyncio.Event()
        llm = StubLLM(gate=gate)
        session = _session(llm=llm)
        await session.submit_image(IMAGE)

        first = asyncio.create_task(session.request_answer("Q1", is_premium=True))
        await asyncio.sleep(0)
        assert session.state == "answer_pending"
        assert session.book.is_loading("Q1")

        second = await session.request_answer("Q1", is_premium=True)
        assert second.kind == "pending"

        other = asyncio.create_task(session.request_answer("Q2", is_premium=True))
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(first, other)
        return session, llm, results

    session, llm, results = asyncio.run(scenario())

    assert [r.kind for r in results] == ["answered", "answered"]
    assert len(llm.answer_prompts) == 2
    assert not session.book.any_loading()
    assert sorted(a.question_id for a in session.book.answers) == ["Q1", "Q2"]


def test_reset_discards_in_flight_answer():
    async def scenario():
        gate = asyncio.Event()
        session = _session(llm=StubLLM(gate=gate))
        await session.submit_image(IMAGE)

        pending = asyncio.create_task(session.request_answer("Q1", is_premium=False))
        await asyncio.sleep(0)
        session.reset()
        with pytest.raises(StaleResultError):
            await pending
        return session

    session = asyncio.run(scenario())

    assert session.state == "idle"
    assert session.view == "upload"
    assert session.book.answers == []
    assert not session.book.any_loading()


def test_new_image_clears_previous_answers_and_gate():
    session = _session()
    asyncio.run(session.submit_image(IMAGE))
    asyncio.run(session.request_answer("Q1", is_premium=False))

    asyncio.run(session.submit_image(IMAGE))

    assert session.book.answers == []
    assert session.can_answer("Q1", is_premium=False)
    assert session.state == "questions_ready"


def test_snapshot_reflects_gate_per_question():
    session = _session()
    asyncio.run(session.submit_image(IMAGE))
    asyncio.run(session.request_answer("Q1", is_premium=False))

    snapshot = session.snapshot(is_premium=False)

    flags = {q.id: (q.answered, q.can_answer) for q in snapshot.questions}
    assert flags == {"Q1": (True, False), "Q2": (False, True)}
    assert snapshot.state == "answers_ready"
    assert len(snapshot.answers) == 1


def test_export_requires_answers():
    session = _session()
    asyncio.run(session.submit_image(IMAGE))

    with pytest.raises(NoAnswersError):
        asyncio.run(session.export_answers())


def test_export_reads_answers_without_mutating_state():
    session = _session()
    asyncio.run(session.submit_image(IMAGE))
    asyncio.run(session.request_answer("Q1", is_premium=False))
    before = session.book.answers

    result = asyncio.run(session.export_answers())

    assert result.content.startswith(b"%PDF")
    assert result.page_count == 1
    assert session.book.answers == before


def test_second_upload_while_uploading_is_rejected():
    async def scenario():
        gate = asyncio.Event()
        ocr = StubOCR(gate=gate)
        session = _session(ocr=ocr)

        first = asyncio.create_task(session.submit_image(IMAGE))
        await asyncio.sleep(0)
        assert session.state == "uploading"

        with pytest.raises(SolverBusyError):
            await session.submit_image(IMAGE)

        gate.set()
        questions = await first
        return session, ocr, questions

    session, ocr, questions = asyncio.run(scenario())

    assert ocr.calls == 1
    assert [q.id for q in questions] == ["Q1", "Q2"]
    assert session.state == "questions_ready"


def test_answer_finishing_after_new_image_is_dropped():
    async def scenario():
        old_gate = asyncio.Event()
        session = _session(llm=StubLLM(gate=old_gate))
        await session.submit_image(IMAGE)

        stale = asyncio.create_task(session.request_answer("Q1", is_premium=False))
        await asyncio.sleep(0)
        assert session.book.is_loading("Q1")

        await session.submit_image(IMAGE)
        assert not session.book.any_loading()

        new_gate = asyncio.Event()
        session.llm = StubLLM(gate=new_gate)
        fresh = asyncio.create_task(session.request_answer("Q1", is_premium=False))
        await asyncio.sleep(0)
        assert session.book.is_loading("Q1")

        old_gate.set()
        with pytest.raises(StaleResultError):
            await stale
        assert session.book.answers == []
        assert session.book.is_loading("Q1")

        new_gate.set()
        outcome = await fresh
        return session, outcome

    session, outcome = asyncio.run(scenario())

    assert outcome.kind == "answered"
    assert [a.question_id for a in session.book.answers] == ["Q1"]
    assert not session.book.any_loading()
