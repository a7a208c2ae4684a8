"""AI solver pipeline: image -> OCR -> questions -> per-question answers.

One ``SolverSession`` holds the in-memory state of a single user's solver
screen. Network calls suspend the event loop; state is mutated only after a
call succeeds, except for loading flags which are always cleared.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from studymate.application.answers import AnswerBook
from studymate.application.export import AnswerExporter, ExportResult
from studymate.application.parsing import parse_questions
from studymate.application.prompts import build_answer_prompt, build_extraction_prompt
from studymate.core.errors import (
    InputValidationError,
    NoAnswersError,
    SolverBusyError,
    StaleResultError,
    StudyMateError,
    UnknownQuestionError,
)
from studymate.domain.models import (
    Answer,
    AnswerOutcome,
    AnswerPolicy,
    ImageInput,
    Question,
    QuestionView,
    SolverSnapshot,
    SolverState,
    SolverView,
)
from studymate.infra.ports.llm import LLMPort
from studymate.infra.ports.ocr import OCRPort

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SolverSession:
    def __init__(
        self,
        *,
        ocr: OCRPort,
        llm: LLMPort,
        exporter: AnswerExporter | None = None,
        answer_policy: AnswerPolicy = "append",
        model: str | None = None,
    ):
        self.ocr = ocr
        self.llm = llm
        self.exporter = exporter or AnswerExporter()
        self.model = model
        self.book = AnswerBook(policy=answer_policy)
        self.questions: list[Question] = []
        self.image_filename: str | None = None
        self.view: SolverView = "upload"
        self.last_error: str | None = None
        self._uploading = False
        self._epoch = 0
        self._tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> SolverState:
        if self._uploading:
            return "uploading"
        if not self.questions:
            return "idle"
        if self.book.any_loading():
            return "answer_pending"
        if self.book.answers:
            return "answers_ready"
        return "questions_ready"

    def find_question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    @property
    def busy(self) -> bool:
        return bool(self._tasks)

    def can_answer(self, question_id: str, is_premium: bool) -> bool:
        return self.book.can_answer(question_id, is_premium)

    async def _guarded(self, call: Awaitable[T]) -> T:
        """Await ``call`` as a tracked task; drop its result if the epoch moved on."""
        epoch = self._epoch
        task = asyncio.ensure_future(call)
        self._tasks.add(task)
        try:
            result = await task
        except asyncio.CancelledError:
            if task.cancelled() and epoch != self._epoch:
                raise StaleResultError() from None
            raise
        finally:
            self._tasks.discard(task)
        if epoch != self._epoch:
            raise StaleResultError()
        return result

    def _fail(self, exc: Exception) -> None:
        self.last_error = exc.message if isinstance(exc, StudyMateError) else str(exc)

    async def submit_image(self, image: ImageInput | None) -> list[Question]:
        if image is None or not image.payload:
            raise InputValidationError("Please select an image to upload")
        if image.content_type and not image.content_type.startswith("image/"):
            raise InputValidationError("Only image files are supported")
        if self._uploading:
            raise SolverBusyError()

        self._uploading = True
        self.last_error = None
        epoch = self._epoch
        try:
            text = await self._guarded(
                self.ocr.extract_text(image.payload, filename=image.filename, content_type=image.content_type)
            )
            logger.info("OCR returned %d characters for %s", len(text), image.filename or "image")
            raw = await self._guarded(self.llm.complete(build_extraction_prompt(text), model=self.model))
            questions = parse_questions(raw)
        except StaleResultError:
            raise
        except StudyMateError as exc:
            logger.warning("Question extraction failed: %s", exc.message)
            self._fail(exc)
            raise
        finally:
            if epoch == self._epoch:
                self._uploading = False

        self._epoch += 1
        self.book.clear()
        self.questions = questions
        self.image_filename = image.filename
        self.view = "questions"
        logger.info("Extracted %d questions", len(questions))
        return list(questions)

    async def request_answer(self, question_id: str, *, is_premium: bool) -> AnswerOutcome:
        question = self.find_question(question_id)
        if question is None:
            raise UnknownQuestionError(f"Question {question_id} not found")
        if self.book.is_loading(question_id):
            return AnswerOutcome(kind="pending", question_id=question_id)
        if not self.can_answer(question_id, is_premium):
            return AnswerOutcome(kind="upgrade_required", question_id=question_id)

        self.book.mark_loading(question_id)
        self.last_error = None
        epoch = self._epoch
        try:
            text = await self._guarded(self.llm.complete(build_answer_prompt(question.text), model=self.model))
        except StaleResultError:
            raise
        except StudyMateError as exc:
            logger.warning("Answer generation failed for %s: %s", question_id, exc.message)
            self._fail(exc)
            raise
        finally:
            if epoch == self._epoch:
                self.book.clear_loading(question_id)

        answer = Answer(question_id=question.id, question_text=question.text, answer_text=text.strip())
        self.book.record(answer, is_premium=is_premium)
        self.view = "answers"
        return AnswerOutcome(kind="answered", question_id=question_id, answer=answer)

    async def export_answers(self) -> ExportResult:
        answers = self.book.answers
        if not answers:
            raise NoAnswersError()
        # Rendering is CPU bound; it works on a copy of the answers.
        return await asyncio.to_thread(self.exporter.render, answers)

    def snapshot(self, *, is_premium: bool) -> SolverSnapshot:
        return SolverSnapshot(
            state=self.state,
            view=self.view,
            image_filename=self.image_filename,
            questions=[
                QuestionView(
                    id=q.id,
                    text=q.text,
                    loading=self.book.is_loading(q.id),
                    answered=self.book.has_answer(q.id),
                    can_answer=self.can_answer(q.id, is_premium) and not self.book.is_loading(q.id),
                )
                for q in self.questions
            ],
            answers=self.book.answers,
            last_error=self.last_error,
        )

    def reset(self) -> None:
        self._epoch += 1
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._uploading = False
        self.book.clear()
        self.questions = []
        self.image_filename = None
        self.view = "upload"
        self.last_error = None

    close = reset
