from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

SolverState = Literal["idle", "uploading", "questions_ready", "answer_pending", "answers_ready"]
SolverView = Literal["upload", "questions", "answers"]
AnswerPolicy = Literal["append", "replace"]
AnswerOutcomeKind = Literal["answered", "pending", "upgrade_required"]
Grade = Literal["10", "11", "12"]

GRADES: tuple[str, ...] = ("10", "11", "12")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Question:
    id: str
    text: str


@dataclass(frozen=True)
class Answer:
    question_id: str
    question_text: str
    answer_text: str
    created_at: str = field(default_factory=_now_iso)


@dataclass(frozen=True)
class ImageInput:
    payload: bytes
    filename: str | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class AnswerOutcome:
    kind: AnswerOutcomeKind
    question_id: str
    answer: Answer | None = None


@dataclass
class QuestionView:
    id: str
    text: str
    loading: bool
    answered: bool
    can_answer: bool


@dataclass
class SolverSnapshot:
    state: SolverState
    view: SolverView
    image_filename: str | None
    questions: list[QuestionView]
    answers: list[Answer]
    last_error: str | None


@dataclass
class UserRecord:
    user_id: str
    email: str


@dataclass
class SessionRecord:
    access_token: str
    user_id: str
    email: str
    created_at: str = field(default_factory=_now_iso)


@dataclass
class ProfileRecord:
    user_id: str
    email: str
    phone: str | None = None
    grade: str | None = None
    is_premium: bool = False


@dataclass
class PaymentSettingsRecord:
    qr_code_url: str
    price: float


@dataclass
class PaymentTransactionRecord:
    transaction_id: str
    user_id: str
    transaction_number: str
    amount: float
    created_at: str = field(default_factory=_now_iso)
