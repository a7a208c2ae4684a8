from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

SolverState = Literal["idle", "uploading", "questions_ready", "answer_pending", "answers_ready"]
SolverView = Literal["upload", "questions", "answers"]
AnswerOutcomeKind = Literal["answered", "pending", "upgrade_required"]


class QuestionItem(BaseModel):
    id: str
    question: str
    loading: bool = False
    answered: bool = False
    canAnswer: bool = True


class AnswerItem(BaseModel):
    questionId: str
    question: str
    answer: str
    createdAt: str


class SolverSnapshotResponse(BaseModel):
    state: SolverState
    view: SolverView
    imageFilename: str | None = None
    isPremium: bool = False
    questions: list[QuestionItem] = Field(default_factory=list)
    answers: list[AnswerItem] = Field(default_factory=list)
    lastError: str | None = None


class AnswerOutcomeResponse(BaseModel):
    outcome: AnswerOutcomeKind
    questionId: str
    answer: AnswerItem | None = None
    message: str | None = None


class AnswerListResponse(BaseModel):
    answers: list[AnswerItem]
    count: int


class SolverResetResponse(BaseModel):
    ok: bool = True
    closed: bool = False
