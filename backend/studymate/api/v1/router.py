from __future__ import annotations

from fastapi import APIRouter, Depends, File, Response, UploadFile

from studymate.api.v1.dependencies import (
    provide_account_service,
    provide_chat_service,
    provide_current_session,
    provide_image_upload_service,
    provide_solver_registry,
)
from studymate.api.v1.schemas.chat import ChatRequest, ChatResponse, ImageUploadResponse
from studymate.api.v1.schemas.solver import (
    AnswerItem,
    AnswerListResponse,
    AnswerOutcomeResponse,
    QuestionItem,
    SolverResetResponse,
    SolverSnapshotResponse,
)
from studymate.application.services import AccountService, ChatService, ImageUploadService
from studymate.application.sessions import SolverSessionRegistry
from studymate.application.solver import SolverSession
from studymate.domain.models import Answer, ImageInput, SessionRecord

router = APIRouter(prefix="/v1", tags=["v1"])

_UPGRADE_MESSAGE = "Upgrade to premium to generate this answer again."


def _answer_item(answer: Answer) -> AnswerItem:
    return AnswerItem(
        questionId=answer.question_id,
        question=answer.question_text,
        answer=answer.answer_text,
        createdAt=answer.created_at,
    )


def _snapshot_response(solver: SolverSession, *, is_premium: bool) -> SolverSnapshotResponse:
    snapshot = solver.snapshot(is_premium=is_premium)
    return SolverSnapshotResponse(
        state=snapshot.state,
        view=snapshot.view,
        imageFilename=snapshot.image_filename,
        isPremium=is_premium,
        questions=[
            QuestionItem(
                id=q.id,
                question=q.text,
                loading=q.loading,
                answered=q.answered,
                canAnswer=q.can_answer,
            )
            for q in snapshot.questions
        ],
        answers=[_answer_item(item) for item in snapshot.answers],
        lastError=snapshot.last_error,
    )


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    session: SessionRecord = Depends(provide_current_session),
    service: ChatService = Depends(provide_chat_service),
):
    reply = await service.send(body.message, reply_to=body.replyTo)
    return ChatResponse(reply=reply)


@router.post("/uploads/images", response_model=ImageUploadResponse)
async def upload_image(
    file: UploadFile = File(...),
    session: SessionRecord = Depends(provide_current_session),
    service: ImageUploadService = Depends(provide_image_upload_service),
):
    payload = await file.read()
    result = await service.upload(
        payload=payload,
        filename=file.filename,
        content_type=file.content_type,
        email=session.email,
    )
    return ImageUploadResponse(caption=session.email, result=result)


@router.get("/solver", response_model=SolverSnapshotResponse)
async def get_solver(
    session: SessionRecord = Depends(provide_current_session),
    accounts: AccountService = Depends(provide_account_service),
    registry: SolverSessionRegistry = Depends(provide_solver_registry),
):
    profile = accounts.get_profile(session.user_id)
    return _snapshot_response(registry.get(session.user_id), is_premium=profile.is_premium)


@router.delete("/solver", response_model=SolverResetResponse)
async def reset_solver(
    session: SessionRecord = Depends(provide_current_session),
    registry: SolverSessionRegistry = Depends(provide_solver_registry),
):
    return SolverResetResponse(closed=registry.discard(session.user_id))


@router.post("/solver/image", response_model=SolverSnapshotResponse)
async def submit_image(
    image: UploadFile = File(...),
    session: SessionRecord = Depends(provide_current_session),
    accounts: AccountService = Depends(provide_account_service),
    registry: SolverSessionRegistry = Depends(provide_solver_registry),
):
    payload = await image.read()
    solver = registry.get(session.user_id)
    await solver.submit_image(ImageInput(payload=payload, filename=image.filename, content_type=image.content_type))
    profile = accounts.get_profile(session.user_id)
    return _snapshot_response(solver, is_premium=profile.is_premium)


@router.post("/solver/questions/{questionId}/answer", response_model=AnswerOutcomeResponse)
async def request_answer(
    questionId: str,
    session: SessionRecord = Depends(provide_current_session),
    accounts: AccountService = Depends(provide_account_service),
    registry: SolverSessionRegistry = Depends(provide_solver_registry),
):
    profile = accounts.get_profile(session.user_id)
    outcome = await registry.get(session.user_id).request_answer(questionId, is_premium=profile.is_premium)
    return AnswerOutcomeResponse(
        outcome=outcome.kind,
        questionId=outcome.question_id,
        answer=_answer_item(outcome.answer) if outcome.answer else None,
        message=_UPGRADE_MESSAGE if outcome.kind == "upgrade_required" else None,
    )


@router.get("/solver/answers", response_model=AnswerListResponse)
async def list_answers(
    session: SessionRecord = Depends(provide_current_session),
    registry: SolverSessionRegistry = Depends(provide_solver_registry),
):
    answers = registry.get(session.user_id).book.answers
    return AnswerListResponse(answers=[_answer_item(item) for item in answers], count=len(answers))


@router.get("/solver/export")
async def export_answers(
    session: SessionRecord = Depends(provide_current_session),
    registry: SolverSessionRegistry = Depends(provide_solver_registry),
):
    result = await registry.get(session.user_id).export_answers()
    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Export-Pages": str(result.page_count),
        },
    )
