from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from studymate.api.v1.dependencies import (
    provide_account_service,
    provide_current_session,
    provide_payment_service,
    provide_solver_registry,
)
from studymate.api.v1.schemas.auth import LoginRequest, LogoutResponse, SessionResponse, SignupRequest
from studymate.api.v1.schemas.payment import (
    PaymentSettingsResponse,
    TransactionCreateRequest,
    TransactionCreateResponse,
    TransactionItem,
    TransactionListResponse,
)
from studymate.api.v1.schemas.profile import ProfilePatchRequest, ProfileResponse
from studymate.application.services import AccountService, PaymentService
from studymate.application.sessions import SolverSessionRegistry
from studymate.domain.models import ProfileRecord, SessionRecord

router = APIRouter(prefix="/v1", tags=["accounts"])


def _session_response(session: SessionRecord) -> SessionResponse:
    return SessionResponse(
        accessToken=session.access_token,
        userId=session.user_id,
        email=session.email,
        createdAt=session.created_at,
    )


def _profile_response(profile: ProfileRecord) -> ProfileResponse:
    return ProfileResponse(
        userId=profile.user_id,
        email=profile.email,
        phone=profile.phone,
        grade=profile.grade,
        isPremium=profile.is_premium,
    )


@router.post("/auth/signup", response_model=SessionResponse)
async def signup(body: SignupRequest, service: AccountService = Depends(provide_account_service)):
    session = service.sign_up(email=body.email, password=body.password, phone=body.phone, grade=body.grade)
    return _session_response(session)


@router.post("/auth/login", response_model=SessionResponse)
async def login(body: LoginRequest, service: AccountService = Depends(provide_account_service)):
    return _session_response(service.sign_in(email=body.email, password=body.password))


@router.post("/auth/logout", response_model=LogoutResponse)
async def logout(
    session: SessionRecord = Depends(provide_current_session),
    service: AccountService = Depends(provide_account_service),
    registry: SolverSessionRegistry = Depends(provide_solver_registry),
):
    registry.discard(session.user_id)
    service.sign_out(session.access_token)
    return LogoutResponse()


@router.get("/auth/session", response_model=SessionResponse)
async def get_session(session: SessionRecord = Depends(provide_current_session)):
    return _session_response(session)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    session: SessionRecord = Depends(provide_current_session),
    service: AccountService = Depends(provide_account_service),
):
    return _profile_response(service.get_profile(session.user_id))


@router.patch("/profile", response_model=ProfileResponse)
async def patch_profile(
    body: ProfilePatchRequest,
    session: SessionRecord = Depends(provide_current_session),
    service: AccountService = Depends(provide_account_service),
):
    profile = service.update_profile(user_id=session.user_id, phone=body.phone, grade=body.grade)
    return _profile_response(profile)


@router.get("/payments/settings", response_model=PaymentSettingsResponse)
async def get_payment_settings(
    session: SessionRecord = Depends(provide_current_session),
    service: PaymentService = Depends(provide_payment_service),
):
    settings = service.get_settings()
    if settings is None:
        raise HTTPException(status_code=404, detail="Failed to load payment information")
    return PaymentSettingsResponse(qrCodeUrl=settings.qr_code_url, price=settings.price)


@router.post("/payments/transactions", response_model=TransactionCreateResponse)
async def create_transaction(
    body: TransactionCreateRequest,
    session: SessionRecord = Depends(provide_current_session),
    service: PaymentService = Depends(provide_payment_service),
):
    record = service.submit_transaction(user_id=session.user_id, transaction_number=body.transactionNumber)
    return TransactionCreateResponse(
        transactionId=record.transaction_id,
        transactionNumber=record.transaction_number,
        amount=record.amount,
        createdAt=record.created_at,
    )


@router.get("/payments/transactions", response_model=TransactionListResponse)
async def list_transactions(
    session: SessionRecord = Depends(provide_current_session),
    service: PaymentService = Depends(provide_payment_service),
):
    return TransactionListResponse(
        items=[
            TransactionItem(
                transactionId=record.transaction_id,
                transactionNumber=record.transaction_number,
                amount=record.amount,
                createdAt=record.created_at,
            )
            for record in service.list_transactions(session.user_id)
        ]
    )
