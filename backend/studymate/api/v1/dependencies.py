from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from studymate.application.export import AnswerExporter
from studymate.application.services import AccountService, ChatService, ImageUploadService, PaymentService
from studymate.application.sessions import SolverSessionRegistry
from studymate.application.solver import SolverSession
from studymate.core.config import get_settings
from studymate.core.errors import AuthenticationError
from studymate.domain.models import SessionRecord
from studymate.infra.db.store import DatabaseStore
from studymate.infra.image_host.http_host import HttpImageHost
from studymate.infra.image_host.mock import MockImageHost
from studymate.infra.llm.chat_completion import ChatCompletionLLM
from studymate.infra.llm.mock import MockLLM
from studymate.infra.ocr.http_ocr import HttpOCR
from studymate.infra.ocr.mock import MockOCR
from studymate.infra.ports.image_host import ImageHostPort
from studymate.infra.ports.llm import LLMPort
from studymate.infra.ports.ocr import OCRPort

_bearer = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def get_store() -> DatabaseStore:
    return DatabaseStore()


@lru_cache(maxsize=1)
def get_ocr() -> OCRPort:
    settings = get_settings()
    if settings.ocr_backend == "http":
        return HttpOCR(api_url=settings.ocr_api_url, timeout_seconds=settings.http_timeout_seconds)
    return MockOCR()


@lru_cache(maxsize=1)
def get_llm() -> LLMPort:
    settings = get_settings()
    if settings.llm_backend == "http":
        return ChatCompletionLLM(
            api_base=settings.llm_api_base,
            model_name=settings.llm_model,
            timeout_seconds=settings.http_timeout_seconds,
        )
    return MockLLM()


@lru_cache(maxsize=1)
def get_image_host() -> ImageHostPort:
    settings = get_settings()
    if settings.image_host_backend == "http":
        return HttpImageHost(upload_url=settings.image_host_url, timeout_seconds=settings.http_timeout_seconds)
    return MockImageHost()


def build_solver_session() -> SolverSession:
    settings = get_settings()
    return SolverSession(
        ocr=get_ocr(),
        llm=get_llm(),
        exporter=AnswerExporter(
            cards_per_page=settings.export_cards_per_page,
            font_path=settings.export_font_path,
        ),
        answer_policy=settings.premium_answer_policy,  # type: ignore[arg-type]
        model=settings.llm_model if settings.llm_backend == "http" else None,
    )


@lru_cache(maxsize=1)
def get_solver_registry() -> SolverSessionRegistry:
    return SolverSessionRegistry(build_solver_session, max_idle_seconds=get_settings().solver_idle_seconds)


def get_account_service() -> AccountService:
    return AccountService(store=get_store())


def get_payment_service() -> PaymentService:
    settings = get_settings()
    return PaymentService(
        store=get_store(),
        default_price=settings.payment_price,
        default_qr_code_url=settings.payment_qr_code_url,
    )


def get_chat_service() -> ChatService:
    settings = get_settings()
    return ChatService(llm=get_llm(), model=settings.llm_model if settings.llm_backend == "http" else None)


def get_image_upload_service() -> ImageUploadService:
    return ImageUploadService(image_host=get_image_host())


async def provide_account_service() -> AccountService:
    return get_account_service()


async def provide_payment_service() -> PaymentService:
    return get_payment_service()


async def provide_chat_service() -> ChatService:
    return get_chat_service()


async def provide_image_upload_service() -> ImageUploadService:
    return get_image_upload_service()


async def provide_solver_registry() -> SolverSessionRegistry:
    return get_solver_registry()


async def provide_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    service: AccountService = Depends(provide_account_service),
) -> SessionRecord:
    session = service.get_session(credentials.credentials if credentials else None)
    if session is None:
        raise AuthenticationError("Please login to continue")
    return session
