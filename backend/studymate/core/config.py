from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_ANSWER_POLICIES = {"append", "replace"}
_CARDS_PER_PAGE = {2, 4}


def _load_dotenv() -> None:
    if os.getenv("STUDYMATE_SKIP_DOTENV") == "1":
        return

    env_path = Path(__file__).resolve().parents[2] / ".env"
    if not env_path.exists():
        return

    from dotenv import load_dotenv

    load_dotenv(env_path, override=True)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_non_negative_int(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        return default


def _parse_non_negative_float(value: str | None, default: float = 0.0) -> float:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        return default


def _parse_choice(value: str | None, allowed: set[str], default: str) -> str:
    normalized = (value or "").strip().lower()
    return normalized if normalized in allowed else default


@dataclass(frozen=True)
class Settings:
    env: str
    app_name: str
    cors_origins: list[str]
    database_url: str | None
    ocr_backend: str
    llm_backend: str
    image_host_backend: str
    ocr_api_url: str
    llm_api_base: str
    llm_model: str
    image_host_url: str
    http_timeout_seconds: float
    premium_answer_policy: str
    export_cards_per_page: int
    export_font_path: str | None
    solver_idle_seconds: float
    payment_price: float
    payment_qr_code_url: str | None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_dotenv()

    env = os.getenv("STUDYMATE_ENV", "development")
    cors = os.getenv("STUDYMATE_CORS_ORIGINS", "http://localhost:5173")
    ocr_backend = _parse_choice(os.getenv("STUDYMATE_OCR_BACKEND"), {"http", "mock"}, "mock")
    llm_backend = _parse_choice(os.getenv("STUDYMATE_LLM_BACKEND"), {"http", "mock"}, "mock")
    image_host_backend = _parse_choice(os.getenv("STUDYMATE_IMAGE_HOST_BACKEND"), {"http", "mock"}, "mock")
    http_timeout_seconds = _parse_non_negative_float(os.getenv("STUDYMATE_HTTP_TIMEOUT_SECONDS"), default=60.0) or 60.0
    premium_answer_policy = _parse_choice(os.getenv("STUDYMATE_PREMIUM_ANSWER_POLICY"), _ANSWER_POLICIES, "append")

    cards_per_page = _parse_non_negative_int(os.getenv("STUDYMATE_EXPORT_CARDS_PER_PAGE"), default=4)
    if cards_per_page not in _CARDS_PER_PAGE:
        cards_per_page = 4

    return Settings(
        env=env,
        app_name="StudyMate API",
        cors_origins=_split_csv(cors),
        database_url=os.getenv("DATABASE_URL") or None,
        ocr_backend=ocr_backend,
        llm_backend=llm_backend,
        image_host_backend=image_host_backend,
        ocr_api_url=os.getenv("STUDYMATE_OCR_API_URL", "https://deepak191z-ocr.hf.space/api/ocr"),
        llm_api_base=os.getenv("STUDYMATE_LLM_API_BASE", "https://deepak191z-tst.hf.space/v1"),
        llm_model=os.getenv("STUDYMATE_LLM_MODEL", "gpt-4o-mini"),
        image_host_url=os.getenv(
            "STUDYMATE_IMAGE_HOST_URL",
            "https://deepak191z-fastapi-img-link.hf.space/upload-image",
        ),
        http_timeout_seconds=http_timeout_seconds,
        premium_answer_policy=premium_answer_policy,
        export_cards_per_page=cards_per_page,
        export_font_path=os.getenv("STUDYMATE_EXPORT_FONT_PATH") or None,
        solver_idle_seconds=_parse_non_negative_float(os.getenv("STUDYMATE_SOLVER_IDLE_SECONDS"), default=3600.0),
        payment_price=_parse_non_negative_float(os.getenv("STUDYMATE_PAYMENT_PRICE"), default=99.0),
        payment_qr_code_url=os.getenv("STUDYMATE_PAYMENT_QR_CODE_URL") or None,
    )
