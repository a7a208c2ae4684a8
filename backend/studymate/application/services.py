from __future__ import annotations

import hashlib
import hmac
import logging
import re
import secrets
from typing import Any

from studymate.application.prompts import build_chat_content
from studymate.core.errors import AuthenticationError, InputValidationError
from studymate.domain.models import (
    GRADES,
    PaymentSettingsRecord,
    PaymentTransactionRecord,
    ProfileRecord,
    SessionRecord,
)
from studymate.infra.ports.accounts import AccountStorePort, PaymentStorePort
from studymate.infra.ports.image_host import ImageHostPort
from studymate.infra.ports.llm import LLMPort
from studymate.utils.ids import new_access_token

logger = logging.getLogger(__name__)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MIN_PASSWORD_LENGTH = 6
_PBKDF2_ROUNDS = 260_000


def hash_password(password: str, *, salt: bytes | None = None) -> str:
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS)
    return f"pbkdf2_sha256${_PBKDF2_ROUNDS}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        _, rounds, salt_hex, digest_hex = encoded.split("$")
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
        iterations = int(rounds)
    except ValueError:
        return False
    actual = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(actual, expected)


def _validate_grade(grade: str | None) -> str | None:
    if grade is None:
        return None
    normalized = grade.strip()
    if normalized not in GRADES:
        raise InputValidationError("Please select your class (10, 11 or 12)")
    return normalized


def _normalize_email(email: str) -> str:
    normalized = (email or "").strip().lower()
    if not _EMAIL.match(normalized):
        raise InputValidationError("Please enter a valid email address")
    return normalized


class AccountService:
    def __init__(self, *, store: AccountStorePort):
        self.store = store

    def sign_up(
        self,
        *,
        email: str,
        password: str,
        phone: str | None = None,
        grade: str | None = None,
    ) -> SessionRecord:
        normalized = _normalize_email(email)
        if len(password or "") < _MIN_PASSWORD_LENGTH:
            raise InputValidationError(f"Password must be at least {_MIN_PASSWORD_LENGTH} characters")

        user = self.store.create_user(
            email=normalized,
            password_hash=hash_password(password),
            phone=(phone or "").strip() or None,
            grade=_validate_grade(grade),
        )
        logger.info("Created account %s", user.user_id)
        return self.store.create_session(user_id=user.user_id, access_token=new_access_token())

    def sign_in(self, *, email: str, password: str) -> SessionRecord:
        if not (email or "").strip() or not password:
            raise InputValidationError("Email and password are required")

        found = self.store.get_user_credentials(email.strip().lower())
        if found is None or not verify_password(password, found[1]):
            raise AuthenticationError("Invalid email or password")

        user, _ = found
        return self.store.create_session(user_id=user.user_id, access_token=new_access_token())

    def get_session(self, access_token: str | None) -> SessionRecord | None:
        if not access_token:
            return None
        return self.store.get_session(access_token)

    def sign_out(self, access_token: str) -> bool:
        return self.store.delete_session(access_token)

    def get_profile(self, user_id: str) -> ProfileRecord:
        profile = self.store.get_profile(user_id)
        if profile is None:
            raise AuthenticationError("Account no longer exists")
        return profile

    def update_profile(self, *, user_id: str, phone: str | None = None, grade: str | None = None) -> ProfileRecord:
        profile = self.store.update_profile(
            user_id=user_id,
            phone=phone.strip() if phone is not None else None,
            grade=_validate_grade(grade),
        )
        if profile is None:
            raise AuthenticationError("Account no longer exists")
        return profile


class PaymentService:
    def __init__(self, *, store: PaymentStorePort, default_price: float, default_qr_code_url: str | None = None):
        self.store = store
        self.default_price = default_price
        self.default_qr_code_url = default_qr_code_url

    def get_settings(self) -> PaymentSettingsRecord | None:
        settings = self.store.get_payment_settings()
        if settings is None and self.default_qr_code_url:
            return PaymentSettingsRecord(qr_code_url=self.default_qr_code_url, price=self.default_price)
        return settings

    def ensure_settings(self) -> PaymentSettingsRecord | None:
        """Persist the configured defaults when no payment settings are stored yet."""
        settings = self.store.get_payment_settings()
        if settings is None and self.default_qr_code_url:
            settings = self.store.save_payment_settings(
                qr_code_url=self.default_qr_code_url,
                price=self.default_price,
            )
            logger.info("Seeded payment settings at price %s", settings.price)
        return settings

    def submit_transaction(self, *, user_id: str, transaction_number: str) -> PaymentTransactionRecord:
        number = (transaction_number or "").strip()
        if not number:
            raise InputValidationError("Transaction number is required")

        settings = self.get_settings()
        amount = settings.price if settings else self.default_price
        record = self.store.create_payment_transaction(
            user_id=user_id,
            transaction_number=number,
            amount=amount,
        )
        # Verification happens out of band; premium is granted optimistically.
        self.store.update_profile(user_id=user_id, is_premium=True)
        logger.info("Recorded payment %s for %s", record.transaction_id, user_id)
        return record

    def list_transactions(self, user_id: str) -> list[PaymentTransactionRecord]:
        return self.store.list_payment_transactions(user_id)


class ChatService:
    def __init__(self, *, llm: LLMPort, model: str | None = None):
        self.llm = llm
        self.model = model

    async def send(self, content: str, *, reply_to: str | None = None) -> str:
        if not (content or "").strip():
            raise InputValidationError("Message cannot be empty")
        return await self.llm.complete(build_chat_content(content.strip(), reply_to), model=self.model)


class ImageUploadService:
    def __init__(self, *, image_host: ImageHostPort):
        self.image_host = image_host

    async def upload(
        self,
        *,
        payload: bytes,
        filename: str | None,
        content_type: str | None,
        email: str,
    ) -> dict[str, Any]:
        if not payload:
            raise InputValidationError("Please select an image to upload")
        if content_type and not content_type.startswith("image/"):
            raise InputValidationError("Only image files are supported")
        return await self.image_host.upload(payload, filename=filename, content_type=content_type, caption=email)
