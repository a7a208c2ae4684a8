from __future__ import annotations

from typing import Protocol

from studymate.domain.models import (
    PaymentSettingsRecord,
    PaymentTransactionRecord,
    ProfileRecord,
    SessionRecord,
    UserRecord,
)


class AccountStorePort(Protocol):
    def create_user(self, *, email: str, password_hash: str, phone: str | None, grade: str | None) -> UserRecord:
        ...

    def get_user_credentials(self, email: str) -> tuple[UserRecord, str] | None:
        ...

    def create_session(self, *, user_id: str, access_token: str) -> SessionRecord:
        ...

    def get_session(self, access_token: str) -> SessionRecord | None:
        ...

    def delete_session(self, access_token: str) -> bool:
        ...

    def get_profile(self, user_id: str) -> ProfileRecord | None:
        ...

    def update_profile(
        self,
        *,
        user_id: str,
        phone: str | None = None,
        grade: str | None = None,
        is_premium: bool | None = None,
    ) -> ProfileRecord | None:
        ...


class PaymentStorePort(Protocol):
    def get_payment_settings(self) -> PaymentSettingsRecord | None:
        ...

    def save_payment_settings(self, *, qr_code_url: str, price: float) -> PaymentSettingsRecord:
        ...

    def create_payment_transaction(
        self,
        *,
        user_id: str,
        transaction_number: str,
        amount: float,
    ) -> PaymentTransactionRecord:
        ...

    def list_payment_transactions(self, user_id: str) -> list[PaymentTransactionRecord]:
        ...

    def update_profile(
        self,
        *,
        user_id: str,
        phone: str | None = None,
        grade: str | None = None,
        is_premium: bool | None = None,
    ) -> ProfileRecord | None:
        ...
