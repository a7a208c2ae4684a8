from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from studymate.core.errors import ConflictError
from studymate.domain.models import (
    PaymentSettingsRecord,
    PaymentTransactionRecord,
    ProfileRecord,
    SessionRecord,
    UserRecord,
)
from studymate.infra.db.models import AuthSessionRow, PaymentSettingsRow, PaymentTransactionRow, ProfileRow, UserRow
from studymate.infra.db.session import get_session_factory
from studymate.utils.ids import new_public_id


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value else datetime.now(timezone.utc).isoformat()


class DatabaseStore:
    """Account, profile and payment rows backed by SQLAlchemy."""

    def __init__(self):
        self._session_factory = get_session_factory()

    @staticmethod
    def _to_profile_record(user: UserRow, profile: ProfileRow | None) -> ProfileRecord:
        if profile is None:
            return ProfileRecord(user_id=user.public_id, email=user.email)
        return ProfileRecord(
            user_id=user.public_id,
            email=user.email,
            phone=profile.phone,
            grade=profile.grade,
            is_premium=bool(profile.is_premium),
        )

    def _find_user(self, db, user_id: str) -> UserRow | None:
        return db.scalar(select(UserRow).where(UserRow.public_id == user_id))

    def create_user(self, *, email: str, password_hash: str, phone: str | None, grade: str | None) -> UserRecord:
        with self._session_factory() as db:
            user = UserRow(public_id=new_public_id("usr_"), email=email, password_hash=password_hash)
            db.add(user)
            try:
                db.flush()
            except IntegrityError as exc:
                db.rollback()
                raise ConflictError("An account with this email already exists") from exc

            db.add(ProfileRow(user_id=user.id, phone=phone, grade=grade, is_premium=False))
            db.commit()
            return UserRecord(user_id=user.public_id, email=user.email)

    def get_user_credentials(self, email: str) -> tuple[UserRecord, str] | None:
        with self._session_factory() as db:
            user = db.scalar(select(UserRow).where(UserRow.email == email))
            if user is None:
                return None
            return UserRecord(user_id=user.public_id, email=user.email), user.password_hash

    def create_session(self, *, user_id: str, access_token: str) -> SessionRecord:
        with self._session_factory() as db:
            user = self._find_user(db, user_id)
            if user is None:
                raise LookupError(f"User {user_id} not found")
            row = AuthSessionRow(token=access_token, user_id=user.id)
            db.add(row)
            db.commit()
            return SessionRecord(
                access_token=row.token,
                user_id=user.public_id,
                email=user.email,
                created_at=_iso(row.created_at),
            )

    def get_session(self, access_token: str) -> SessionRecord | None:
        with self._session_factory() as db:
            row = db.scalar(select(AuthSessionRow).where(AuthSessionRow.token == access_token))
            if row is None:
                return None
            return SessionRecord(
                access_token=row.token,
                user_id=row.user.public_id,
                email=row.user.email,
                created_at=_iso(row.created_at),
            )

    def delete_session(self, access_token: str) -> bool:
        with self._session_factory() as db:
            result = db.execute(delete(AuthSessionRow).where(AuthSessionRow.token == access_token))
            db.commit()
            return (result.rowcount or 0) > 0

    def get_profile(self, user_id: str) -> ProfileRecord | None:
        with self._session_factory() as db:
            user = self._find_user(db, user_id)
            if user is None:
                return None
            return self._to_profile_record(user, user.profile)

    def update_profile(
        self,
        *,
        user_id: str,
        phone: str | None = None,
        grade: str | None = None,
        is_premium: bool | None = None,
    ) -> ProfileRecord | None:
        with self._session_factory() as db:
            user = self._find_user(db, user_id)
            if user is None:
                return None

            profile = user.profile
            if profile is None:
                profile = ProfileRow(user_id=user.id, is_premium=False)
                db.add(profile)

            if phone is not None:
                profile.phone = phone
            if grade is not None:
                profile.grade = grade
            if is_premium is not None:
                profile.is_premium = is_premium

            db.commit()
            return self._to_profile_record(user, profile)

    def get_payment_settings(self) -> PaymentSettingsRecord | None:
        with self._session_factory() as db:
            row = db.scalar(select(PaymentSettingsRow).order_by(PaymentSettingsRow.id).limit(1))
            if row is None:
                return None
            return PaymentSettingsRecord(qr_code_url=row.qr_code_url, price=row.price)

    def save_payment_settings(self, *, qr_code_url: str, price: float) -> PaymentSettingsRecord:
        with self._session_factory() as db:
            row = db.scalar(select(PaymentSettingsRow).order_by(PaymentSettingsRow.id).limit(1))
            if row is None:
                row = PaymentSettingsRow(qr_code_url=qr_code_url, price=price)
                db.add(row)
            else:
                row.qr_code_url = qr_code_url
                row.price = price
            db.commit()
            return PaymentSettingsRecord(qr_code_url=row.qr_code_url, price=row.price)

    def create_payment_transaction(
        self,
        *,
        user_id: str,
        transaction_number: str,
        amount: float,
    ) -> PaymentTransactionRecord:
        with self._session_factory() as db:
            user = self._find_user(db, user_id)
            if user is None:
                raise LookupError(f"User {user_id} not found")

            row = PaymentTransactionRow(
                public_id=new_public_id("txn_"),
                user_id=user.id,
                transaction_number=transaction_number,
                amount=amount,
            )
            db.add(row)
            db.commit()
            return PaymentTransactionRecord(
                transaction_id=row.public_id,
                user_id=user.public_id,
                transaction_number=row.transaction_number,
                amount=row.amount,
                created_at=_iso(row.created_at),
            )

    def list_payment_transactions(self, user_id: str) -> list[PaymentTransactionRecord]:
        with self._session_factory() as db:
            user = self._find_user(db, user_id)
            if user is None:
                return []
            rows = db.scalars(
                select(PaymentTransactionRow)
                .where(PaymentTransactionRow.user_id == user.id)
                .order_by(PaymentTransactionRow.id)
            ).all()
            return [
                PaymentTransactionRecord(
                    transaction_id=row.public_id,
                    user_id=user.public_id,
                    transaction_number=row.transaction_number,
                    amount=row.amount,
                    created_at=_iso(row.created_at),
                )
                for row in rows
            ]
