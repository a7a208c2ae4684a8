from __future__ import annotations

from pydantic import BaseModel


class ProfileResponse(BaseModel):
    userId: str
    email: str
    phone: str | None = None
    grade: str | None = None
    isPremium: bool = False


class ProfilePatchRequest(BaseModel):
    phone: str | None = None
    grade: str | None = None
