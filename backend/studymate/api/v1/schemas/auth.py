from __future__ import annotations

from pydantic import BaseModel


class SignupRequest(BaseModel):
    email: str
    password: str
    phone: str | None = None
    grade: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    userId: str
    email: str
    createdAt: str


class LogoutResponse(BaseModel):
    ok: bool = True
