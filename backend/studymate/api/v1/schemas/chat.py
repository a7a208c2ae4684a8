from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str
    replyTo: str | None = None


class ChatResponse(BaseModel):
    reply: str


class ImageUploadResponse(BaseModel):
    caption: str
    result: dict[str, Any] = Field(default_factory=dict)
