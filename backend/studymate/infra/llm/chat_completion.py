from __future__ import annotations

import logging

import httpx

from studymate.core.errors import ServiceError
from studymate.infra.ports.llm import LLMPort

logger = logging.getLogger(__name__)


class ChatCompletionLLM(LLMPort):
    """OpenAI-shaped ``/chat/completions`` endpoint, non-streaming."""

    provider_name = "chat_completion"

    def __init__(
        self,
        *,
        api_base: str,
        model_name: str,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.model_name = model_name
        self.timeout_seconds = max(3.0, float(timeout_seconds))
        self._transport = transport

    async def complete(self, prompt: str, *, model: str | None = None) -> str:
        model_name = model or self.model_name
        payload = {
            "messages": [{"role": "user", "content": prompt}],
            "model": model_name,
            "stream": False,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                resp = await client.post(f"{self.api_base}/chat/completions", json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Chat completion connection error: %s", exc)
            raise ServiceError("Failed to connect to chat service") from exc

        if resp.status_code < 200 or resp.status_code >= 300:
            logger.warning("Chat completion returned HTTP %s", resp.status_code)
            raise ServiceError(f"Server error: {resp.status_code}")

        try:
            parsed = resp.json()
        except ValueError as exc:
            raise ServiceError("Chat service returned a non-JSON body") from exc

        choices = parsed.get("choices") if isinstance(parsed, dict) else None
        if not choices:
            raise ServiceError("Chat service response has no choices")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise ServiceError("Chat service response has no content")
        return content
