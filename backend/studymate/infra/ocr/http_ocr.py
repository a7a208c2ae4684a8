from __future__ import annotations

import logging

import httpx

from studymate.core.errors import ServiceError
from studymate.infra.ports.ocr import OCRPort

logger = logging.getLogger(__name__)


class HttpOCR(OCRPort):
    provider_name = "http_ocr"

    def __init__(
        self,
        *,
        api_url: str,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url
        self.timeout_seconds = max(3.0, float(timeout_seconds))
        self._transport = transport

    async def extract_text(
        self,
        image_bytes: bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str:
        files = {"image": (filename or "image", image_bytes, content_type or "application/octet-stream")}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                resp = await client.post(self.api_url, files=files)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("OCR request failed: %s", exc)
            raise ServiceError("Failed to process image") from exc

        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise ServiceError("Failed to process image")
        return text
