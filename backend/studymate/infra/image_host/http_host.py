from __future__ import annotations

import logging
from typing import Any

import httpx

from studymate.core.errors import ServiceError
from studymate.infra.ports.image_host import ImageHostPort

logger = logging.getLogger(__name__)


class HttpImageHost(ImageHostPort):
    provider_name = "http_image_host"

    def __init__(
        self,
        *,
        upload_url: str,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.upload_url = upload_url
        self.timeout_seconds = max(3.0, float(timeout_seconds))
        self._transport = transport

    async def upload(
        self,
        image_bytes: bytes,
        *,
        filename: str | None,
        content_type: str | None,
        caption: str,
    ) -> dict[str, Any]:
        files = {"file": (filename or "image", image_bytes, content_type or "application/octet-stream")}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                resp = await client.post(
                    self.upload_url,
                    files=files,
                    data={"caption": caption},
                    headers={"accept": "application/json"},
                )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Image upload failed: %s", exc)
            raise ServiceError("Upload failed") from exc

        # The host's reply is opaque; non-object bodies are wrapped as is.
        return data if isinstance(data, dict) else {"result": data}
