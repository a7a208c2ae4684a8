from __future__ import annotations

import hashlib
from typing import Any

from studymate.infra.ports.image_host import ImageHostPort


class MockImageHost(ImageHostPort):
    provider_name = "mock"

    async def upload(
        self,
        image_bytes: bytes,
        *,
        filename: str | None,
        content_type: str | None,
        caption: str,
    ) -> dict[str, Any]:
        digest = hashlib.sha1(image_bytes).hexdigest()[:12]
        return {
            "url": f"https://images.invalid/{digest}/{filename or 'image'}",
            "caption": caption,
        }
