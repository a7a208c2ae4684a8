from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ImageHostPort(ABC):
    @abstractmethod
    async def upload(
        self,
        image_bytes: bytes,
        *,
        filename: str | None,
        content_type: str | None,
        caption: str,
    ) -> dict[str, Any]:
        """Upload one image and return the host's JSON reply untouched."""
