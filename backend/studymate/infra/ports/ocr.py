from __future__ import annotations

from abc import ABC, abstractmethod


class OCRPort(ABC):
    @abstractmethod
    async def extract_text(
        self,
        image_bytes: bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str:
        """Return the plain text recognised in one image."""
