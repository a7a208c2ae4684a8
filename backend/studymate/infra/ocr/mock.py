from __future__ import annotations

from studymate.infra.ports.ocr import OCRPort


class MockOCR(OCRPort):
    provider_name = "mock"

    async def extract_text(
        self,
        image_bytes: bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str:
        size_hint = max(1, len(image_bytes) // 256)
        return "\n".join(
            [
                "1. What is 2 + 2?",
                f"2. Solve for x: x^2 = {4 * size_hint}",
            ]
        )
