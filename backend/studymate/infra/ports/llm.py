from __future__ import annotations

from abc import ABC, abstractmethod


class LLMPort(ABC):
    @abstractmethod
    async def complete(self, prompt: str, *, model: str | None = None) -> str:
        """Send one user message and return the first choice's content."""
