from __future__ import annotations

import logging
import time
from collections.abc import Callable

from studymate.application.solver import SolverSession

logger = logging.getLogger(__name__)


class SolverSessionRegistry:
    """In-memory solver sessions, one per signed-in user.

    Sessions untouched for ``max_idle_seconds`` are closed the next time the
    registry is used, unless a network call is still running for them. A
    non-positive limit keeps sessions until logout or shutdown.
    """

    def __init__(
        self,
        factory: Callable[[], SolverSession],
        *,
        max_idle_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._max_idle_seconds = max_idle_seconds
        self._clock = clock
        self._sessions: dict[str, SolverSession] = {}
        self._last_seen: dict[str, float] = {}

    def get(self, user_id: str) -> SolverSession:
        self.prune_idle(keep=user_id)
        session = self._sessions.get(user_id)
        if session is None:
            session = self._factory()
            self._sessions[user_id] = session
            logger.info("Opened solver session for %s", user_id)
        self._last_seen[user_id] = self._clock()
        return session

    def prune_idle(self, *, keep: str | None = None) -> list[str]:
        if self._max_idle_seconds <= 0:
            return []
        cutoff = self._clock() - self._max_idle_seconds
        expired = [
            user_id
            for user_id, seen in self._last_seen.items()
            if seen < cutoff and user_id != keep and not self._sessions[user_id].busy
        ]
        for user_id in expired:
            self.discard(user_id)
        if expired:
            logger.info("Evicted %d idle solver sessions", len(expired))
        return expired

    def discard(self, user_id: str) -> bool:
        session = self._sessions.pop(user_id, None)
        self._last_seen.pop(user_id, None)
        if session is None:
            return False
        session.close()
        logger.info("Closed solver session for %s", user_id)
        return True

    def close_all(self) -> None:
        for user_id in list(self._sessions):
            self.discard(user_id)

    def __len__(self) -> int:
        return len(self._sessions)
