from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from ninaivu.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

BEST_STREAK_KEY = "best_streak"


@dataclass(frozen=True)
class StreakUpdate:
    """Result of one correctly answered round."""

    current: int
    best: int
    previous_best: int

    @property
    def is_new_record(self) -> bool:
        return self.best > self.previous_best


class ScoreTracker:
    """Current streak lives in memory; the best streak is persisted."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._current_streak = 0

    @property
    def current_streak(self) -> int:
        return self._current_streak

    def reset(self) -> None:
        self._current_streak = 0

    def increment(self) -> StreakUpdate:
        """Count one correct round and persist a new best when it is beaten."""
        with self._lock:
            self._current_streak += 1
            previous_best = self.current_best()
            best = previous_best
            if self._current_streak > previous_best:
                best = self._current_streak
                self._store.set(BEST_STREAK_KEY, str(best))
                logger.info("New best streak: %d (was %d)", best, previous_best)
            return StreakUpdate(current=self._current_streak, best=best, previous_best=previous_best)

    def current_best(self) -> int:
        raw = self._store.get(BEST_STREAK_KEY)
        if raw is None:
            return 0
        try:
            return max(0, int(raw))
        except ValueError:
            logger.warning("Ignoring stored best streak %r", raw)
            return 0
