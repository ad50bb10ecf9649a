from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from ninaivu.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

MODE_KEY = "mode"
REVEAL_KEY = "reveal_interval_ms"
GOAL_KEY = "goal"

REVEAL_MIN_MS = 200
REVEAL_MAX_MS = 3000
GOAL_MIN = 3
GOAL_MAX = 99

DEFAULT_REVEAL_MS = 700
DEFAULT_GOAL = 11


class Mode(str, enum.Enum):
    NORMAL = "normal"
    SPEED = "speed"

    @classmethod
    def coerce(cls, value: Any) -> "Mode":
        """Speed only on an exact match, anything else is normal."""
        if value is cls.SPEED or value == cls.SPEED.value:
            return cls.SPEED
        return cls.NORMAL


@dataclass(frozen=True)
class Settings:
    mode: Mode = Mode.NORMAL
    reveal_interval_ms: int = DEFAULT_REVEAL_MS
    goal: int = DEFAULT_GOAL


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return None


class SettingsStore:
    """Holds the difficulty mode, reveal interval and streak goal.

    ``apply`` never rejects input: numbers are clamped into range, unknown
    modes become normal, and missing or unreadable fields keep their
    current value.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._settings = self._load()

    def get(self) -> Settings:
        return self._settings

    def apply(self, candidate: Union[Settings, Mapping[str, Any]]) -> Settings:
        if isinstance(candidate, Settings):
            raw_mode: Any = candidate.mode
            raw_reveal: Any = candidate.reveal_interval_ms
            raw_goal: Any = candidate.goal
        else:
            raw_mode = candidate.get("mode")
            raw_reveal = candidate.get("reveal_interval_ms", candidate.get("revealIntervalMs"))
            raw_goal = candidate.get("goal")

        with self._lock:
            current = self._settings
            reveal = _to_int(raw_reveal)
            goal = _to_int(raw_goal)
            settings = Settings(
                mode=Mode.coerce(raw_mode),
                reveal_interval_ms=clamp(
                    current.reveal_interval_ms if reveal is None else reveal,
                    REVEAL_MIN_MS,
                    REVEAL_MAX_MS,
                ),
                goal=clamp(current.goal if goal is None else goal, GOAL_MIN, GOAL_MAX),
            )
            self._store.set(MODE_KEY, settings.mode.value)
            self._store.set(REVEAL_KEY, str(settings.reveal_interval_ms))
            self._store.set(GOAL_KEY, str(settings.goal))
            self._settings = settings

        logger.info(
            "Settings applied: mode=%s reveal=%dms goal=%d",
            settings.mode.value,
            settings.reveal_interval_ms,
            settings.goal,
        )
        return settings

    def _load(self) -> Settings:
        mode = Mode.coerce(self._store.get(MODE_KEY) or Mode.NORMAL.value)
        reveal = self._read_int(REVEAL_KEY, DEFAULT_REVEAL_MS)
        goal = self._read_int(GOAL_KEY, DEFAULT_GOAL)
        return Settings(
            mode=mode,
            reveal_interval_ms=clamp(reveal, REVEAL_MIN_MS, REVEAL_MAX_MS),
            goal=clamp(goal, GOAL_MIN, GOAL_MAX),
        )

    def _read_int(self, key: str, default: int) -> int:
        raw = self._store.get(key)
        if raw is None:
            return default
        value = _to_int(raw)
        if value is None:
            logger.warning("Ignoring stored %s=%r, using default %d", key, raw, default)
            return default
        return value
