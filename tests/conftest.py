"""Shared helpers for the game engine tests."""

from __future__ import annotations

import asyncio
import random
from typing import Iterable, List

import pytest

from ninaivu.core.scores import ScoreTracker
from ninaivu.core.settings import SettingsStore
from ninaivu.core.storage import MemoryStore


class FakeClock:
    """Stand-in for ``asyncio.sleep``: records each wait and yields once."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def sleep(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


class ScriptedRandom(random.Random):
    """Returns queued digits from ``randint``, then zeros."""

    def __init__(self, digits: Iterable[int]) -> None:
        super().__init__(0)
        self._digits = list(digits)

    def randint(self, a: int, b: int) -> int:
        if self._digits:
            return self._digits.pop(0)
        return a


async def spin(turns: int = 20) -> None:
    for _ in range(turns):
        await asyncio.sleep(0)


@pytest.fixture()
def kv() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def settings_store(kv: MemoryStore) -> SettingsStore:
    return SettingsStore(kv)


@pytest.fixture()
def scores(kv: MemoryStore) -> ScoreTracker:
    return ScoreTracker(kv)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
