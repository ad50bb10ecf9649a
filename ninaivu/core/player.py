"""Digit-by-digit sequence playback that can be cut short by the player."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, Union

from ninaivu.core.settings import Mode
from ninaivu.core.timing import Timing

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
FrameListener = Callable[[str, bool], None]


@dataclass(frozen=True)
class FullyShown:
    """Every digit was revealed before the player answered."""


@dataclass(frozen=True)
class InterruptedAt:
    """The player signalled readiness while digit ``index`` was the newest one shown."""

    index: int


PlaybackOutcome = Union[FullyShown, InterruptedAt]


class ReadySignal:
    """One-shot "I'm ready" notification. Only the first ``fire`` counts."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    def fire(self) -> bool:
        """Return True if this call resolved the signal."""
        if self._event.is_set():
            return False
        self._event.set()
        return True

    async def wait(self) -> None:
        await self._event.wait()


class SequencePlayer:
    """Reveals a sequence cumulatively, racing each gap against a ReadySignal.

    Each digit gets a short pulse that cannot be interrupted, followed by the
    reveal interval. A signal during the gap ends playback early; once every
    digit is out, speed mode waits a shortened tail and normal mode waits for
    the signal.
    """

    def __init__(self, timing: Optional[Timing] = None, sleep: Sleep = asyncio.sleep) -> None:
        self._timing = timing or Timing()
        self._sleep = sleep

    async def play(
        self,
        sequence: Sequence[int],
        reveal_interval_ms: int,
        mode: Mode,
        signal: ReadySignal,
        on_frame: Optional[FrameListener] = None,
    ) -> PlaybackOutcome:
        buffer = ""
        last = len(sequence) - 1
        for index, digit in enumerate(sequence):
            buffer += str(digit)
            self._emit(on_frame, buffer, True)
            await self._sleep(self._timing.pulse_ms / 1000.0)
            self._emit(on_frame, buffer, False)

            if await self._race(reveal_interval_ms, signal) and index < last:
                logger.debug("Playback interrupted at digit %d of %d", index + 1, len(sequence))
                return InterruptedAt(index)

        if mode is Mode.SPEED:
            await self._race(self._timing.speed_tail_ms(reveal_interval_ms), signal)
        else:
            await signal.wait()
        return FullyShown()

    async def _race(self, wait_ms: int, signal: ReadySignal) -> bool:
        """Wait ``wait_ms`` or until the signal fires. True when the signal won."""
        if signal.fired:
            return True
        timer = asyncio.ensure_future(self._sleep(wait_ms / 1000.0))
        ready = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait({timer, ready}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (timer, ready):
                if not task.done():
                    task.cancel()
        return signal.fired

    @staticmethod
    def _emit(on_frame: Optional[FrameListener], buffer: str, flash: bool) -> None:
        if on_frame is not None:
            on_frame(buffer, flash)
