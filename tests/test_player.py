"""Tests for ninaivu.core.player – playback and the ready race."""

from __future__ import annotations

import asyncio
from typing import List, Tuple

import pytest

from conftest import FakeClock, spin
from ninaivu.core.player import FullyShown, InterruptedAt, ReadySignal, SequencePlayer
from ninaivu.core.settings import Mode
from ninaivu.core.timing import Timing


class FrameLog:
    """Collects (buffer, flash) frames and can fire a signal on a given frame."""

    def __init__(self, signal: ReadySignal | None = None, fire_on: Tuple[str, bool] | None = None) -> None:
        self.frames: List[Tuple[str, bool]] = []
        self._signal = signal
        self._fire_on = fire_on

    def __call__(self, buffer: str, flash: bool) -> None:
        self.frames.append((buffer, flash))
        if self._signal is not None and (buffer, flash) == self._fire_on:
            self._signal.fire()

    @property
    def longest(self) -> str:
        return max((b for b, _ in self.frames), key=len, default="")


@pytest.fixture()
def player(clock: FakeClock) -> SequencePlayer:
    return SequencePlayer(Timing(), sleep=clock.sleep)


# ---------------------------------------------------------------------------
# ReadySignal
# ---------------------------------------------------------------------------

class TestReadySignal:
    @pytest.mark.asyncio
    async def test_not_fired_initially(self):
        assert not ReadySignal().fired

    @pytest.mark.asyncio
    async def test_first_fire_wins(self):
        s = ReadySignal()
        assert s.fire() is True
        assert s.fire() is False
        assert s.fired

    @pytest.mark.asyncio
    async def test_wait_returns_after_fire(self):
        s = ReadySignal()
        waiter = asyncio.ensure_future(s.wait())
        await spin()
        assert not waiter.done()
        s.fire()
        await asyncio.wait_for(waiter, timeout=1)


# ---------------------------------------------------------------------------
# SequencePlayer – full playback
# ---------------------------------------------------------------------------

class TestFullPlayback:
    @pytest.mark.asyncio
    async def test_speed_mode_finishes_without_signal(self, player: SequencePlayer, clock: FakeClock):
        log = FrameLog()
        outcome = await player.play([4, 2], 700, Mode.SPEED, ReadySignal(), on_frame=log)
        assert outcome == FullyShown()
        # pulse, gap, pulse, gap, speed tail
        assert clock.calls == pytest.approx([0.11, 0.7, 0.11, 0.7, 0.42])

    @pytest.mark.asyncio
    async def test_speed_tail_floor(self, player: SequencePlayer, clock: FakeClock):
        await player.play([1], 200, Mode.SPEED, ReadySignal())
        assert clock.calls[-1] == pytest.approx(0.18)

    @pytest.mark.asyncio
    async def test_buffer_is_cumulative(self, player: SequencePlayer):
        log = FrameLog()
        await player.play([1, 2, 3], 300, Mode.SPEED, ReadySignal(), on_frame=log)
        assert log.frames == [
            ("1", True), ("1", False),
            ("12", True), ("12", False),
            ("123", True), ("123", False),
        ]

    @pytest.mark.asyncio
    async def test_normal_mode_waits_for_signal(self, player: SequencePlayer):
        log = FrameLog()
        signal = ReadySignal()
        task = asyncio.ensure_future(player.play([5, 6, 7], 700, Mode.NORMAL, signal, on_frame=log))
        await spin(50)
        assert not task.done()
        assert log.longest == "567"
        signal.fire()
        assert await asyncio.wait_for(task, timeout=1) == FullyShown()

    @pytest.mark.asyncio
    async def test_interrupt_on_last_digit_counts_as_fully_shown(self, player: SequencePlayer):
        signal = ReadySignal()
        log = FrameLog(signal, fire_on=("89", False))
        outcome = await player.play([8, 9], 700, Mode.NORMAL, signal, on_frame=log)
        assert outcome == FullyShown()


# ---------------------------------------------------------------------------
# SequencePlayer – interruption
# ---------------------------------------------------------------------------

class TestInterrupt:
    @pytest.mark.asyncio
    async def test_interrupt_between_digits(self, player: SequencePlayer):
        signal = ReadySignal()
        log = FrameLog(signal, fire_on=("12", False))
        outcome = await player.play([1, 2, 3, 4], 700, Mode.NORMAL, signal, on_frame=log)
        assert outcome == InterruptedAt(1)
        assert log.longest == "12"

    @pytest.mark.asyncio
    async def test_pulse_is_not_interruptible(self, player: SequencePlayer, clock: FakeClock):
        signal = ReadySignal()
        log = FrameLog(signal, fire_on=("1", True))
        outcome = await player.play([1, 2, 3], 700, Mode.NORMAL, signal, on_frame=log)
        assert outcome == InterruptedAt(0)
        assert ("1", False) in log.frames
        assert clock.calls == pytest.approx([0.11])

    @pytest.mark.asyncio
    async def test_already_fired_signal_skips_the_gap(self, player: SequencePlayer, clock: FakeClock):
        signal = ReadySignal()
        signal.fire()
        outcome = await player.play([3, 3], 700, Mode.SPEED, signal)
        assert outcome == InterruptedAt(0)
        assert clock.calls == pytest.approx([0.11])

    @pytest.mark.asyncio
    async def test_signal_beats_a_long_timer(self):
        async def slow_sleep(seconds: float) -> None:
            if seconds > 0.2:
                await asyncio.sleep(3600)

        player = SequencePlayer(Timing(pulse_ms=0), sleep=slow_sleep)
        signal = ReadySignal()
        task = asyncio.ensure_future(player.play([1, 2, 3], 3000, Mode.NORMAL, signal))
        await spin()
        signal.fire()
        assert await asyncio.wait_for(task, timeout=1) == InterruptedAt(0)

    @pytest.mark.asyncio
    async def test_second_fire_has_no_effect(self, player: SequencePlayer):
        signal = ReadySignal()
        fired = []

        def on_frame(buffer: str, flash: bool) -> None:
            if buffer == "1" and not flash:
                fired.append(signal.fire())
                fired.append(signal.fire())

        outcome = await player.play([1, 2], 700, Mode.NORMAL, signal, on_frame=on_frame)
        assert outcome == InterruptedAt(0)
        assert fired == [True, False]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("length", [1, 2, 5, 9])
    async def test_outcome_always_in_range(self, length: int):
        for stop_at in range(length):
            clock = FakeClock()
            player = SequencePlayer(Timing(), sleep=clock.sleep)
            sequence = list(range(length))
            target = "".join(str(d) for d in sequence[: stop_at + 1])
            signal = ReadySignal()
            log = FrameLog(signal, fire_on=(target, False))
            outcome = await player.play(sequence, 500, Mode.NORMAL, signal, on_frame=log)
            assert isinstance(outcome, (FullyShown, InterruptedAt))
            if isinstance(outcome, InterruptedAt):
                assert 0 <= outcome.index < length
            assert len(log.longest) <= length
