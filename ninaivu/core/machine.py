from __future__ import annotations

import asyncio
import enum
import logging
import random
import string
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

from ninaivu.core.player import PlaybackOutcome, ReadySignal, SequencePlayer, Sleep
from ninaivu.core.scores import ScoreTracker
from ninaivu.core.settings import Settings, SettingsStore
from ninaivu.core.timing import Timing

logger = logging.getLogger(__name__)

WATCH_MESSAGE = "Watch"
CORRECT_MESSAGE = "Correct"
STOPPED_MESSAGE = "Stopped"
SETTINGS_MESSAGE = "Settings updated"


class GameState(str, enum.Enum):
    IDLE = "idle"
    SHOWING = "showing"
    ANSWERING = "answering"
    LOST = "lost"


class Intent(str, enum.Enum):
    START = "start"
    INTERRUPT = "interrupt"
    SUBMIT = "submit"
    STOP = "stop"
    APPLY_SETTINGS = "apply_settings"


@dataclass(frozen=True)
class Mismatch:
    expected: str
    entered: str

    @property
    def message(self) -> str:
        return f"Wrong. It was {self.expected}. You entered {self.entered}."


@dataclass(frozen=True)
class GameSnapshot:
    """Everything the UI needs to render one frame of the game."""

    state: GameState
    visible: str
    flash: bool
    current_streak: int
    best_streak: int
    goal: int
    message: str
    mismatch: Optional[Mismatch]
    new_record: bool
    sequence_length: int

    @property
    def goal_progress(self) -> int:
        return min(self.current_streak, self.goal)

    @property
    def progress_text(self) -> str:
        return f"{self.goal_progress} of {self.goal}"


Listener = Callable[[GameSnapshot], None]


def sanitize_answer(text: str) -> str:
    """Keep only ASCII digits."""
    return "".join(ch for ch in str(text) if ch in string.digits)


class GameStateMachine:
    """Drives one game session: start, playback, answer, grade, next round.

    Intent methods are synchronous and safe to call in any state; those that
    do not apply to the current state are ignored. Playback and the short
    pause after a correct answer run as asyncio tasks on the running loop.
    Every task carries the round number it was started for and drops its
    result if the round has moved on (stop, new game, or a later round).
    """

    def __init__(
        self,
        settings: SettingsStore,
        scores: ScoreTracker,
        player: Optional[SequencePlayer] = None,
        timing: Optional[Timing] = None,
        rng: Optional[random.Random] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._scores = scores
        self._timing = timing or Timing()
        self._player = player or SequencePlayer(self._timing, sleep=sleep)
        self._rng = rng or random.Random()
        self._sleep = sleep

        self._state = GameState.IDLE
        self._sequence: List[int] = []
        self._visible = ""
        self._flash = False
        self._message = ""
        self._mismatch: Optional[Mismatch] = None
        self._new_record = False

        self._round = 0
        self._signal: Optional[ReadySignal] = None
        self._task: Optional[asyncio.Future] = None
        self._listeners: List[Listener] = []

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def sequence(self) -> tuple[int, ...]:
        return tuple(self._sequence)

    @property
    def expected_answer(self) -> str:
        return "".join(str(d) for d in self._sequence)

    @property
    def current_streak(self) -> int:
        return self._scores.current_streak

    @property
    def mismatch(self) -> Optional[Mismatch]:
        return self._mismatch

    @property
    def settings(self) -> Settings:
        return self._settings.get()

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            state=self._state,
            visible=self._visible,
            flash=self._flash,
            current_streak=self._scores.current_streak,
            best_streak=self._scores.current_best(),
            goal=self._settings.get().goal,
            message=self._message,
            mismatch=self._mismatch,
            new_record=self._new_record,
            sequence_length=len(self._sequence),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a snapshot listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def handle_intent(self, intent: Union[Intent, str], payload: Any = None) -> None:
        intent = Intent(intent)
        if intent is Intent.START:
            self.start()
        elif intent is Intent.INTERRUPT:
            self.interrupt()
        elif intent is Intent.SUBMIT:
            self.submit_answer("" if payload is None else payload)
        elif intent is Intent.STOP:
            self.stop()
        elif intent is Intent.APPLY_SETTINGS:
            self.apply_settings(payload or {})

    def start(self) -> None:
        if self._state not in (GameState.IDLE, GameState.LOST):
            logger.debug("Ignoring start while %s", self._state.value)
            return
        self._scores.reset()
        self._sequence = [self._random_digit()]
        self._mismatch = None
        self._new_record = False
        logger.info("New game started")
        self._begin_round(settle_ms=0)

    def interrupt(self) -> None:
        if self._state is not GameState.SHOWING or self._signal is None:
            logger.debug("Ignoring interrupt while %s", self._state.value)
            return
        if self._signal.fire():
            logger.debug("Player is ready (round %d)", self._round)

    def submit_answer(self, text: str) -> None:
        if self._state is not GameState.ANSWERING:
            logger.debug("Ignoring answer while %s", self._state.value)
            return
        answer = sanitize_answer(text)
        if not answer:
            return

        expected = self.expected_answer
        if answer == expected:
            update = self._scores.increment()
            self._new_record = update.is_new_record
            self._sequence.append(self._random_digit())
            logger.info("Correct answer, streak %d", update.current)
            self._begin_round(settle_ms=self._timing.settle_ms, message=CORRECT_MESSAGE)
            return

        self._round += 1
        self._mismatch = Mismatch(expected=expected, entered=answer)
        self._state = GameState.LOST
        self._message = self._mismatch.message
        logger.info("Wrong answer after streak %d", self._scores.current_streak)
        self._notify()

    def stop(self) -> None:
        if self._state not in (GameState.SHOWING, GameState.ANSWERING):
            logger.debug("Ignoring stop while %s", self._state.value)
            return
        self._round += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._signal = None
        self._sequence = []
        self._visible = ""
        self._flash = False
        self._state = GameState.IDLE
        self._message = STOPPED_MESSAGE
        logger.info("Game stopped")
        self._notify()

    def apply_settings(self, candidate: Any) -> Settings:
        settings = self._settings.apply(candidate)
        self._message = SETTINGS_MESSAGE
        self._notify()
        return settings

    async def join(self) -> None:
        """Wait for the current background task, if any, to finish."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def _begin_round(self, settle_ms: int, message: str = WATCH_MESSAGE) -> None:
        self._round += 1
        # A round without a settle pause accepts interrupts immediately.
        self._signal = ReadySignal() if settle_ms <= 0 else None
        self._visible = ""
        self._flash = False
        self._state = GameState.SHOWING
        self._message = message
        self._notify()
        self._task = asyncio.ensure_future(self._run_round(self._round, settle_ms))
        self._task.add_done_callback(self._on_task_done)

    async def _run_round(self, round_id: int, settle_ms: int) -> None:
        if settle_ms > 0:
            await self._sleep(settle_ms / 1000.0)
            if round_id != self._round:
                return
            self._signal = ReadySignal()
            self._message = WATCH_MESSAGE
            self._notify()

        signal = self._signal
        settings = self._settings.get()
        outcome = await self._player.play(
            list(self._sequence),
            settings.reveal_interval_ms,
            settings.mode,
            signal,
            on_frame=lambda buffer, flash: self._on_frame(round_id, buffer, flash),
        )
        self._on_playback_done(round_id, outcome)

    def _on_frame(self, round_id: int, buffer: str, flash: bool) -> None:
        if round_id != self._round:
            return
        self._visible = buffer
        self._flash = flash
        self._notify()

    def _on_playback_done(self, round_id: int, outcome: PlaybackOutcome) -> None:
        if round_id != self._round or self._state is not GameState.SHOWING:
            logger.debug("Discarding stale playback result %r", outcome)
            return
        logger.debug("Playback finished: %r", outcome)
        self._signal = None
        self._visible = ""
        self._flash = False
        self._message = ""
        self._state = GameState.ANSWERING
        self._notify()

    def _on_task_done(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Round task failed", exc_info=error)

    def _random_digit(self) -> int:
        return self._rng.randint(0, 9)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
