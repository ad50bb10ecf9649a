"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass

from ninaivu.core.machine import GameSnapshot, GameState

START_LABEL = "Start"
NEW_GAME_LABEL = "New Game"


@dataclass(frozen=True)
class ControlsState:
    """What the window shows and enables for one game snapshot."""

    display_text: str
    start_label: str
    start_visible: bool
    ready_visible: bool
    answer_visible: bool
    stop_enabled: bool
    flash: bool
    lost: bool


def controls_for(snapshot: GameSnapshot) -> ControlsState:
    state = snapshot.state
    if state is GameState.SHOWING:
        display_text = snapshot.visible or snapshot.message
    elif state is GameState.ANSWERING:
        display_text = " "
    else:
        display_text = snapshot.message

    return ControlsState(
        display_text=display_text,
        start_label=NEW_GAME_LABEL if state is GameState.LOST else START_LABEL,
        start_visible=state in (GameState.IDLE, GameState.LOST),
        ready_visible=state is GameState.SHOWING,
        answer_visible=state is GameState.ANSWERING,
        stop_enabled=state in (GameState.SHOWING, GameState.ANSWERING),
        flash=snapshot.flash and state is GameState.SHOWING,
        lost=state is GameState.LOST,
    )
