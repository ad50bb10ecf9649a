from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt, QRegularExpression
from PySide6.QtGui import QCloseEvent, QKeySequence, QRegularExpressionValidator, QShortcut
from PySide6.QtWidgets import (
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ninaivu.core.machine import GameSnapshot, GameState, GameStateMachine, sanitize_answer
from ninaivu.core.settings import GOAL_MAX, GOAL_MIN, Mode, Settings
from ninaivu.ui.colors import GameColors
from ninaivu.ui.game_widgets import GoalProgressBar, SequenceDisplay, StatCard
from ninaivu.ui.models import controls_for

REVEAL_CHOICES_MS = (300, 500, 700, 900, 1200, 1500, 2000, 3000)


class MainWindow(QMainWindow):
    """Single-screen memory game window.

    Renders every snapshot the state machine publishes and forwards button
    clicks and keys to it. The window holds no game state of its own.
    """

    def __init__(self, machine: GameStateMachine) -> None:
        super().__init__()
        self._machine = machine
        self._state: Optional[GameState] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

        self._display: Optional[SequenceDisplay] = None
        self._streak_card: Optional[StatCard] = None
        self._best_card: Optional[StatCard] = None
        self._goal_card: Optional[StatCard] = None
        self._goal_bar: Optional[GoalProgressBar] = None
        self._step_hint: Optional[QLabel] = None
        self._start_button: Optional[QPushButton] = None
        self._ready_button: Optional[QPushButton] = None
        self._answer_row: Optional[QWidget] = None
        self._answer_input: Optional[QLineEdit] = None
        self._submit_button: Optional[QPushButton] = None
        self._stop_button: Optional[QPushButton] = None
        self._mode_select: Optional[QComboBox] = None
        self._reveal_select: Optional[QComboBox] = None
        self._goal_input: Optional[QSpinBox] = None

        self.setWindowTitle("Ninaivu")
        self.setMinimumSize(480, 560)
        self._build_ui()
        self._load_settings_form(machine.settings)
        self._unsubscribe = machine.subscribe(self._render)
        self._render(machine.snapshot())

    def _build_ui(self) -> None:
        root = QWidget()
        root.setObjectName("gameRoot")
        root.setStyleSheet(
            f"""
            QWidget#gameRoot {{
                background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                    stop:0 {GameColors.BG_TOP}, stop:1 {GameColors.BG_BOTTOM});
            }}
            QPushButton {{
                background: {GameColors.PRIMARY};
                color: white;
                border: none;
                border-radius: 10px;
                padding: 10px 18px;
                font-size: 15px;
                font-weight: 700;
            }}
            QPushButton:disabled {{
                background: {GameColors.TEXT_MUTED};
            }}
            """
        )
        layout = QVBoxLayout(root)
        layout.setContentsMargins(24, 20, 24, 20)
        layout.setSpacing(14)

        scores_row = QHBoxLayout()
        self._streak_card = StatCard("Streak", "0", GameColors.PRIMARY_LIGHT)
        self._best_card = StatCard("Best", "0", GameColors.AMBER)
        self._goal_card = StatCard("Goal", "0", GameColors.CORAL)
        for card in (self._streak_card, self._best_card, self._goal_card):
            scores_row.addWidget(card, 1)
        layout.addLayout(scores_row)

        self._display = SequenceDisplay()
        self._display.clicked.connect(self._on_display_clicked)
        layout.addWidget(self._display)

        self._goal_bar = GoalProgressBar()
        layout.addWidget(self._goal_bar)
        self._step_hint = QLabel("")
        self._step_hint.setAlignment(Qt.AlignCenter)
        self._step_hint.setStyleSheet(f"color: {GameColors.TEXT_MUTED}; font-size: 13px; font-weight: 600;")
        layout.addWidget(self._step_hint)

        controls_row = QHBoxLayout()
        controls_row.addStretch(1)
        self._start_button = QPushButton("Start")
        self._start_button.clicked.connect(self._machine.start)
        controls_row.addWidget(self._start_button)
        self._ready_button = QPushButton("I'm ready")
        self._ready_button.clicked.connect(self._machine.interrupt)
        controls_row.addWidget(self._ready_button)
        controls_row.addStretch(1)
        layout.addLayout(controls_row)

        self._answer_row = QWidget()
        answer_layout = QHBoxLayout(self._answer_row)
        answer_layout.setContentsMargins(0, 0, 0, 0)
        self._answer_input = QLineEdit()
        self._answer_input.setPlaceholderText("Type the digits")
        self._answer_input.setValidator(QRegularExpressionValidator(QRegularExpression(r"\d*"), self))
        self._answer_input.textChanged.connect(self._on_answer_changed)
        self._answer_input.setStyleSheet(
            f"font-size: 22px; padding: 8px; border-radius: 10px; border: 2px solid {GameColors.PRIMARY_LIGHT};"
        )
        answer_layout.addWidget(self._answer_input, 1)
        self._submit_button = QPushButton("Submit")
        self._submit_button.clicked.connect(self._submit)
        answer_layout.addWidget(self._submit_button)
        layout.addWidget(self._answer_row)

        self._stop_button = QPushButton("Stop")
        self._stop_button.clicked.connect(self._machine.stop)
        layout.addWidget(self._stop_button)

        layout.addWidget(self._build_settings_panel())
        layout.addStretch(1)
        self.setCentralWidget(root)

        QShortcut(QKeySequence(Qt.Key_Return), self).activated.connect(self._on_enter)
        QShortcut(QKeySequence(Qt.Key_Enter), self).activated.connect(self._on_enter)
        QShortcut(QKeySequence(Qt.Key_Escape), self).activated.connect(self._machine.stop)

    def _build_settings_panel(self) -> QFrame:
        panel = QFrame()
        panel.setObjectName("settingsPanel")
        panel.setStyleSheet(
            f"""
            QFrame#settingsPanel {{
                background: {GameColors.CARD_BG};
                border: 1px solid {GameColors.CARD_BORDER};
                border-radius: 14px;
            }}
            QLabel {{ color: {GameColors.TEXT_PRIMARY}; font-weight: 600; }}
            """
        )
        row = QHBoxLayout(panel)
        row.setContentsMargins(14, 10, 14, 10)

        row.addWidget(QLabel("Mode"))
        self._mode_select = QComboBox()
        self._mode_select.addItem("Normal", Mode.NORMAL.value)
        self._mode_select.addItem("Speed", Mode.SPEED.value)
        row.addWidget(self._mode_select)

        row.addWidget(QLabel("Beat"))
        self._reveal_select = QComboBox()
        for ms in REVEAL_CHOICES_MS:
            self._reveal_select.addItem(f"{ms} ms", ms)
        row.addWidget(self._reveal_select)

        row.addWidget(QLabel("Goal"))
        self._goal_input = QSpinBox()
        self._goal_input.setRange(GOAL_MIN, GOAL_MAX)
        row.addWidget(self._goal_input)

        apply_button = QPushButton("Apply")
        apply_button.clicked.connect(self._apply_settings)
        row.addWidget(apply_button)
        return panel

    def _load_settings_form(self, settings: Settings) -> None:
        self._mode_select.setCurrentIndex(max(0, self._mode_select.findData(settings.mode.value)))
        index = self._reveal_select.findData(settings.reveal_interval_ms)
        if index < 0:
            self._reveal_select.addItem(f"{settings.reveal_interval_ms} ms", settings.reveal_interval_ms)
            index = self._reveal_select.count() - 1
        self._reveal_select.setCurrentIndex(index)
        self._goal_input.setValue(settings.goal)

    def _apply_settings(self) -> None:
        settings = self._machine.apply_settings(
            {
                "mode": self._mode_select.currentData(),
                "reveal_interval_ms": self._reveal_select.currentData(),
                "goal": self._goal_input.value(),
            }
        )
        self._load_settings_form(settings)

    def _render(self, snapshot: GameSnapshot) -> None:
        controls = controls_for(snapshot)
        entering = snapshot.state is not self._state
        self._state = snapshot.state

        self._display.set_frame(controls.display_text, controls.flash, controls.lost)
        self._streak_card.set_value(snapshot.current_streak)
        self._best_card.set_value(snapshot.best_streak)
        self._goal_card.set_value(snapshot.goal)
        self._goal_bar.set_progress(snapshot.goal_progress, snapshot.goal)
        self._step_hint.setText(snapshot.progress_text)

        self._start_button.setText(controls.start_label)
        self._start_button.setVisible(controls.start_visible)
        self._ready_button.setVisible(controls.ready_visible)
        self._answer_row.setVisible(controls.answer_visible)
        self._stop_button.setEnabled(controls.stop_enabled)

        if entering and snapshot.state is GameState.SHOWING:
            self._answer_input.clear()
        if entering and snapshot.state is GameState.ANSWERING:
            self._answer_input.setFocus()
        self._submit_button.setEnabled(controls.answer_visible and bool(self._answer_input.text()))

    def _on_answer_changed(self, text: str) -> None:
        cleaned = sanitize_answer(text)
        if cleaned != text:
            self._answer_input.setText(cleaned)
            return
        self._submit_button.setEnabled(self._state is GameState.ANSWERING and bool(cleaned))

    def _submit(self) -> None:
        self._machine.submit_answer(self._answer_input.text())

    def _on_enter(self) -> None:
        state = self._machine.state
        if state is GameState.ANSWERING:
            self._submit()
        elif state in (GameState.IDLE, GameState.LOST):
            self._machine.start()
        elif state is GameState.SHOWING:
            self._machine.interrupt()

    def _on_display_clicked(self) -> None:
        if self._machine.state is GameState.SHOWING:
            self._machine.interrupt()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Drop the listener and abandon any running round."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._machine.stop()
        super().closeEvent(event)
