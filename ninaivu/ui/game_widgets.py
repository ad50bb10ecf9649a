"""Game screen widgets: sequence display, stat cards and goal progress bar."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QLinearGradient, QPainter
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QLabel,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from ninaivu.ui.colors import GameColors, blend_hex


class SequenceDisplay(QLabel):
    """One-line digit display. Tints while a digit pulses; clicks mean "ready"."""

    clicked = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._flash = False
        self._lost = False
        self.setAlignment(Qt.AlignCenter)
        self.setMinimumHeight(96)
        self.setWordWrap(True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self._apply_style()

    def set_frame(self, text: str, flash: bool, lost: bool = False) -> None:
        self.setText(text or " ")
        if flash != self._flash or lost != self._lost:
            self._flash = flash
            self._lost = lost
            self._apply_style()

    def mousePressEvent(self, event) -> None:
        self.clicked.emit()
        super().mousePressEvent(event)

    def _apply_style(self) -> None:
        background = blend_hex(GameColors.DISPLAY_BG, GameColors.FLASH, 0.8 if self._flash else 0.0)
        color = GameColors.WRONG if self._lost else GameColors.PRIMARY_DARK
        size = 22 if self._lost else 40
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {background};
                color: {color};
                border: 2px solid {GameColors.PRIMARY_LIGHT};
                border-radius: 18px;
                font-size: {size}px;
                font-weight: 800;
                letter-spacing: 4px;
                padding: 12px;
            }}
            """
        )


class StatCard(QFrame):
    def __init__(self, label: str, value: str, bg_color: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("statCard")
        self.setStyleSheet(
            f"""
            QFrame#statCard {{
                background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                    stop:0 {bg_color}, stop:1 {QColor(bg_color).darker(112).name()});
                border-radius: 14px;
                border: none;
            }}
            """
        )
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 10, 16, 10)
        layout.setSpacing(2)
        label_widget = QLabel(label)
        label_widget.setStyleSheet("color: rgba(255,255,255,0.92); font-size: 12px; font-weight: 600;")
        layout.addWidget(label_widget)
        self.value_label = QLabel(str(value))
        self.value_label.setStyleSheet("color: white; font-size: 26px; font-weight: 900;")
        layout.addWidget(self.value_label)

        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(16)
        shadow.setOffset(0, 4)
        shadow.setColor(QColor(0, 0, 0, 50))
        self.setGraphicsEffect(shadow)

    def set_value(self, value: object) -> None:
        self.value_label.setText(str(value))


class GoalProgressBar(QWidget):
    """Rounded progress bar for streak-towards-goal."""

    def __init__(self, parent: Optional[QWidget] = None, *, height: int = 12) -> None:
        super().__init__(parent)
        self._value = 0
        self._max_value = 1
        self.setFixedHeight(height)
        self.setMinimumWidth(100)

    def set_progress(self, value: int, max_value: int) -> None:
        self._max_value = max(1, int(max_value))
        self._value = max(0, min(int(value), self._max_value))
        self.update()

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setPen(Qt.NoPen)
        radius = min(8, self.height() // 2)

        painter.setBrush(QColor(GameColors.PROGRESS_TRACK))
        painter.drawRoundedRect(0, 0, self.width(), self.height(), radius, radius)

        fill_width = int((self._value / self._max_value) * self.width())
        if fill_width > 0:
            gradient = QLinearGradient(0, 0, fill_width, 0)
            gradient.setColorAt(0, QColor(GameColors.PRIMARY_LIGHT))
            gradient.setColorAt(1, QColor(GameColors.PROGRESS_FILL))
            painter.setBrush(gradient)
            painter.drawRoundedRect(0, 0, fill_width, self.height(), radius, radius)
