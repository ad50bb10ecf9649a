"""Application entry point and setup for the Ninaivu memory game."""

import logging
import sys

from PySide6 import QtAsyncio
from PySide6.QtWidgets import QApplication

from ninaivu.core.machine import GameStateMachine
from ninaivu.core.scores import ScoreTracker
from ninaivu.core.settings import SettingsStore
from ninaivu.core.storage import JsonFileStore
from ninaivu.core.timing import load_timing
from ninaivu.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_machine() -> GameStateMachine:
    """Wire the persisted stores and timing config into a fresh game session."""
    store = JsonFileStore()
    logging.info("Using store at %s", store.file_path)
    return GameStateMachine(
        settings=SettingsStore(store),
        scores=ScoreTracker(store),
        timing=load_timing(),
    )


def run() -> None:
    """Initialize the application and run the window on the Qt asyncio loop."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Ninaivu")
    app.setApplicationDisplayName("Ninaivu")

    window = MainWindow(build_machine())
    window.show()

    QtAsyncio.run(handle_sigint=True)
