from __future__ import annotations
from PyQt6.QtCore import QObject, pyqtSignal


class AppLogger(QObject):
    message_logged = pyqtSignal(str, str)  # category, message

    def __init__(self, echo: bool = True, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.echo = echo

    def log(self, category: str, message: str) -> None:
        if self.echo:
            print(f"[{category}] {message}", flush=True)
        self.message_logged.emit(category, message)

    def param(self, message: str) -> None:
        self.log("PARAM", message)

    def macro(self, message: str) -> None:
        self.log("MACRO", message)

    def patch(self, message: str) -> None:
        self.log("PATCH", message)

    def modulation(self, message: str) -> None:
        self.log("MOD", message)

    def clock(self, message: str) -> None:
        self.log("CLOCK", message)

    def general(self, message: str) -> None:
        self.log("GENERAL", message)
