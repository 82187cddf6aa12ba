from __future__ import annotations
from PyQt6.QtCore import QObject, pyqtSignal

from core.logger import AppLogger
from model.state import InstrumentState


class SharedClock(QObject):
    """Process-wide transport clock shared by every consumer.

    The clock is the only writer of tempo, swing and bar length.  Consumers
    that keep a local copy follow the change signals (see ``bind_state``).
    """

    bpm_changed = pyqtSignal(float)
    swing_changed = pyqtSignal(float)
    bar_length_changed = pyqtSignal(int)

    BPM_RANGE = (20, 300)
    SWING_RANGE = (0, 100)
    BAR_LENGTH_RANGE = (1, 128)

    def __init__(self, bpm: float = 120, swing: float = 0, bar_length: int = 4,
                 logger: AppLogger | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._bpm = bpm
        self._swing = swing
        self._bar_length = bar_length
        self._logger = logger

    @property
    def bpm(self) -> float:
        return self._bpm

    @property
    def swing(self) -> float:
        return self._swing

    @property
    def bar_length(self) -> int:
        return self._bar_length

    def set_tempo(self, bpm: float) -> None:
        lo, hi = self.BPM_RANGE
        self._bpm = max(lo, min(hi, bpm))
        if self._logger:
            self._logger.clock(f"Tempo: {self._bpm} BPM")
        self.bpm_changed.emit(float(self._bpm))

    def set_swing(self, swing: float) -> None:
        lo, hi = self.SWING_RANGE
        self._swing = max(lo, min(hi, swing))
        if self._logger:
            self._logger.clock(f"Swing: {self._swing}%")
        self.swing_changed.emit(float(self._swing))

    def set_bar_length(self, beats: int) -> None:
        lo, hi = self.BAR_LENGTH_RANGE
        self._bar_length = int(max(lo, min(hi, beats)))
        if self._logger:
            self._logger.clock(f"Bar length: {self._bar_length} beats")
        self.bar_length_changed.emit(self._bar_length)


def bind_state(clock: SharedClock, state: InstrumentState) -> None:
    """Mirror clock changes into the instrument's local time fields."""
    state.bpm = clock.bpm
    state.swing = clock.swing
    state.bar_length = clock.bar_length
    clock.bpm_changed.connect(lambda bpm: setattr(state, "bpm", bpm))
    clock.swing_changed.connect(lambda swing: setattr(state, "swing", swing))
    clock.bar_length_changed.connect(lambda beats: setattr(state, "bar_length", beats))
