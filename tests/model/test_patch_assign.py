import copy
import sys
import pytest
from PyQt6.QtCore import QCoreApplication

from core.logger import AppLogger
from engines.types import Engine
from model.patch import FmOperator, FmPatch, PatchBank
from model.patch_assign import (
    clear_complex_patch, load_bank, select_bank_patch, set_complex_patch,
)
from model.state import InstrumentState
from model.voice import Voice


@pytest.fixture(scope="module")
def app():
    return QCoreApplication.instance() or QCoreApplication(sys.argv)


class BrittleVoice(Voice):
    """Raises when ``fail_on`` is assigned after arming."""
    fail_on = "dx7_algorithm"

    def __setattr__(self, name, value):
        if name == self.fail_on and getattr(self, "armed", False):
            raise RuntimeError(f"cannot set {name}")
        super().__setattr__(name, value)


def _patch(name="E.PIANO 1", algorithm=5):
    return FmPatch(name=name, voice_name=name, algorithm=algorithm)


def test_set_patch_sets_all_fields():
    state = InstrumentState()
    assert set_complex_patch(state, 3, _patch(), 4, 32)
    voice = state.voices[3]
    assert voice.engine is Engine.DX7
    assert voice.dx7_patch.name == "E.PIANO 1"
    assert voice.dx7_patch_name == "E.PIANO 1"
    assert voice.dx7_patch_index == 4
    assert voice.dx7_bank_size == 32
    assert voice.dx7_algorithm == 5


def test_set_patch_fills_only_missing_modifiers():
    state = InstrumentState()
    voice = state.voices[0]
    voice.dx7_transpose = 7
    set_complex_patch(state, 0, _patch(), 0, 32)
    assert voice.dx7_transpose == 7
    assert voice.dx7_freq_multiplier == 1.0
    assert voice.dx7_volume_boost == 0


def test_set_patch_name_fallback():
    state = InstrumentState()
    set_complex_patch(state, 0, FmPatch(name=""), 2, 32)
    assert state.voices[0].dx7_patch_name == "Patch 3"


def test_set_patch_keeps_bank_copy():
    state = InstrumentState()
    bank = [_patch(f"P{i}") for i in range(4)]
    set_complex_patch(state, 1, bank[2], 2, 4, bank_copy=bank, bank_name="ROM1A")
    assert state.voices[1].dx7_bank is bank
    assert state.voices[1].dx7_bank_name == "ROM1A"


@pytest.mark.parametrize("patch, index, bank_size, voice_index", [
    (FmPatch(name="Five", operators=[FmOperator() for _ in range(5)]), 0, 32, 0),
    (None, 0, 32, 0),
    (FmPatch(name="Nones", operators=[None] * 6), 0, 32, 0),
    (FmPatch(name="ok"), 32, 32, 0),
    (FmPatch(name="ok"), -1, 32, 0),
    (FmPatch(name="ok"), 0, 0, 0),
    (FmPatch(name="ok"), None, 32, 0),
    (FmPatch(name="ok"), True, 32, 0),
    (FmPatch(name="ok"), 0, 32, 6),
])
def test_invalid_input_leaves_voice_untouched(patch, index, bank_size, voice_index):
    state = InstrumentState()
    before = copy.deepcopy(state.voices)
    assert set_complex_patch(state, voice_index, patch, index, bank_size) is False
    assert state.voices == before


def test_commit_failure_clears_patch_identity():
    state = InstrumentState()
    voice = BrittleVoice.for_engine(Engine.DX7)
    state.voices[2] = voice
    assert set_complex_patch(state, 2, _patch("OLD"), 1, 32)
    voice.armed = True
    assert set_complex_patch(state, 2, _patch("NEW", algorithm=9), 5, 32) is False
    assert voice.dx7_patch is None
    assert voice.dx7_patch_name is None
    assert voice.dx7_patch_index is None
    assert voice.dx7_bank_size == 0


def test_commit_failure_is_logged(app):
    state = InstrumentState()
    voice = BrittleVoice.for_engine(Engine.DX7)
    voice.armed = True
    state.voices[0] = voice
    logger = AppLogger(echo=False)
    received = []
    logger.message_logged.connect(lambda cat, msg: received.append(cat))
    assert set_complex_patch(state, 0, _patch(), 0, 32, logger=logger) is False
    assert received == ["PATCH"]


def test_clear_patch():
    state = InstrumentState()
    set_complex_patch(state, 3, _patch(), 4, 32)
    clear_complex_patch(state, 3)
    voice = state.voices[3]
    assert voice.dx7_patch is None
    assert voice.dx7_patch_name is None
    assert voice.dx7_patch_index is None
    assert voice.dx7_bank_size == 0


def test_clear_patch_ignores_bad_voice():
    state = InstrumentState()
    before = copy.deepcopy(state.voices)
    clear_complex_patch(state, 9)
    assert state.voices == before


def test_load_bank_and_select():
    state = InstrumentState()
    bank = PatchBank("ROM1A", [_patch(f"P{i}") for i in range(8)])
    assert load_bank(state, 3, bank, 2)
    voice = state.voices[3]
    assert voice.dx7_patch_name == "P2"
    assert voice.dx7_bank_name == "ROM1A"
    assert voice.dx7_bank is not bank.patches
    assert select_bank_patch(state, 3, 7)
    assert voice.dx7_patch_name == "P7"
    assert voice.dx7_bank_size == 8


def test_select_bank_patch_out_of_range():
    state = InstrumentState()
    load_bank(state, 3, PatchBank("ROM1A", [_patch("P0")]), 0)
    assert select_bank_patch(state, 3, 4) is False
    assert state.voices[3].dx7_patch_index == 0


def test_select_without_bank():
    assert select_bank_patch(InstrumentState(), 0, 0) is False
