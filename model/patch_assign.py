"""All-or-nothing FM patch assignment for a voice.

A patch load touches several interdependent voice fields.  A voice whose
index is set but whose patch is None must never be observable, so the
fields are staged first and committed only after validation passes; a
fault during the commit clears the patch identity entirely.
"""
from __future__ import annotations

from core.logger import AppLogger
from engines.types import Engine
from model.patch import OPERATOR_COUNT, FmPatch, PatchBank
from model.state import InstrumentState
from model.voice import Voice

# Secondary modifiers and their neutral values, set only where still None
NEUTRAL_MODIFIERS: dict[str, float] = {
    "dx7_algorithm_offset": 0,
    "dx7_volume_boost": 0,
    "dx7_freq_multiplier": 1.0,
    "dx7_transpose": 0,
    "dx7_fine_tune": 0,
    "dx7_env_time_scale": 1.0,
    "dx7_pitch_env_scale": 0,
    "dx7_attack_scale": 1.0,
    "dx7_release_scale": 1.0,
}

CLEARED_FIELDS: dict[str, object] = {
    "dx7_patch": None,
    "dx7_patch_name": None,
    "dx7_patch_index": None,
    "dx7_bank_size": 0,
}


def _reject(logger: AppLogger | None, message: str) -> bool:
    if logger:
        logger.patch(message)
    return False


def _validate(state: InstrumentState, voice_index: int, patch: FmPatch | None,
              index: int | None, bank_size: int | None,
              logger: AppLogger | None) -> bool:
    if not isinstance(voice_index, int) or not 0 <= voice_index < state.voice_count:
        return _reject(logger, f"Invalid voice index: {voice_index}")
    if patch is None:
        return _reject(logger, "Patch is missing")
    if not isinstance(patch, FmPatch) or not patch.is_complete():
        return _reject(logger, f"Patch must carry {OPERATOR_COUNT} complete operators")
    if not isinstance(index, int) or isinstance(index, bool) or index < 0:
        return _reject(logger, f"Invalid patch index: {index}")
    if not isinstance(bank_size, int) or not bank_size or index >= bank_size:
        return _reject(logger, f"Patch index {index} out of bounds (bank size: {bank_size})")
    return True


def stage_patch_fields(voice: Voice, patch: FmPatch, index: int, bank_size: int,
                       bank_copy: list[FmPatch] | None = None,
                       bank_name: str | None = None) -> dict[str, object]:
    """Compute every field a patch load will write, without touching the voice."""
    staged: dict[str, object] = {
        "engine": Engine.DX7,
        "dx7_patch": patch,
        "dx7_patch_name": patch.display_name or f"Patch {index + 1}",
        "dx7_patch_index": index,
        "dx7_bank_size": bank_size,
    }
    if bank_copy:
        staged["dx7_bank"] = bank_copy
        staged["dx7_bank_name"] = bank_name
    for name, neutral in NEUTRAL_MODIFIERS.items():
        if getattr(voice, name, None) is None:
            staged[name] = neutral
    if patch.algorithm is not None:
        staged["dx7_algorithm"] = patch.algorithm
    return staged


def set_complex_patch(state: InstrumentState, voice_index: int, patch: FmPatch | None,
                      index: int | None, bank_size: int | None,
                      bank_copy: list[FmPatch] | None = None,
                      bank_name: str | None = None,
                      logger: AppLogger | None = None) -> bool:
    """Load ``patch`` into a voice, either completely or not at all."""
    if not _validate(state, voice_index, patch, index, bank_size, logger):
        return False
    voice = state.voices[voice_index]
    try:
        staged = stage_patch_fields(voice, patch, index, bank_size, bank_copy, bank_name)
    except (AttributeError, TypeError) as exc:
        return _reject(logger, f"Malformed patch: {exc}")

    try:
        for name, value in staged.items():
            setattr(voice, name, value)
    except Exception as exc:
        for name, value in CLEARED_FIELDS.items():
            object.__setattr__(voice, name, value)
        return _reject(logger, f"Failed to set patch on voice {voice_index}, cleared: {exc}")

    if logger:
        logger.patch(f"Voice {voice_index + 1}: {staged['dx7_patch_name']} ({index + 1}/{bank_size})")
    return True


def clear_complex_patch(state: InstrumentState, voice_index: int,
                        logger: AppLogger | None = None) -> None:
    voice = state.voice(voice_index) if isinstance(voice_index, int) else None
    if voice is None:
        return
    for name, value in CLEARED_FIELDS.items():
        setattr(voice, name, value)
    if logger:
        logger.patch(f"Voice {voice_index + 1}: patch cleared")


def select_bank_patch(state: InstrumentState, voice_index: int, index: int,
                      logger: AppLogger | None = None) -> bool:
    """Load a patch from the voice's own bank copy by position."""
    voice = state.voice(voice_index) if isinstance(voice_index, int) else None
    if voice is None or not voice.dx7_bank:
        return False
    if not 0 <= index < len(voice.dx7_bank):
        return _reject(logger, f"Bank slot {index} out of range for voice {voice_index}")
    return set_complex_patch(state, voice_index, voice.dx7_bank[index], index,
                             len(voice.dx7_bank), logger=logger)


def load_bank(state: InstrumentState, voice_index: int, bank: PatchBank, index: int = 0,
              logger: AppLogger | None = None) -> bool:
    """Give the voice its own copy of ``bank`` and load slot ``index`` from it."""
    patches = bank.copy()
    patch = patches[index] if isinstance(index, int) and 0 <= index < len(patches) else None
    return set_complex_patch(state, voice_index, patch, index, len(patches),
                             bank_copy=patches, bank_name=bank.name, logger=logger)
