"""Macro control definitions for each engine.

Each engine variant maps the 0-100 PATCH / DEPTH / RATE / PITCH knobs onto
its own synthesis fields.  The receiving engines read those fields on their
next trigger; nothing here touches audio.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Callable

from core.logger import AppLogger
from engines.types import Engine, Macro
from model.voice import Voice


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Linear:
    target: str
    min_val: float
    max_val: float

    def apply(self, voice: Voice, macro_value: float) -> None:
        normalized = macro_value / 100
        setattr(voice, self.target, self.min_val + (self.max_val - self.min_val) * normalized)


@dataclass(frozen=True)
class Discrete:
    target: str
    min_val: int
    max_val: int

    def apply(self, voice: Voice, macro_value: float) -> None:
        normalized = macro_value / 100
        step = math.floor(normalized * (self.max_val - self.min_val) + 0.5)
        setattr(voice, self.target, min(self.min_val + step, self.max_val))


@dataclass(frozen=True)
class CollectionIndex:
    """Index into a collection whose size is only known at apply time.

    ``count`` returns None when the collection is absent.  With no items the
    target is left alone, or forced to 0 when ``zero_when_empty`` is set.
    """
    target: str
    count: Callable[[Voice], int | None]
    zero_when_empty: bool = False

    def apply(self, voice: Voice, macro_value: float) -> None:
        count = self.count(voice) or 0
        if count <= 0:
            if self.zero_when_empty:
                setattr(voice, self.target, 0)
            return
        index = math.floor((macro_value / 100) * count)
        setattr(voice, self.target, max(0, min(count - 1, index)))


@dataclass(frozen=True)
class Normalized:
    """Store the macro as 0-1; the engine interprets it."""
    target: str

    def apply(self, voice: Voice, macro_value: float) -> None:
        setattr(voice, self.target, macro_value / 100)


@dataclass(frozen=True)
class Semitones:
    """Master transpose, -24..+24 semitones rounded to whole steps."""
    target: str

    def apply(self, voice: Voice, macro_value: float) -> None:
        normalized = macro_value / 100
        setattr(voice, self.target, math.floor(-24 + normalized * 48 + 0.5))


Transform = Linear | Discrete | CollectionIndex | Normalized | Semitones


@dataclass(frozen=True)
class MacroDef:
    label: str
    description: str
    targets: tuple[Transform, ...]


@dataclass(frozen=True)
class EngineVariant:
    engine: Engine
    macros: dict[Macro, MacroDef]
    # Macros are skipped while this returns False
    ready: Callable[[Voice], bool] = field(default=lambda voice: True)

    def apply(self, macro: Macro, macro_value: float, voice: Voice) -> bool:
        definition = self.macros.get(macro)
        if definition is None or not self.ready(voice):
            return False
        for transform in definition.targets:
            transform.apply(voice, macro_value)
        return True


def _sample_count(voice: Voice) -> int | None:
    return len(voice.sampler_buffer) if voice.sampler_buffer is not None else None


def _slice_count(voice: Voice) -> int | None:
    return voice.slice_config.count if voice.slice_config is not None else None


def _sampler_macros(patch: MacroDef) -> dict[Macro, MacroDef]:
    return {
        Macro.PATCH: patch,
        Macro.DEPTH: MacroDef("DECAY", "Envelope decay time",
                              (Linear("sampler_decay", 0, 100),)),
        Macro.RATE: MacroDef("FILTER", "Lowpass filter cutoff",
                             (Linear("sampler_filter", 0, 100),)),
        Macro.PITCH: MacroDef("PITCH", "Pitch shift in semitones",
                              (Linear("sampler_pitch", -24, 24),)),
    }


ENGINE_VARIANTS: dict[Engine, EngineVariant] = {
    # PATCH is owned by patch assignment, not by the macro
    Engine.DX7: EngineVariant(Engine.DX7, {
        Macro.DEPTH: MacroDef("DEPTH", "Modulator intensity (FM depth)",
                              (Normalized("dx7_depth"),)),
        Macro.RATE: MacroDef("RATE", "Envelope speed (attack/decay/release)",
                             (Normalized("dx7_envelope_control"),)),
        Macro.PITCH: MacroDef("PITCH", "Master tuning offset",
                              (Semitones("dx7_transpose"),)),
    }, ready=lambda voice: voice.has_complex_patch),

    Engine.ANALOG_KICK: EngineVariant(Engine.ANALOG_KICK, {
        Macro.PATCH: MacroDef("TONE", "Lowpass filter cutoff (brightness)",
                              (Linear("analog_kick_tone", 0, 100),)),
        Macro.DEPTH: MacroDef("DECAY", "Resonance and decay time",
                              (Linear("analog_kick_decay", 0, 100),)),
        Macro.RATE: MacroDef("SWEEP", "Pitch sweep amount",
                             (Linear("analog_kick_sweep", 0, 100),)),
    }),

    Engine.ANALOG_SNARE: EngineVariant(Engine.ANALOG_SNARE, {
        Macro.PATCH: MacroDef("TONE", "Modal character",
                              (Linear("analog_snare_tone", 0, 100),)),
        Macro.DEPTH: MacroDef("DECAY", "Resonance decay time",
                              (Linear("analog_snare_decay", 0, 100),)),
        Macro.RATE: MacroDef("SNAP", "Noise amount and attack sharpness",
                             (Linear("analog_snare_snap", 0, 100),)),
    }),

    Engine.ANALOG_HIHAT: EngineVariant(Engine.ANALOG_HIHAT, {
        Macro.PATCH: MacroDef("METAL", "Oscillator spread (tight to washy)",
                              (Linear("analog_hihat_metal", 0, 100),)),
        Macro.DEPTH: MacroDef("DECAY", "Decay time (closed to open)",
                              (Linear("analog_hihat_decay", 0, 100),)),
        Macro.RATE: MacroDef("BRIGHT", "Highpass filter cutoff (brightness)",
                             (Linear("analog_hihat_bright", 0, 100),)),
    }),

    Engine.SAMPLE: EngineVariant(Engine.SAMPLE, _sampler_macros(
        MacroDef("SAMPLE", "Sample selection (0-indexed)",
                 (CollectionIndex("sample_index", _sample_count),)),
    )),

    Engine.SLICE: EngineVariant(Engine.SLICE, _sampler_macros(
        MacroDef("SLICE", "Slice selection (0-indexed)",
                 (CollectionIndex("slice_index", _slice_count, zero_when_empty=True),)),
    )),
}

MACRO_PARAMS: dict[str, tuple[Macro, str]] = {
    "voice.macroPatch": (Macro.PATCH, "macro_patch"),
    "voice.macroDepth": (Macro.DEPTH, "macro_depth"),
    "voice.macroRate": (Macro.RATE, "macro_rate"),
    "voice.macroPitch": (Macro.PITCH, "macro_pitch"),
}

APPLY_ORDER = (Macro.PATCH, Macro.DEPTH, Macro.RATE, Macro.PITCH)


def is_macro_param(param_id: str) -> bool:
    return param_id in MACRO_PARAMS


def _macro_value(voice: Voice, attr: str) -> float:
    value = getattr(voice, attr, None)
    return 50 if value is None else value


def apply_macro(engine: Engine | str, macro: Macro, macro_value: float, voice: Voice) -> bool:
    """Fan one macro value out to the engine's target fields."""
    engine = Engine.parse(engine)
    if engine is None:
        return False
    return ENGINE_VARIANTS[engine].apply(macro, macro_value, voice)


def apply_one(param_id: str, voice: Voice, logger: AppLogger | None = None) -> bool:
    """Re-derive only the macro behind ``param_id``."""
    entry = MACRO_PARAMS.get(param_id)
    if entry is None:
        return False
    macro, attr = entry
    value = _macro_value(voice, attr)
    applied = apply_macro(voice.engine, macro, value, voice)
    if applied and logger:
        logger.macro(f"{Engine.parse(voice.engine).value} {macro.value} <- {value}")
    return applied


def apply_all(voice: Voice) -> None:
    """Re-derive every macro the voice's engine declares, in fixed order."""
    engine = Engine.parse(voice.engine)
    if engine is None:
        return
    variant = ENGINE_VARIANTS[engine]
    for macro in APPLY_ORDER:
        attr = f"macro_{macro.value.lower()}"
        variant.apply(macro, _macro_value(voice, attr), voice)


def switch_engine(voice: Voice, engine: Engine | str) -> bool:
    """Change the engine, keeping macro values and re-deriving under the new one."""
    parsed = Engine.parse(engine)
    if parsed is None:
        return False
    voice.engine = parsed
    apply_all(voice)
    return True


def macro_labels(engine: Engine | str) -> dict[Macro, str]:
    parsed = Engine.parse(engine)
    if parsed is None:
        return {}
    return {macro: d.label for macro, d in ENGINE_VARIANTS[parsed].macros.items()}
