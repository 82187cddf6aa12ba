from __future__ import annotations
import math
from dataclasses import dataclass, field

from model.patch import BANK_SIZE
from params.paths import Segment, has_voice_placeholder, parse_path


def is_number(value: object) -> bool:
    """True for real numbers; bools and NaN are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def step_decimals(step: float) -> int:
    text = repr(step)
    if "e-" in text:
        return int(text.split("e-")[1])
    if "." not in text:
        return 0
    frac = text.split(".")[1].rstrip("0")
    return len(frac)


@dataclass
class ParamDef:
    name: str
    module: str
    label: str
    path: str
    min_val: float | None = None
    max_val: float | None = None
    default: object = None
    step: float | None = None
    unit: str = ""
    modulatable: bool = False
    voice_param: bool = False
    effect_param: bool = False
    kind: str = "number"  # "number", "boolean" or "enum"
    options: tuple[str, ...] | None = None
    segments: tuple[Segment, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.segments = parse_path(self.path)
        if self.voice_param and not has_voice_placeholder(self.segments):
            raise ValueError(f"Voice parameter '{self.name}' has no voice placeholder")

    @property
    def is_numeric(self) -> bool:
        return self.kind == "number"

    @property
    def range(self) -> float:
        if self.min_val is None or self.max_val is None:
            return 0.0
        return self.max_val - self.min_val

    def accepts(self, value: object) -> bool:
        if self.kind == "boolean":
            return isinstance(value, bool)
        if self.kind == "enum":
            return self.options is not None and value in self.options
        return is_number(value)

    def constrain(self, value):
        """Clamp to [min_val, max_val] and snap to the step grid from min_val.

        Non-numeric parameters and values pass through unchanged.
        """
        if not self.is_numeric or not is_number(value):
            return value
        v = float(value)
        if self.min_val is not None:
            v = max(self.min_val, v)
        if self.max_val is not None:
            v = min(self.max_val, v)
        if not self.step:
            return v
        base = self.min_val if self.min_val is not None else 0
        n = math.floor((v - base) / self.step + 0.5)
        if self.max_val is not None:
            n = min(n, math.floor((self.max_val - base) / self.step + 1e-9))
        decimals = step_decimals(self.step)
        v = round(base + n * self.step, decimals)
        if decimals == 0 and float(base).is_integer():
            return int(v)
        return v


# ---------------------------------------------------------------------------
# Parameter definitions
# ---------------------------------------------------------------------------

def _voice(name: str, module: str, label: str, attr: str, min_val: float, max_val: float,
           default: float, step: float = 1, unit: str = "", modulatable: bool = True) -> ParamDef:
    return ParamDef(name, module, label, f"voices[voice].{attr}", min_val, max_val, default,
                    step, unit=unit, modulatable=modulatable, voice_param=True)


def _euclid(name: str, label: str, attr: str, min_val: int, max_val: int,
            default: int, unit: str = "") -> ParamDef:
    return ParamDef(name, "voices", label, f"sequences[voice].euclidean.{attr}",
                    min_val, max_val, default, 1, unit=unit, modulatable=True, voice_param=True)


def _effect(name: str, module: str, label: str, path: str, default: float) -> ParamDef:
    return ParamDef(name, module, label, path, 0, 100, default, 1,
                    modulatable=True, effect_param=True)


def _bus(name: str, label: str, attr: str, default: float) -> ParamDef:
    return ParamDef(name, "bus", label, f"drum_bus.{attr}", 0, 100, default, 1)


_PARAMS: list[ParamDef] = [
    # -----------------------------------------------------------------------
    # TIME (forwarded to the shared clock on write)
    # -----------------------------------------------------------------------
    ParamDef("time.bpm", "time", "BPM", "bpm", 20, 300, 120, 1),
    ParamDef("time.swing", "time", "SWING", "swing", 0, 100, 0, 1, unit="%"),
    ParamDef("time.length", "time", "LENGTH", "bar_length", 1, 128, 4, 1, unit=" beats"),

    # -----------------------------------------------------------------------
    # Macros: PATCH, DEPTH, RATE, PITCH
    # -----------------------------------------------------------------------
    _voice("voice.macroPatch", "baeng-engine", "PATCH", "macro_patch", 0, 100, 50),
    _voice("voice.macroDepth", "baeng-engine", "DEPTH", "macro_depth", 0, 100, 50),
    _voice("voice.macroRate", "baeng-engine", "RATE", "macro_rate", 0, 100, 50),
    _voice("voice.macroPitch", "baeng-engine", "PITCH", "macro_pitch", 0, 100, 50),

    # Sampler fields shared by SAMPLE and SLICE
    _voice("voice.samplerDecay", "baeng-engine", "DECAY", "sampler_decay", 0, 100, 100),
    _voice("voice.samplerFilter", "baeng-engine", "FILTER", "sampler_filter", 0, 100, 50),

    # -----------------------------------------------------------------------
    # Voice processing & sends
    # -----------------------------------------------------------------------
    _voice("voice.level", "baeng-engine", "LEVEL", "level", 0, 100, 100),
    _voice("voice.pan", "baeng-engine", "PAN", "pan", 0, 100, 50),
    _voice("voice.chokeGroup", "voices", "CHOKE", "choke_group", 0, 4, 0),
    _voice("voice.reverbSend", "baeng-engine", "RVB", "reverb_send", 0, 100, 0),
    _voice("voice.delaySend", "baeng-engine", "DLY", "delay_send", 0, 100, 0),
    _voice("voice.cloudsSend", "baeng-engine", "CLOUD", "clouds_send", 0, 100, 0),
    _voice("voice.bitReduction", "baeng-engine", "BIT", "bit_reduction", 0, 100, 0),
    _voice("voice.drive", "baeng-engine", "DRIVE", "drive", 0, 100, 0),
    _voice("voice.gate", "voices", "GATE", "gate", 0, 100, 80, unit="%"),
    ParamDef("voice.muted", "voices", "MUTE", "voices[voice].muted", default=False,
             voice_param=True, kind="boolean"),

    # FM bank slot (cycles through the voice's bank)
    _voice("voice.dx7PatchIndex", "baeng-engine", "PATCH", "dx7_patch_index", 0, BANK_SIZE - 1, 0),

    # -----------------------------------------------------------------------
    # Sequence & Euclidean generator
    # -----------------------------------------------------------------------
    ParamDef("sequence.probability", "voices", "PROB", "sequences[voice].probability",
             0, 100, 100, 1, unit="%", modulatable=True, voice_param=True),
    _euclid("euclidean.steps", "STEPS", "steps", 1, 16, 16),
    _euclid("euclidean.fills", "FILLS", "fills", 0, 16, 0),
    _euclid("euclidean.shift", "SHIFT", "shift", 0, 15, 0),
    _euclid("euclidean.accentAmt", "ACCENT", "accent_amt", 0, 16, 0),
    _euclid("euclidean.flamAmt", "FLAM", "flam_amt", 0, 16, 0),
    _euclid("euclidean.ratchetAmt", "RATCHET", "ratchet_amt", 0, 16, 0),
    _euclid("euclidean.ratchetSpeed", "R-SPD", "ratchet_speed", 1, 8, 1),
    _euclid("euclidean.deviation", "DEV", "deviation", 0, 100, 0, unit="%"),

    # -----------------------------------------------------------------------
    # Reverb / delay
    # -----------------------------------------------------------------------
    _effect("effects.reverbDecay", "reverb-fx", "DEC", "reverb.decay", 50),
    _effect("effects.reverbDamping", "reverb-fx", "DAMP", "reverb.damping", 50),
    _effect("effects.reverbDiffusion", "reverb-fx", "DIFF", "reverb.diffusion", 60),
    _effect("effects.reverbPreDelay", "reverb-fx", "PRED", "reverb.pre_delay", 10),

    _effect("effects.delayTime", "delay-fx", "TIME", "delay.time", 25),
    _effect("effects.delayFeedback", "delay-fx", "FDBK", "delay.feedback", 0),
    _effect("effects.delayTimeFree", "delay-fx", "TIME", "delay.time_free", 50),
    ParamDef("effects.delaySyncEnabled", "delay-fx", "SYNC", "delay.sync_enabled",
             default=True, kind="boolean"),
    _effect("effects.delayWow", "delay-fx", "WOW", "delay.wow", 10),
    _effect("effects.delayFlutter", "delay-fx", "FLUT", "delay.flutter", 5),
    _effect("effects.delaySaturation", "delay-fx", "SAT", "delay.saturation", 0),
    _effect("effects.delayFilter", "delay-fx", "FILT", "delay.filter", 50),

    # -----------------------------------------------------------------------
    # Granular processor
    # -----------------------------------------------------------------------
    ParamDef("effects.fxMode", "baeng-clouds-fx", "FX MODE", "fx_mode", default="classic",
             kind="enum", options=("classic", "clouds")),
    _effect("effects.cloudsPosition", "baeng-clouds-fx", "POS", "clouds.position", 50),
    _effect("effects.cloudsSize", "baeng-clouds-fx", "SIZE", "clouds.size", 50),
    _effect("effects.cloudsDensity", "baeng-clouds-fx", "DENS", "clouds.density", 50),
    _effect("effects.cloudsTexture", "baeng-clouds-fx", "TEX", "clouds.texture", 50),
    _effect("effects.cloudsPitch", "baeng-clouds-fx", "PITCH", "clouds.pitch", 50),
    _effect("effects.cloudsSpread", "baeng-clouds-fx", "SPRD", "clouds.spread", 0),
    _effect("effects.cloudsFeedback", "baeng-clouds-fx", "FB", "clouds.feedback", 0),
    _effect("effects.cloudsReverb", "baeng-clouds-fx", "VERB", "clouds.reverb", 0),
    _effect("effects.cloudsDryWet", "baeng-clouds-fx", "D/W", "clouds.dry_wet", 0),
    _effect("effects.cloudsInputGain", "baeng-clouds-fx", "IN", "clouds.input_gain", 50),
    ParamDef("effects.cloudsFreeze", "baeng-clouds-fx", "FREEZE", "clouds.freeze",
             default=False, kind="boolean"),
    ParamDef("effects.cloudsMode", "baeng-clouds-fx", "MODE", "clouds.mode", 0, 3, 0, 1),
    ParamDef("effects.cloudsQuality", "baeng-clouds-fx", "QUAL", "clouds.quality", 0, 3, 0, 1),

    # -----------------------------------------------------------------------
    # Drum bus
    # -----------------------------------------------------------------------
    _bus("bus.trimGain", "bus-trim", "trim_gain", 50),
    _bus("bus.driveAmount", "bus-drive", "drive_amount", 0),
    _bus("bus.crunch", "bus-crunch", "crunch", 0),
    _bus("bus.transients", "bus-trans", "transients", 50),
    _bus("bus.dampenFreq", "bus-damp", "dampen_freq", 100),
    _bus("bus.boomAmount", "bus-boom", "boom_amount", 0),
    _bus("bus.boomFreq", "bus-freq", "boom_freq", 33),
    _bus("bus.boomDecay", "bus-decay", "boom_decay", 50),
    _bus("bus.dryWet", "bus-dw", "dry_wet", 100),
    _bus("bus.outputGain", "bus-out", "output_gain", 75),
]


class ParamMap:
    def __init__(self, params: list[ParamDef] | None = None) -> None:
        self._params = {p.name: p for p in (_PARAMS if params is None else params)}

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def get(self, name: str) -> ParamDef | None:
        return self._params.get(name)

    def list_all(self) -> list[ParamDef]:
        return list(self._params.values())

    def by_module(self, module: str) -> list[ParamDef]:
        return [p for p in self._params.values() if p.module == module]

    def modulatable(self) -> list[ParamDef]:
        return [p for p in self._params.values() if p.modulatable]

    def voice_params(self) -> list[ParamDef]:
        return [p for p in self._params.values() if p.voice_param]

    def effect_params(self) -> list[ParamDef]:
        return [p for p in self._params.values() if p.effect_param]
