"""Modulation descriptors: the common routing fields plus one settings object per mode.

The modulation sources themselves (LFO, envelope, random ...) are evaluated
elsewhere; a descriptor only records how a parameter is routed and the value
to restore when the routing is removed.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass, field, fields
from enum import Enum


class ModMode(str, Enum):
    LFO = "LFO"
    RANDOM = "RND"
    ENVELOPE = "ENV"
    FOLLOWER = "EF"
    TURING = "TM"
    STEP = "SEQ"

    @classmethod
    def parse(cls, value: object) -> ModMode | None:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class LfoSettings:
    waveform: int = 0          # 0=sine 1=tri 2=square 3=saw 4=ramp 5=s&h
    rate: float = 1.0          # Hz
    sync: bool = False
    reset_mode: str = "off"    # "off", "step", "accent", "bar"
    trigger_source: str = "none"


@dataclass
class RandomSettings:
    bit_length: int = 16       # 4, 8 or 16
    probability: float = 100
    sample_rate: float = 1000  # Hz


@dataclass
class EnvelopeSettings:
    attack_ms: float = 10
    release_ms: float = 200
    curve_shape: str = "exponential"
    source: str = "noteOn"


@dataclass
class FollowerSettings:
    attack_ms: float = 10
    release_ms: float = 100
    sensitivity: float = 100
    source: str = "input"


@dataclass
class TuringSettings:
    length: int = 8
    probability: float = 50
    pattern: list[float] | None = None
    lfsr_state: int | None = None


@dataclass
class StepSettings:
    length: int = 4
    pattern: list[float] = field(default_factory=lambda: [0.5] * 4)


ModSettings = LfoSettings | RandomSettings | EnvelopeSettings | FollowerSettings | TuringSettings | StepSettings

MODE_SETTINGS: dict[ModMode, type] = {
    ModMode.LFO: LfoSettings,
    ModMode.RANDOM: RandomSettings,
    ModMode.ENVELOPE: EnvelopeSettings,
    ModMode.FOLLOWER: FollowerSettings,
    ModMode.TURING: TuringSettings,
    ModMode.STEP: StepSettings,
}


def default_settings(mode: ModMode) -> ModSettings:
    return MODE_SETTINGS[mode]()


def _settings_from_dict(mode: ModMode, data: dict | None) -> ModSettings:
    cls = MODE_SETTINGS[mode]
    if not data:
        return cls()
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ModulationDescriptor:
    mode: ModMode = ModMode.LFO
    enabled: bool = False
    depth: float = 0       # 0-100
    offset: float = 0      # -100..100
    muted: bool = False
    # Pre-modulation value: scalar for global parameters, one per voice otherwise
    base_value: object = None
    base_values: list | None = None
    settings: ModSettings = field(default_factory=LfoSettings)

    def switch_mode(self, mode: ModMode) -> None:
        """Replace the mode-specific settings; common fields are kept."""
        self.mode = mode
        self.settings = default_settings(mode)

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "enabled": self.enabled,
            "depth": self.depth,
            "offset": self.offset,
            "muted": self.muted,
            "base_value": self.base_value,
            "base_values": list(self.base_values) if self.base_values is not None else None,
            "settings": asdict(self.settings),
        }

    @classmethod
    def from_dict(cls, data: dict) -> ModulationDescriptor:
        # Older saves carry no mode; those were all LFO routings
        mode = ModMode.parse(data.get("mode")) or ModMode.LFO
        base_values = data.get("base_values")
        return cls(
            mode=mode,
            enabled=bool(data.get("enabled", False)),
            depth=data.get("depth", 0),
            offset=data.get("offset", 0),
            muted=bool(data.get("muted", False)),
            base_value=data.get("base_value"),
            base_values=list(base_values) if base_values is not None else None,
            settings=_settings_from_dict(mode, data.get("settings")),
        )
