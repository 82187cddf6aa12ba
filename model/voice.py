from __future__ import annotations
from dataclasses import dataclass, field

from engines.types import Engine
from model.patch import FmPatch

VOICE_COUNT = 6


@dataclass
class SliceConfig:
    slices: list[tuple[int, int]] = field(default_factory=list)  # (start, end) frames

    @property
    def count(self) -> int:
        return len(self.slices)


@dataclass
class Voice:
    engine: Engine = Engine.ANALOG_KICK
    output_mode: str = "OUT"   # "OUT" (808-style) or "AUX" (909-style), analog engines only
    polyphony_mode: int = 0    # 0=mono, 1-3 = 2-4 voices

    macro_patch: float = 50
    macro_depth: float = 50
    macro_rate: float = 50
    macro_pitch: float = 50

    # Analog engines
    analog_kick_tone: float = 50
    analog_kick_decay: float = 50
    analog_kick_sweep: float = 50
    analog_snare_tone: float = 50
    analog_snare_decay: float = 50
    analog_snare_snap: float = 50
    analog_hihat_metal: float = 50
    analog_hihat_decay: float = 50
    analog_hihat_bright: float = 50

    # Sample / slice players
    sample_index: int = 0
    sampler_decay: float = 100
    sampler_filter: float = 50
    sampler_pitch: float = 0
    sampler_bank: str | None = None
    sampler_buffer: list | None = None   # runtime sample list, supplied by the asset loader
    slice_index: int = 0
    slice_config: SliceConfig | None = None
    slice_buffer: object = None

    # FM engine; modifiers left as None are filled on patch load
    dx7_patch: FmPatch | None = None
    dx7_patch_name: str | None = None
    dx7_patch_index: int | None = None
    dx7_bank_size: int = 0
    dx7_bank: list[FmPatch] | None = None
    dx7_bank_name: str | None = None
    dx7_algorithm: int = 1
    dx7_feedback: int = 0
    dx7_depth: float | None = None
    dx7_envelope_control: float | None = None
    dx7_transpose: int | None = None
    dx7_fine_tune: int | None = None
    dx7_env_time_scale: float | None = None
    dx7_pitch_env_depth: float = 0
    dx7_pitch_env_scale: float | None = None
    dx7_attack_scale: float | None = None
    dx7_release_scale: float | None = None
    dx7_algorithm_offset: int | None = None
    dx7_volume_boost: float | None = None
    dx7_freq_multiplier: float | None = None

    # Common to every engine
    gate: float = 80
    pan: float = 50
    level: float = 100
    bit_reduction: float = 0
    drive: float = 0
    choke_group: int = 0
    muted: bool = False
    reverb_send: float = 0
    delay_send: float = 0
    clouds_send: float = 0

    @classmethod
    def for_engine(cls, engine: Engine | str) -> Voice:
        engine = Engine(engine)
        return cls(**ENGINE_DEFAULTS[engine])

    @property
    def has_complex_patch(self) -> bool:
        return self.dx7_patch is not None


ENGINE_DEFAULTS: dict[Engine, dict] = {
    Engine.DX7: dict(
        engine=Engine.DX7,
        macro_patch=0, macro_depth=50, macro_rate=50, macro_pitch=50,
        dx7_algorithm=1, dx7_feedback=0, dx7_transpose=0, dx7_env_time_scale=1.0,
        dx7_pitch_env_depth=0, dx7_attack_scale=1.0, dx7_release_scale=1.0,
        level=75,
    ),
    Engine.ANALOG_KICK: dict(
        engine=Engine.ANALOG_KICK,
        macro_patch=50, macro_depth=60, macro_rate=70, macro_pitch=50,
        analog_kick_tone=50, analog_kick_decay=60, analog_kick_sweep=70,
        level=85, choke_group=1,
    ),
    Engine.ANALOG_SNARE: dict(
        engine=Engine.ANALOG_SNARE,
        macro_patch=40, macro_depth=60, macro_rate=40, macro_pitch=50,
        analog_snare_tone=40, analog_snare_decay=60, analog_snare_snap=40,
        level=75, drive=20,
    ),
    Engine.ANALOG_HIHAT: dict(
        engine=Engine.ANALOG_HIHAT,
        macro_patch=30, macro_depth=10, macro_rate=60, macro_pitch=50,
        analog_hihat_metal=30, analog_hihat_decay=10, analog_hihat_bright=60,
        level=70, choke_group=2,
    ),
    Engine.SAMPLE: dict(
        engine=Engine.SAMPLE,
        macro_patch=0, macro_depth=100, macro_rate=50, macro_pitch=50,
        sample_index=0, sampler_decay=100, sampler_filter=50, sampler_pitch=0,
        level=100,
    ),
    Engine.SLICE: dict(
        engine=Engine.SLICE,
        macro_patch=0, macro_depth=100, macro_rate=50, macro_pitch=50,
        slice_index=0, sampler_decay=100, sampler_filter=50, sampler_pitch=0,
        level=100,
    ),
}

# Startup kit: kick, snare, hat, FM, sampler, slicer
DEFAULT_KIT = [
    Engine.ANALOG_KICK, Engine.ANALOG_SNARE, Engine.ANALOG_HIHAT,
    Engine.DX7, Engine.SAMPLE, Engine.SLICE,
]


def default_voices() -> list[Voice]:
    return [Voice.for_engine(engine) for engine in DEFAULT_KIT]
