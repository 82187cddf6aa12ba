"""The instrument's single mutable state tree.

Everything the parameter registry addresses lives here: the six voices and
their sequences, the time settings mirrored from the shared clock, the
effect records, and the sparse per-parameter modulation table.
"""
from __future__ import annotations
from dataclasses import dataclass, field

from model.sequence import Sequence
from model.voice import VOICE_COUNT, Voice, default_voices


@dataclass
class ReverbSettings:
    mix: float = 100
    decay: float = 50
    damping: float = 50
    diffusion: float = 60
    pre_delay: float = 10


@dataclass
class DelaySettings:
    mix: float = 100
    time: float = 25
    feedback: float = 0
    time_free: float = 50
    sync_enabled: bool = True
    wow: float = 10
    flutter: float = 5
    saturation: float = 0
    filter: float = 50


@dataclass
class CloudsSettings:
    position: float = 50
    size: float = 50
    density: float = 50
    texture: float = 50
    pitch: float = 50
    spread: float = 0
    feedback: float = 0
    reverb: float = 0
    dry_wet: float = 0
    input_gain: float = 50
    freeze: bool = False
    mode: int = 0      # 0=granular, 1=WSOLA, 2=looping, 3=spectral
    quality: int = 0   # 0=high .. 3=xlow


@dataclass
class DrumBusSettings:
    enabled: bool = True
    drive_type: int = 0  # 0=soft, 1=med, 2=hard
    drive_amount: float = 0
    crunch: float = 0
    transients: float = 50
    boom_amount: float = 0
    boom_freq: float = 33
    boom_decay: float = 50
    comp_enabled: bool = False
    dampen_freq: float = 100
    trim_gain: float = 50
    output_gain: float = 75
    dry_wet: float = 100


@dataclass
class InstrumentState:
    selected_voice: int | None = 0

    # Mirrored from the shared clock; written only through its signals
    bpm: float = 120
    swing: float = 0
    bar_length: int = 4

    voices: list[Voice] = field(default_factory=default_voices)
    sequences: list[Sequence] = field(
        default_factory=lambda: [Sequence() for _ in range(VOICE_COUNT)]
    )

    reverb: ReverbSettings = field(default_factory=ReverbSettings)
    delay: DelaySettings = field(default_factory=DelaySettings)
    clouds: CloudsSettings = field(default_factory=CloudsSettings)
    drum_bus: DrumBusSettings = field(default_factory=DrumBusSettings)
    fx_mode: str = "classic"

    # Sparse: parameter id -> ModulationDescriptor
    modulations: dict = field(default_factory=dict)

    @property
    def voice_count(self) -> int:
        return len(self.voices)

    def voice(self, index: int) -> Voice | None:
        if 0 <= index < len(self.voices):
            return self.voices[index]
        return None
