from __future__ import annotations
from dataclasses import dataclass, field

MAX_STEPS = 64


@dataclass
class Step:
    gate: bool = False
    accent: int = 0           # 0-15
    ratchet: int = 0          # 0-7, maps to 1-8 triggers
    probability: int = 100    # 0-100%
    deviation: int = 0        # 0-100%
    deviation_mode: int = 1   # 0=early, 1=late, 2=both


@dataclass
class EuclideanConfig:
    steps: int = 16
    fills: int = 0
    shift: int = 0
    accent_amt: int = 0
    flam_amt: int = 0
    ratchet_amt: int = 0
    ratchet_speed: int = 1
    deviation: int = 0


@dataclass
class Sequence:
    """Per-voice step storage; ``euclidean.steps`` governs the active length."""
    probability: int = 100
    current_step: int = -1
    steps: list[Step] = field(default_factory=lambda: [Step() for _ in range(MAX_STEPS)])
    euclidean: EuclideanConfig = field(default_factory=EuclideanConfig)

    @property
    def length(self) -> int:
        return max(1, min(self.euclidean.steps, len(self.steps)))

    def active_steps(self) -> list[Step]:
        return self.steps[:self.length]
