from __future__ import annotations
from enum import Enum


class Engine(str, Enum):
    DX7 = "DX7"
    SAMPLE = "SAMPLE"
    SLICE = "SLICE"
    ANALOG_KICK = "aKICK"
    ANALOG_SNARE = "aSNARE"
    ANALOG_HIHAT = "aHIHAT"

    @classmethod
    def parse(cls, value: object) -> Engine | None:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Macro(str, Enum):
    PATCH = "PATCH"
    DEPTH = "DEPTH"
    RATE = "RATE"
    PITCH = "PITCH"
