from __future__ import annotations
import copy
from dataclasses import dataclass, field

OPERATOR_COUNT = 6
BANK_SIZE = 32


@dataclass
class FmOperator:
    output_level: int = 99
    freq_coarse: int = 1
    freq_fine: int = 0
    detune: int = 7
    rates: tuple[int, int, int, int] = (99, 99, 99, 99)
    levels: tuple[int, int, int, int] = (99, 99, 99, 0)


@dataclass
class FmPatch:
    """A six-operator FM voice as parsed from a bank dump."""
    name: str
    operators: list[FmOperator] = field(
        default_factory=lambda: [FmOperator() for _ in range(OPERATOR_COUNT)]
    )
    algorithm: int | None = 1
    feedback: int = 0
    voice_name: str = ""

    @property
    def display_name(self) -> str:
        return self.voice_name or self.name

    def is_complete(self) -> bool:
        return (
            isinstance(self.operators, (list, tuple))
            and len(self.operators) == OPERATOR_COUNT
            and all(isinstance(op, FmOperator) for op in self.operators)
        )


class PatchBank:
    def __init__(self, name: str, patches: list[FmPatch] | None = None) -> None:
        self.name = name
        self.patches: list[FmPatch] = list(patches or [])

    def copy(self) -> list[FmPatch]:
        """Deep copy of the patch list, for per-voice bank storage."""
        return copy.deepcopy(self.patches)
