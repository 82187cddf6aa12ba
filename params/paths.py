"""Typed storage paths into the instrument state tree.

A path template such as ``voices[voice].macro_depth`` is parsed once into a
tuple of segments.  ``voice`` inside the brackets is the selected-voice
placeholder and is substituted at access time by :func:`resolve_path`.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Union

VOICE_PLACEHOLDER = "voice"

_SEGMENT_RE = re.compile(r"^([A-Za-z_]\w*)(?:\[(\w+)\])?$")


@dataclass(frozen=True)
class Field:
    name: str


@dataclass(frozen=True)
class Indexed:
    name: str
    index: int


@dataclass(frozen=True)
class VoiceIndexed:
    """Collection indexed by the selected voice."""
    name: str


Segment = Union[Field, Indexed, VoiceIndexed]
ResolvedSegment = Union[Field, Indexed]


def parse_path(template: str) -> tuple[Segment, ...]:
    """Parse a dotted path template into segments.

    Raises ValueError on malformed templates; templates are static registry
    data, so a bad one is a programming error.
    """
    if not template:
        raise ValueError("Empty path template")
    segments: list[Segment] = []
    for part in template.split("."):
        m = _SEGMENT_RE.match(part)
        if m is None:
            raise ValueError(f"Malformed path segment '{part}' in '{template}'")
        name, index = m.group(1), m.group(2)
        if index is None:
            segments.append(Field(name))
        elif index == VOICE_PLACEHOLDER:
            segments.append(VoiceIndexed(name))
        elif index.isdigit():
            segments.append(Indexed(name, int(index)))
        else:
            raise ValueError(f"Unknown index '{index}' in '{template}'")
    return tuple(segments)


def has_voice_placeholder(segments: tuple[Segment, ...]) -> bool:
    return any(isinstance(seg, VoiceIndexed) for seg in segments)


def valid_voice(selected_voice: int | None, voice_count: int) -> bool:
    return (
        isinstance(selected_voice, int)
        and not isinstance(selected_voice, bool)
        and 0 <= selected_voice < voice_count
    )


def resolve_path(
    segments: tuple[Segment, ...],
    selected_voice: int | None,
    voice_count: int,
    strict: bool = False,
) -> tuple[ResolvedSegment, ...] | None:
    """Substitute the selected voice into the placeholder segments.

    An absent or out-of-range selection resolves to voice 0, unless
    ``strict`` is set, in which case None is returned.
    """
    if not has_voice_placeholder(segments):
        return segments  # type: ignore[return-value]
    if valid_voice(selected_voice, voice_count):
        index = selected_voice
    elif strict:
        return None
    else:
        index = 0
    return tuple(
        Indexed(seg.name, index) if isinstance(seg, VoiceIndexed) else seg
        for seg in segments
    )
