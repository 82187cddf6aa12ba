"""Generic get/set of registered parameters against the instrument state.

Every public method reports failure with ``None``/``False`` and logs the
reason; nothing here raises for bad ids, bad paths or bad voice indices.
"""
from __future__ import annotations
from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from typing import Protocol

from core.config import AppConfig
from core.logger import AppLogger
from engines import macros
from model import patch_assign
from model.state import InstrumentState
from params.paths import Indexed, ResolvedSegment, has_voice_placeholder, resolve_path, valid_voice
from params.registry import ParamDef, ParamMap

# Written through the shared clock, never directly into the tree
CLOCK_PARAMS = {
    "time.bpm": "set_tempo",
    "time.swing": "set_swing",
    "time.length": "set_bar_length",
}

# Written only by loading from the voice's bank
PATCH_INDEX_PARAM = "voice.dx7PatchIndex"

# Per-voice routing that must stay individual
CONTROL_ALL_EXCLUSIONS = frozenset({
    "voice.chokeGroup",
    "voice.pan",
    PATCH_INDEX_PARAM,
})

_MISSING = object()


class ClockSink(Protocol):
    def set_tempo(self, bpm: float) -> None: ...
    def set_swing(self, swing: float) -> None: ...
    def set_bar_length(self, beats: int) -> None: ...


def allows_control_all(param_id: str) -> bool:
    return param_id not in CONTROL_ALL_EXCLUSIONS


@contextmanager
def voice_scope(state: InstrumentState, voice_index: int) -> Iterator[None]:
    """Temporarily select ``voice_index``; the outer selection is always restored.

    Scopes must not overlap: the restore writes back the single saved value.
    """
    saved = state.selected_voice
    state.selected_voice = voice_index
    try:
        yield
    finally:
        state.selected_voice = saved


def _child(node: object, name: str) -> object:
    if isinstance(node, Mapping):
        return node.get(name, _MISSING)
    return getattr(node, name, _MISSING)


class ParamController:
    def __init__(self, state: InstrumentState | None = None, params: ParamMap | None = None,
                 clock: ClockSink | None = None, config: AppConfig | None = None,
                 logger: AppLogger | None = None) -> None:
        self.state = state if state is not None else InstrumentState()
        self.params = params or ParamMap()
        self.clock = clock
        self.logger = logger
        self.strict_voice_selection = bool(config and config.strict_voice_selection)

    # -- helpers --

    def _fail(self, message: str) -> bool:
        if self.logger:
            self.logger.param(message)
        return False

    def _resolve(self, param: ParamDef, voice: int | None) -> tuple[ResolvedSegment, ...] | None:
        if has_voice_placeholder(param.segments) and not valid_voice(voice, self.state.voice_count):
            if self.logger:
                fallback = "rejected" if self.strict_voice_selection else "using voice 1"
                self.logger.param(f"Invalid selected voice {voice!r} for {param.name}, {fallback}")
        return resolve_path(param.segments, voice, self.state.voice_count,
                            strict=self.strict_voice_selection)

    def _effective_voice(self, voice: int | None) -> int | None:
        if valid_voice(voice, self.state.voice_count):
            return voice
        return None if self.strict_voice_selection else 0

    def _read_at(self, param: ParamDef, voice: int | None, raw: bool = False):
        # raw reads report an absent or None leaf as None instead of the default
        missing = None if raw else param.default
        path = self._resolve(param, voice)
        if path is None:
            return missing
        node: object = self.state
        for seg in path:
            node = _child(node, seg.name)
            if node is _MISSING or node is None:
                return missing
            if isinstance(seg, Indexed):
                if not isinstance(node, (list, tuple)) or not 0 <= seg.index < len(node):
                    return missing
                node = node[seg.index]
                if node is None:
                    return missing
        return node

    def _assign(self, param: ParamDef, value: object, voice: int | None) -> bool:
        path = self._resolve(param, voice)
        if path is None:
            return False
        try:
            node: object = self.state
            for seg in path[:-1]:
                node = _child(node, seg.name)
                if node is _MISSING or node is None:
                    return False
                if isinstance(seg, Indexed):
                    if not isinstance(node, list) or not 0 <= seg.index < len(node):
                        return False
                    node = node[seg.index]
            last = path[-1]
            if isinstance(last, Indexed):
                target = _child(node, last.name)
                if not isinstance(target, list) or not 0 <= last.index < len(target):
                    return False
                target[last.index] = value
            elif isinstance(node, MutableMapping):
                node[last.name] = value
            else:
                setattr(node, last.name, value)
        except (AttributeError, TypeError, IndexError, KeyError):
            return False
        return True

    def _select_patch(self, value: int, voice: int | None) -> bool:
        """Patch slots are only ever changed by loading from the voice's bank."""
        voice_index = self._effective_voice(voice)
        if voice_index is None:
            return self._fail(f"Invalid voice {voice!r} for {PATCH_INDEX_PARAM}")
        bank = self.state.voices[voice_index].dx7_bank
        if not bank:
            return self._fail(f"Voice {voice_index + 1} has no patch bank")
        index = min(value, len(bank) - 1)
        return patch_assign.select_bank_patch(self.state, voice_index, index, self.logger)

    # -- registry surface --

    def list_parameters(self) -> list[ParamDef]:
        return self.params.list_all()

    def get(self, param_id: str) -> ParamDef | None:
        return self.params.get(param_id)

    def read(self, param_id: str):
        """Current value at the parameter's path, or its default when absent."""
        param = self.params.get(param_id)
        if param is None:
            return None
        return self._read_at(param, self.state.selected_voice)

    def read_for_voice(self, param_id: str, voice_index: int):
        param = self.params.get(param_id)
        if param is None or not param.voice_param:
            return None
        if not valid_voice(voice_index, self.state.voice_count):
            return None
        return self._read_at(param, voice_index)

    def read_raw(self, param_id: str, voice_index: int | None = None):
        """The stored leaf as-is: None when absent, never the default."""
        param = self.params.get(param_id)
        if param is None:
            return None
        if param.voice_param:
            if not valid_voice(voice_index, self.state.voice_count):
                return None
            return self._read_at(param, voice_index, raw=True)
        return self._read_at(param, None, raw=True)

    def write(self, param_id: str, value: object) -> bool:
        param = self.params.get(param_id)
        if param is None:
            return self._fail(f"Unknown parameter: {param_id}")
        if not param.accepts(value):
            return self._fail(f"Rejected value {value!r} for {param_id}")
        value = param.constrain(value)

        setter = CLOCK_PARAMS.get(param_id)
        if setter is not None:
            if self.clock is None:
                return self._fail(f"No clock attached for {param_id}")
            getattr(self.clock, setter)(value)
            return True

        voice = self.state.selected_voice
        if param_id == PATCH_INDEX_PARAM:
            return self._select_patch(value, voice)
        if not self._assign(param, value, voice):
            return self._fail(f"Could not write {param_id} at {param.path}")
        if macros.is_macro_param(param_id):
            voice_index = self._effective_voice(voice)
            if voice_index is not None:
                macros.apply_one(param_id, self.state.voices[voice_index], self.logger)
        return True

    def restore(self, param_id: str, value: object, voice_index: int | None = None) -> bool:
        """Put back a value captured by ``read_raw``, including an absent (None) one."""
        param = self.params.get(param_id)
        if param is None:
            return self._fail(f"Unknown parameter: {param_id}")
        if param.voice_param and not valid_voice(voice_index, self.state.voice_count):
            return self._fail(f"Invalid voice index: {voice_index!r}")
        if value is not None:
            if param.voice_param:
                return self.write_for_voice(param_id, value, voice_index)
            return self.write(param_id, value)
        if param_id == PATCH_INDEX_PARAM:
            patch_assign.clear_complex_patch(self.state, voice_index, self.logger)
            return True
        return self._assign(param, None, voice_index)

    def write_for_voice(self, param_id: str, value: object, voice_index: int) -> bool:
        """Write as if ``voice_index`` were selected, leaving the selection untouched."""
        param = self.params.get(param_id)
        if param is None:
            return self._fail(f"Unknown parameter: {param_id}")
        if not param.voice_param:
            return self._fail(f"{param_id} is not a voice parameter")
        if not valid_voice(voice_index, self.state.voice_count):
            return self._fail(f"Invalid voice index: {voice_index!r}")
        with voice_scope(self.state, voice_index):
            return self.write(param_id, value)

    def apply_to_all(self, param_id: str, value: object) -> bool:
        """Broadcast one value to every voice.

        Returns True only when every voice accepted it; earlier voices keep
        the value even if a later one fails.  Callers check
        ``is_control_all_allowed`` first.
        """
        param = self.params.get(param_id)
        if param is None or not param.voice_param:
            return self._fail(f"Cannot apply {param_id} to all voices")
        if not param.accepts(value):
            return self._fail(f"Rejected value {value!r} for {param_id}")
        value = param.constrain(value)
        count = self.state.voice_count
        successes = sum(
            1 for voice_index in range(count)
            if self.write_for_voice(param_id, value, voice_index)
        )
        return successes == count

    def is_control_all_allowed(self, param_id: str) -> bool:
        return allows_control_all(param_id)
