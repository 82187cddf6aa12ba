"""Per-parameter modulation routing.

Descriptors live sparsely in ``state.modulations``, keyed by parameter id.
The base-value snapshot taken on enable is the only thing used to put a
parameter back when its routing is removed, muted or zeroed.
"""
from __future__ import annotations

from core.config import AppConfig
from core.logger import AppLogger
from modulation.descriptor import ModMode, ModulationDescriptor
from params.controller import ParamController
from params.paths import valid_voice
from params.registry import ParamDef


class ModulationTable:
    def __init__(self, controller: ParamController, config: AppConfig | None = None,
                 logger: AppLogger | None = None) -> None:
        self.controller = controller
        self.state = controller.state
        self.logger = logger or controller.logger
        self.default_depth = config.default_mod_depth if config else 50
        self.default_mode = (ModMode.parse(config.default_mod_mode) if config else None) or ModMode.LFO

    @property
    def descriptors(self) -> dict[str, ModulationDescriptor]:
        return self.state.modulations

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.modulation(message)

    def _modulatable(self, param_id: str) -> ParamDef | None:
        param = self.controller.get(param_id)
        if param is None or not param.modulatable:
            self._log(f"{param_id} cannot be modulated")
            return None
        return param

    def _snapshot(self, param: ParamDef, descriptor: ModulationDescriptor) -> None:
        # Raw leaves, so an absent value is restored as absent rather than as the default
        if param.voice_param:
            descriptor.base_values = [
                self.controller.read_raw(param.name, i)
                for i in range(self.state.voice_count)
            ]
        else:
            descriptor.base_value = self.controller.read_raw(param.name)

    def _restore(self, param: ParamDef, descriptor: ModulationDescriptor) -> None:
        # Untouched values are left alone so a read after restore matches the snapshot
        if param.voice_param:
            for i, base in enumerate(descriptor.base_values or []):
                if self.controller.read_raw(param.name, i) != base:
                    self.controller.restore(param.name, base, i)
        elif descriptor.base_value is not None:
            if self.controller.read_raw(param.name) != descriptor.base_value:
                self.controller.restore(param.name, descriptor.base_value)

    def _clear_snapshot(self, descriptor: ModulationDescriptor) -> None:
        descriptor.base_value = None
        descriptor.base_values = None

    # -- lifecycle --

    def enable_modulation(self, param_id: str) -> ModulationDescriptor | None:
        """Route modulation to ``param_id``, snapshotting its current value(s)."""
        param = self._modulatable(param_id)
        if param is None:
            return None
        descriptor = self.descriptors.get(param_id)
        if descriptor is None:
            descriptor = ModulationDescriptor(depth=self.default_depth)
            descriptor.switch_mode(self.default_mode)
            self.descriptors[param_id] = descriptor
        if descriptor.base_value is None and descriptor.base_values is None:
            self._snapshot(param, descriptor)
        descriptor.enabled = True
        self._log(f"{param_id}: {descriptor.mode.value} enabled")
        return descriptor

    def disable_modulation(self, param_id: str) -> bool:
        """Restore the snapshot and drop the routing."""
        descriptor = self.descriptors.get(param_id)
        param = self.controller.get(param_id)
        if descriptor is None or param is None:
            return False
        self._restore(param, descriptor)
        del self.descriptors[param_id]
        self._log(f"{param_id}: modulation removed")
        return True

    def set_modulation_mode(self, param_id: str, mode: ModMode | str) -> bool:
        descriptor = self.descriptors.get(param_id)
        parsed = ModMode.parse(mode)
        if descriptor is None or parsed is None:
            return False
        if descriptor.mode != parsed:
            descriptor.switch_mode(parsed)
            self._log(f"{param_id}: mode -> {parsed.value}")
        return True

    def get_modulation_descriptor(self, param_id: str) -> ModulationDescriptor | None:
        return self.descriptors.get(param_id)

    def toggle_mute(self, param_id: str) -> bool | None:
        """Flip the mute flag; muting puts the base value back. Returns the new state."""
        descriptor = self.descriptors.get(param_id)
        param = self.controller.get(param_id)
        if descriptor is None or param is None:
            return None
        descriptor.muted = not descriptor.muted
        if descriptor.muted:
            self._restore(param, descriptor)
        return descriptor.muted

    def set_depth(self, param_id: str, depth: float) -> bool:
        """Set depth 0-100.  Above zero auto-enables; zero restores and disables."""
        param = self._modulatable(param_id)
        if param is None:
            return False
        depth = max(0, min(100, depth))
        descriptor = self.descriptors.get(param_id)
        if descriptor is None:
            if depth == 0:
                return True
            descriptor = self.enable_modulation(param_id)
        descriptor.depth = depth
        if depth > 0:
            if descriptor.base_value is None and descriptor.base_values is None:
                self._snapshot(param, descriptor)
            descriptor.enabled = True
        else:
            self._restore(param, descriptor)
            self._clear_snapshot(descriptor)
            descriptor.enabled = False
        return True

    def set_offset(self, param_id: str, offset: float) -> bool:
        descriptor = self.descriptors.get(param_id)
        if descriptor is None:
            return False
        descriptor.offset = max(-100, min(100, offset))
        return True

    def update_base_value(self, param_id: str, value: float,
                          voice_index: int | None = None) -> bool:
        """Move the centre of an active routing, e.g. when its knob is turned."""
        descriptor = self.descriptors.get(param_id)
        param = self.controller.get(param_id)
        if descriptor is None or param is None or not param.accepts(value):
            return False
        value = param.constrain(value)
        if not param.voice_param:
            descriptor.base_value = value
            return True
        if voice_index is None:
            voice_index = self.state.selected_voice
        if descriptor.base_values is None or not valid_voice(voice_index, len(descriptor.base_values)):
            return False
        descriptor.base_values[voice_index] = value
        return True

    def modulated_value(self, param_id: str, wave: float, voice_index: int | None = None):
        """Value for one evaluation of the source, ``wave`` in -1..1.

        Inactive routings return the base value unchanged.
        """
        descriptor = self.descriptors.get(param_id)
        param = self.controller.get(param_id)
        if descriptor is None or param is None:
            return None
        if param.voice_param:
            if voice_index is None:
                voice_index = self.state.selected_voice
            bases = descriptor.base_values or []
            base = bases[voice_index] if valid_voice(voice_index, len(bases)) else None
            if base is None:
                base = self.controller.read_for_voice(param_id, voice_index)
        else:
            base = descriptor.base_value
            if base is None:
                base = self.controller.read(param_id)
        if base is None:
            return None
        if not descriptor.enabled or descriptor.muted or descriptor.depth == 0:
            return base
        amount = wave * descriptor.depth * 0.5 + descriptor.offset
        value = base + amount / 100 * param.range
        return max(param.min_val, min(param.max_val, value))

    # -- persistence --

    def dump(self) -> dict[str, dict]:
        return {pid: d.to_dict() for pid, d in self.descriptors.items()}

    def load(self, raw: dict[str, dict]) -> int:
        """Replace the table from saved data, skipping unknown or unmodulatable ids."""
        self.descriptors.clear()
        for pid, data in raw.items():
            param = self.controller.get(pid)
            if param is None or not param.modulatable or not isinstance(data, dict):
                self._log(f"Skipping saved routing for {pid}")
                continue
            self.descriptors[pid] = ModulationDescriptor.from_dict(data)
        return len(self.descriptors)
