import pytest
from core.config import AppConfig
from engines.types import Engine
from model.patch import FmPatch, PatchBank
from model.patch_assign import load_bank
from model.state import InstrumentState
from model.voice import Voice
from modulation.descriptor import ModMode, RandomSettings
from modulation.table import ModulationTable
from params.controller import ParamController
from params.registry import ParamMap


@pytest.fixture
def state():
    return InstrumentState()


@pytest.fixture
def controller(state):
    return ParamController(state)


@pytest.fixture
def table(controller):
    return ModulationTable(controller)


def test_enable_creates_lfo_descriptor(table, state):
    d = table.enable_modulation("effects.delayTime")
    assert d.mode is ModMode.LFO
    assert d.enabled
    assert d.base_value == state.delay.time
    assert state.modulations["effects.delayTime"] is d


def test_enable_snapshots_every_voice(table, state):
    d = table.enable_modulation("voice.level")
    assert d.base_values == [v.level for v in state.voices]
    assert d.base_value is None


def test_enable_rejects_unmodulatable(table, state):
    assert table.enable_modulation("effects.cloudsMode") is None
    assert table.enable_modulation("voice.nope") is None
    assert state.modulations == {}


def test_enable_twice_keeps_snapshot(table, controller):
    d = table.enable_modulation("effects.delayTime")
    controller.write("effects.delayTime", 90)
    assert table.enable_modulation("effects.delayTime") is d
    assert d.base_value == 25


@pytest.mark.parametrize("param_id", [p.name for p in ParamMap().modulatable()])
def test_enable_disable_round_trip(table, controller, state, param_id):
    param = controller.get(param_id)
    if param.voice_param:
        before = [controller.read_for_voice(param_id, i) for i in range(state.voice_count)]
    else:
        before = controller.read(param_id)
    table.enable_modulation(param_id)
    # simulate the modulation source moving the value
    if param.voice_param:
        controller.apply_to_all(param_id, param.max_val)
    else:
        controller.write(param_id, param.max_val)
    assert table.disable_modulation(param_id)
    if param.voice_param:
        after = [controller.read_for_voice(param_id, i) for i in range(state.voice_count)]
    else:
        after = controller.read(param_id)
    assert after == before
    assert table.get_modulation_descriptor(param_id) is None


def test_round_trip_leaves_unpatched_index_alone(table, state):
    table.enable_modulation("voice.dx7PatchIndex")
    table.disable_modulation("voice.dx7PatchIndex")
    assert state.voices[0].dx7_patch_index is None


def _bank():
    return PatchBank("ROM1A", [FmPatch(name=f"P{i}", voice_name=f"VOICE {i}") for i in range(8)])


def test_snapshot_keeps_absent_patch_indices(table, state):
    load_bank(state, 3, _bank(), 0)
    d = table.enable_modulation("voice.dx7PatchIndex")
    assert d.base_values == [None, None, None, 0, None, None]


def test_patch_index_round_trip_is_exact(table, controller, state):
    load_bank(state, 3, _bank(), 0)
    table.enable_modulation("voice.dx7PatchIndex")
    controller.apply_to_all("voice.dx7PatchIndex", 31)
    assert state.voices[3].dx7_patch_index == 7
    assert table.disable_modulation("voice.dx7PatchIndex")
    assert [v.dx7_patch_index for v in state.voices] == [None, None, None, 0, None, None]
    assert state.voices[3].dx7_patch_name == "VOICE 0"


def test_patch_loaded_during_routing_is_cleared_on_disable(table, state):
    table.enable_modulation("voice.dx7PatchIndex")
    load_bank(state, 0, _bank(), 2)
    assert table.disable_modulation("voice.dx7PatchIndex")
    voice = state.voices[0]
    assert voice.dx7_patch is None
    assert voice.dx7_patch_index is None
    assert voice.dx7_bank_size == 0


def test_disable_unknown(table):
    assert table.disable_modulation("effects.delayTime") is False


def test_set_mode_replaces_settings_only(table):
    d = table.enable_modulation("effects.cloudsDensity")
    d.depth = 80
    d.settings.rate = 4.0
    assert table.set_modulation_mode("effects.cloudsDensity", "RND")
    assert isinstance(d.settings, RandomSettings)
    assert d.depth == 80 and d.enabled
    assert d.base_value == 50
    assert table.set_modulation_mode("effects.cloudsDensity", "nope") is False
    assert table.set_modulation_mode("effects.cloudsSize", "LFO") is False


def test_toggle_mute_restores_base(table, controller, state):
    table.enable_modulation("effects.reverbDecay")
    controller.write("effects.reverbDecay", 5)
    assert table.toggle_mute("effects.reverbDecay") is True
    assert state.reverb.decay == 50
    assert table.toggle_mute("effects.reverbDecay") is False
    assert table.toggle_mute("effects.reverbDamping") is None


def test_set_depth_auto_enables(table, state):
    assert table.set_depth("voice.pan", 30)
    d = table.get_modulation_descriptor("voice.pan")
    assert d.enabled and d.depth == 30
    assert d.base_values == [v.pan for v in state.voices]


def test_set_depth_zero_restores_and_disables(table, controller, state):
    table.set_depth("voice.drive", 60)
    controller.apply_to_all("voice.drive", 99)
    assert table.set_depth("voice.drive", 0)
    d = table.get_modulation_descriptor("voice.drive")
    assert not d.enabled
    assert d.base_values is None
    assert [v.drive for v in state.voices] == [0, 20, 0, 0, 0, 0]


def test_set_depth_clamps(table):
    table.set_depth("effects.delayWow", 250)
    assert table.get_modulation_descriptor("effects.delayWow").depth == 100


def test_set_offset(table):
    table.enable_modulation("effects.delayWow")
    assert table.set_offset("effects.delayWow", -300)
    assert table.get_modulation_descriptor("effects.delayWow").offset == -100
    assert table.set_offset("effects.delayFlutter", 10) is False


def test_update_base_value(table, state):
    table.enable_modulation("voice.gate")
    state.selected_voice = 2
    assert table.update_base_value("voice.gate", 44.4)
    assert table.get_modulation_descriptor("voice.gate").base_values[2] == 44
    assert table.update_base_value("voice.gate", 10, voice_index=5)
    assert table.get_modulation_descriptor("voice.gate").base_values[5] == 10
    assert table.update_base_value("voice.gate", 10, voice_index=8) is False
    assert table.update_base_value("voice.gate", "x") is False


def test_update_base_value_global(table):
    table.enable_modulation("effects.delayTime")
    assert table.update_base_value("effects.delayTime", 150)
    assert table.get_modulation_descriptor("effects.delayTime").base_value == 100


def test_modulated_value(table):
    d = table.enable_modulation("effects.delayFeedback")
    d.depth = 100
    table.update_base_value("effects.delayFeedback", 50)
    assert table.modulated_value("effects.delayFeedback", 1.0) == pytest.approx(100)
    assert table.modulated_value("effects.delayFeedback", -0.5) == pytest.approx(25)
    d.offset = 20
    assert table.modulated_value("effects.delayFeedback", 0) == pytest.approx(70)
    assert table.modulated_value("effects.delayFeedback", 1.0) == pytest.approx(100)


def test_modulated_value_per_voice(table, state):
    state.voices[1] = Voice.for_engine(Engine.ANALOG_SNARE)
    d = table.enable_modulation("voice.level")
    d.depth = 50
    assert table.modulated_value("voice.level", 1.0, voice_index=1) == pytest.approx(75 + 25)
    assert table.modulated_value("voice.level", -1.0, voice_index=1) == pytest.approx(50)


def test_modulated_value_inactive_returns_base(table):
    d = table.enable_modulation("effects.delayFeedback")
    d.depth = 80
    d.muted = True
    assert table.modulated_value("effects.delayFeedback", 1.0) == 0
    assert table.modulated_value("effects.delayWow", 1.0) is None


def test_config_defaults_used(controller, tmp_path):
    config = AppConfig(path=tmp_path / "config.json")
    config.default_mod_depth = 20
    config.default_mod_mode = "ENV"
    table = ModulationTable(controller, config)
    d = table.enable_modulation("effects.delayTime")
    assert d.depth == 20
    assert d.mode is ModMode.ENVELOPE


def test_dump_and_load(table, state):
    table.enable_modulation("effects.delayTime")
    table.set_modulation_mode("effects.delayTime", ModMode.STEP)
    saved = table.dump()
    saved["voice.nope"] = {"mode": "LFO"}
    saved["effects.cloudsMode"] = {}
    state.modulations.clear()
    assert table.load(saved) == 1
    assert table.get_modulation_descriptor("effects.delayTime").mode is ModMode.STEP
