import pytest
from engines.types import Engine, Macro


@pytest.mark.parametrize("raw, expected", [
    ("aKICK", Engine.ANALOG_KICK),
    ("DX7", Engine.DX7),
    (Engine.SLICE, Engine.SLICE),
    ("kick", None),
    (None, None),
])
def test_parse(raw, expected):
    assert Engine.parse(raw) is expected


def test_engine_is_string_compatible():
    assert Engine.ANALOG_HIHAT == "aHIHAT"


def test_macro_values():
    assert [m.value for m in Macro] == ["PATCH", "DEPTH", "RATE", "PITCH"]
