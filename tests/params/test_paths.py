import pytest
from params.paths import (
    Field, Indexed, VoiceIndexed, has_voice_placeholder,
    parse_path, resolve_path, valid_voice,
)


def test_parse_plain_field():
    assert parse_path("bpm") == (Field("bpm"),)


def test_parse_voice_placeholder():
    assert parse_path("voices[voice].macro_depth") == (
        VoiceIndexed("voices"), Field("macro_depth"),
    )


def test_parse_numeric_index():
    assert parse_path("sequences[3].euclidean.steps") == (
        Indexed("sequences", 3), Field("euclidean"), Field("steps"),
    )


@pytest.mark.parametrize("template", ["", "voices[", "a..b", "voices[x-1].level", "1abc", "voices[other].x"])
def test_parse_rejects_malformed(template):
    with pytest.raises(ValueError):
        parse_path(template)


def test_has_voice_placeholder():
    assert has_voice_placeholder(parse_path("voices[voice].level"))
    assert not has_voice_placeholder(parse_path("delay.time"))


@pytest.mark.parametrize("selected, ok", [
    (0, True), (5, True), (6, False), (-1, False), (None, False), (True, False), (2.0, False),
])
def test_valid_voice(selected, ok):
    assert valid_voice(selected, 6) is ok


def test_resolve_substitutes_selected_voice():
    resolved = resolve_path(parse_path("voices[voice].level"), 3, 6)
    assert resolved == (Indexed("voices", 3), Field("level"))


def test_resolve_falls_back_to_first_voice():
    resolved = resolve_path(parse_path("voices[voice].level"), 9, 6)
    assert resolved == (Indexed("voices", 0), Field("level"))


def test_resolve_strict_rejects_bad_selection():
    assert resolve_path(parse_path("voices[voice].level"), None, 6, strict=True) is None


def test_resolve_leaves_global_paths_alone():
    segments = parse_path("clouds.position")
    assert resolve_path(segments, None, 6, strict=True) == segments
