from __future__ import annotations

import json

from satellite.engine.personas import DEFAULT_PERSONA, PersonaLibrary


def test_missing_persona_uses_default(personas):
    profile = personas.load(1)

    assert profile == DEFAULT_PERSONA
    assert profile.name == "NXR AI"
    assert profile.interests == ["technology", "exploration"]


def test_malformed_persona_uses_default(personas):
    personas.persona_path(2).write_text("{not json", encoding="utf-8")
    personas.persona_path(3).write_text(json.dumps({"name": "X", "interests": "not-a-list"}), encoding="utf-8")

    assert personas.load(2) == DEFAULT_PERSONA
    assert personas.load(3) == DEFAULT_PERSONA


def test_default_is_not_shared_between_callers(personas):
    profile = personas.load(1)
    profile.interests.append("mutated")

    assert personas.load(1).interests == ["technology", "exploration"]


def test_persona_routines_are_synced_to_the_routine_table(personas):
    persona = {
        "name": "Nova",
        "tone": "warm",
        "interests": ["gardens"],
        "emotions": False,
        "routines": {"08:30": "good morning", "22:00": "good night"},
    }
    personas.persona_path(4).write_text(json.dumps(persona), encoding="utf-8")

    profile = personas.load(4)

    assert profile.name == "Nova"
    assert profile.emotions is False
    assert json.loads(personas.routine_path(4).read_text(encoding="utf-8")) == persona["routines"]
    assert personas.load_routine(4) == persona["routines"]


def test_persona_without_routines_leaves_routine_file_alone(personas):
    personas.routine_path(5).write_text(json.dumps({"10:00": "hand written"}), encoding="utf-8")
    personas.persona_path(5).write_text(json.dumps({"name": "Quiet"}), encoding="utf-8")

    personas.load(5)

    assert personas.load_routine(5) == {"10:00": "hand written"}


def test_load_routine_skips_bad_entries(personas):
    personas.routine_path(6).write_text(
        json.dumps({"14:00": "say hello", "2pm": "nope", "15:00": 3, "16:00": "  "}),
        encoding="utf-8",
    )
    personas.routine_path(7).write_text("[1, 2, 3]", encoding="utf-8")
    personas.routine_path(8).write_text("{broken", encoding="utf-8")

    assert personas.load_routine(6) == {"14:00": "say hello"}
    assert personas.load_routine(7) == {}
    assert personas.load_routine(8) == {}
    assert personas.load_routine(99) == {}


def test_ensure_dirs_creates_both_folders(tmp_path):
    library = PersonaLibrary(tmp_path / "p", tmp_path / "r")
    library.ensure_dirs()

    assert (tmp_path / "p").is_dir()
    assert (tmp_path / "r").is_dir()
