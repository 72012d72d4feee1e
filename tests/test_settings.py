import json

import pytest

from skirmish.system.settings import Settings, SettingsData


def test_defaults_when_missing(tmp_path):
    s = Settings.load(tmp_path / "missing.json")
    assert s.data == SettingsData()
    assert s.data.critical_hit_chance == pytest.approx(1/16)


def test_partial_file_backfills(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"log_level": "debug", "seed": 9, "legacy_field": True}), encoding="utf-8")
    s = Settings.load(path)
    assert s.data.log_level == "DEBUG"
    assert s.data.seed == 9
    assert s.data.max_turns == 200


def test_invalid_values_normalized(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"log_level": "loud", "paralysis_skip_chance": 3, "max_turns": 0}), encoding="utf-8")
    data = Settings.load(path).data
    assert data.log_level == "INFO"
    assert data.paralysis_skip_chance == 0.25
    assert data.max_turns == 200


def test_corrupt_file_uses_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2", encoding="utf-8")
    assert Settings.load(path).data == SettingsData()


def test_save_round_trip_and_listeners(tmp_path):
    path = tmp_path / "settings.json"
    s = Settings.load(path)
    seen = []
    s.on_change(seen.append)
    s.data.seed = 1234
    s.save()
    assert seen == [s.data]
    assert Settings.load(path).data.seed == 1234
