import json

import pytest

from blockudoku.game import JsonHighScoreStore, JsonSettingsFile, ScoreManager, ThemePreference


def test_missing_file_loads_zero(tmp_path):
    assert JsonHighScoreStore(str(tmp_path / "none.json")).load() == 0


def test_save_then_load_uses_fixed_key(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    store = JsonHighScoreStore(str(path))
    store.save(420)
    assert json.loads(path.read_text()) == {"highScore": 420}
    assert JsonHighScoreStore(str(path)).load() == 420


def test_other_keys_are_preserved(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({"theme": "light"}))
    JsonHighScoreStore(str(path)).save(7)
    assert json.loads(path.read_text()) == {"theme": "light", "highScore": 7}


def test_corrupt_file_is_treated_as_no_high_score(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json")
    assert JsonHighScoreStore(str(path)).load() == 0
    path.write_text(json.dumps({"highScore": "lots"}))
    assert JsonHighScoreStore(str(path)).load() == 0


def test_score_manager_reads_stored_high_score(tmp_path):
    path = tmp_path / "storage.json"
    JsonHighScoreStore(str(path)).save(300)
    manager = ScoreManager(store=JsonHighScoreStore(str(path)))
    assert manager.high_score == 300


def test_theme_shares_file_with_high_score(tmp_path):
    path = tmp_path / "storage.json"
    settings = JsonSettingsFile(str(path))
    JsonHighScoreStore(str(path)).save(50)
    ThemePreference(settings).save("light")
    assert json.loads(path.read_text()) == {"highScore": 50, "blockudoku-theme": "light"}
    assert ThemePreference(JsonSettingsFile(str(path))).load() == "light"
    assert JsonHighScoreStore(str(path)).load() == 50


def test_theme_defaults_to_dark(tmp_path):
    path = tmp_path / "storage.json"
    assert ThemePreference(JsonSettingsFile(str(path))).load() == "dark"
    path.write_text(json.dumps({"blockudoku-theme": "neon"}))
    assert ThemePreference(JsonSettingsFile(str(path))).load() == "dark"
    assert ThemePreference().load() == "dark"
    with pytest.raises(ValueError):
        ThemePreference().save("neon")
