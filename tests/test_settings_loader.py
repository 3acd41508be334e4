import json
import os

import pytest

import settings_loader
from settings_schema import SettingsSchema

APP_SETTINGS = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "app_settings")


def test_defaults_without_file(tmp_path):
    assert settings_loader.load(str(tmp_path / "none.json")) == SettingsSchema()
    assert settings_loader.load(None).TIMEZONE == "Asia/Tokyo"


def test_file_values_and_overrides(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"PADDING_DIGITS": "3", "INPUT_ENCODING": "shift_jis", "SEED": None}),
        encoding="utf-8",
    )
    s = settings_loader.load(str(path), SEED=5, IGNORE_UNPARSEABLE=True)
    assert s.PADDING_DIGITS == 3
    assert s.INPUT_ENCODING == "shift_jis"
    assert s.SEED == 5
    assert s.IGNORE_UNPARSEABLE is True


def test_unknown_key(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"NOPE": 1}), encoding="utf-8")
    with pytest.raises(KeyError):
        settings_loader.load(str(path))


def test_bad_value(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"SHOW_PROGRESS": "yes"}), encoding="utf-8")
    with pytest.raises(TypeError):
        settings_loader.load(str(path))


def test_bundled_settings_load():
    s = settings_loader.load(os.path.join(APP_SETTINGS, "settings.json"))
    assert s.OUTPUT_SUFFIX == ".txt"
