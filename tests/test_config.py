"""Tests for configuration loading."""

import json

from hue_hacking.config import HueConfig, load_config


def test_defaults():
    config = HueConfig()
    assert config.ip == "localhost"
    assert config.key == "testapp"
    assert config.number_of_lamps == 3
    assert config.retrieve_initial_state is False
    assert config.transition_time == 400
    assert config.timeout == 2000


def test_from_dict_falls_back_on_empty_values():
    config = HueConfig.from_dict({"ip": "10.0.0.2", "number_of_lamps": 0, "timeout": None})
    assert config.ip == "10.0.0.2"
    assert config.number_of_lamps == 3
    assert config.timeout == 2000


def test_from_dict_ignores_unknown_options(caplog):
    config = HueConfig.from_dict({"key": "abc", "colour": "red"})
    assert config.key == "abc"
    assert "colour" in caplog.text


def test_load_config_from_file(tmp_path, monkeypatch):
    monkeypatch.delenv("HUE_BRIDGE_IP", raising=False)
    monkeypatch.delenv("HUE_API_KEY", raising=False)
    options = tmp_path / "options.json"
    options.write_text(json.dumps({"ip": "192.168.1.5", "key": "k", "retrieve_initial_state": True}))

    config = load_config(str(options))
    assert config.ip == "192.168.1.5"
    assert config.key == "k"
    assert config.retrieve_initial_state is True


def test_environment_overrides_file(tmp_path, monkeypatch):
    options = tmp_path / "options.json"
    options.write_text(json.dumps({"ip": "192.168.1.5", "key": "k"}))
    monkeypatch.setenv("HUE_OPTIONS", str(options))
    monkeypatch.setenv("HUE_BRIDGE_IP", "10.1.1.1")
    monkeypatch.setenv("HUE_API_KEY", "secret")

    config = load_config()
    assert config.ip == "10.1.1.1"
    assert config.key == "secret"


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("HUE_BRIDGE_IP", raising=False)
    monkeypatch.delenv("HUE_API_KEY", raising=False)
    assert load_config(str(tmp_path / "missing.json")) == HueConfig()
