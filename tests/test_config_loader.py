"""Tests for configuration loading and validation."""
import json
import os

import pytest

from sockettester.utils.config_loader import ConfigManager, DEFAULT_CONFIG, DEFAULT_LISTENERS
from sockettester.utils.path_config import CONFIG_FILENAME


def write_config(directory, data):
    with open(os.path.join(directory, CONFIG_FILENAME), "w") as f:
        if isinstance(data, str):
            f.write(data)
        else:
            json.dump(data, f)


def test_defaults_without_file(tmp_path):
    manager = ConfigManager(config_dir=str(tmp_path))
    assert manager.config == DEFAULT_CONFIG
    assert manager.get("listeners", "defaults") == DEFAULT_LISTENERS


def test_file_values_are_merged_over_defaults(tmp_path):
    write_config(tmp_path, {"transport": {"wait_timeout": 3}, "connection": {"default_url": "http://example.com"}})

    manager = ConfigManager(config_dir=str(tmp_path))

    assert manager.get("transport", "wait_timeout") == 3
    assert manager.get("transport", "reconnection") is True
    assert manager.get("connection", "default_url") == "http://example.com"


def test_invalid_file_falls_back_to_defaults(tmp_path):
    write_config(tmp_path, {"transport": {"transports": ["carrier-pigeon"]}})
    manager = ConfigManager(config_dir=str(tmp_path))
    assert manager.config == DEFAULT_CONFIG


def test_malformed_json_is_ignored(tmp_path):
    write_config(tmp_path, "{not json")
    manager = ConfigManager(config_dir=str(tmp_path))
    assert manager.config == DEFAULT_CONFIG


@pytest.mark.parametrize("section, values", [
    ("logging", {"level": "LOUD"}),
    ("transport", {"transports": []}),
    ("transport", {"wait_timeout": 0}),
    ("transport", {"reconnection_attempts": -1}),
    ("listeners", {"defaults": ["chat", "chat"]}),
    ("listeners", {"defaults": ["", "chat"]}),
    ("connection", "not a section"),
])
def test_update_rejects_invalid_values(section, values):
    manager = ConfigManager(load_files=False)
    with pytest.raises(ValueError):
        manager.update({section: values})
    assert manager.config == DEFAULT_CONFIG


def test_set_and_section(tmp_path):
    manager = ConfigManager(config_dir=str(tmp_path), load_files=False)
    manager.set("transport", "transports", ["polling", "websocket"])

    section = manager.section("transport")
    section["wait_timeout"] = 99

    assert manager.get("transport", "transports") == ["polling", "websocket"]
    assert manager.get("transport", "wait_timeout") == DEFAULT_CONFIG["transport"]["wait_timeout"]


def test_get_missing_returns_default():
    manager = ConfigManager(load_files=False)
    assert manager.get("nope", "key", default="fallback") == "fallback"


def test_save_round_trip(tmp_path):
    manager = ConfigManager(config_dir=str(tmp_path), load_files=False)
    manager.set("connection", "default_url", "http://saved:1234")

    assert manager.save()

    reloaded = ConfigManager(config_dir=str(tmp_path))
    assert reloaded.get("connection", "default_url") == "http://saved:1234"
