"""Tests for the configuration manager."""

import json

import pytest

from spoonfeeder.config import ConfigManager, get_config_manager
from spoonfeeder.exceptions import ConfigError
from spoonfeeder.models import DEFAULT_API_URL, RenderMode


def test_defaults_without_file(tmp_path):
    config = ConfigManager(tmp_path).load()

    assert config.api_url == DEFAULT_API_URL
    assert config.token is None
    assert config.default_mode is RenderMode.NORMAL
    assert config.detect_code is False


def test_settings_are_persisted(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.set_api_url("https://example.com/api/")
    manager.set_token("  secret  ")
    manager.set_default_mode("MATH")
    manager.set_detect_code(True)

    stored = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
    assert stored["api_url"] == "https://example.com/api"
    assert stored["default_mode"] == "math"

    reloaded = ConfigManager(tmp_path).load()
    assert reloaded.api_url == "https://example.com/api"
    assert reloaded.token == "secret"
    assert reloaded.default_mode is RenderMode.MATH
    assert reloaded.detect_code is True


def test_blank_token_clears(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.set_token("abc")
    manager.set_token("   ")
    assert manager.get_token() is None


def test_invalid_values_raise(tmp_path):
    manager = ConfigManager(tmp_path)

    with pytest.raises(ConfigError):
        manager.set_api_url("ftp://example.com")
    with pytest.raises(ConfigError):
        manager.set_default_mode("latex")

    assert not (tmp_path / "config.json").exists()


def test_corrupted_file_falls_back_to_defaults(tmp_path):
    (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
    assert ConfigManager(tmp_path).load().api_url == DEFAULT_API_URL

    (tmp_path / "config.json").write_text('{"default_mode": "fancy"}', encoding="utf-8")
    assert ConfigManager(tmp_path).load().default_mode is RenderMode.NORMAL


def test_clear_all(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.set_token("abc")
    manager.clear_all()

    assert manager.get_token() is None
    assert not (tmp_path / "config.json").exists()


def test_get_config_manager_replaces_instance(tmp_path):
    first = get_config_manager(tmp_path / "a")
    assert get_config_manager() is first

    second = get_config_manager(tmp_path / "b")
    assert second is not first
    assert second.config_dir == tmp_path / "b"
