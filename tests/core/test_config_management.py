# tests/core/test_config_management.py
import json

import pytest

from linkmanager.managers.config_manager import ConfigManager
from linkmanager.model import LinkSettings
from linkmanager.utils.path_utils import PathUtils

MOCK_SETTINGS_CONTENT = {
    "debug": {
        "level": "WARNING"
    },
    "site": {
        "home_url": " https://www.example.com ",
        "secure": True
    },
    "links": {
        "external_nofollow": False,
        "external_ugc": True,
        "unknown_flag": True
    },
    "report": {
        "per_page": 20
    }
}


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """
    Points the ConfigManager at a settings.json in a temporary package root
    and reloads it.
    """
    package_root = tmp_path / "linkmanager"
    package_root.mkdir()
    (package_root / "settings.json").write_text(json.dumps(MOCK_SETTINGS_CONTENT))

    monkeypatch.setattr(PathUtils, "get_package_root", lambda: package_root)

    manager = ConfigManager()
    manager.reset()
    yield manager
    monkeypatch.undo()
    manager.reset()


def test_config_manager_is_a_singleton():
    assert ConfigManager() is ConfigManager()


def test_config_manager_load(config_env):
    config = config_env.get_all()
    assert config["debug"]["level"] == "WARNING"
    assert config["report"]["per_page"] == 20


def test_config_manager_get_nested(config_env):
    assert config_env.get_nested("site.secure") is True
    assert config_env.get_nested("non.existent.key", "default") == "default"
    assert config_env.get_nested("debug.level.deeper", "default") == "default"


def test_config_manager_set_nested(config_env):
    config_env.set_nested("debug.level", "INFO")
    assert config_env.get_nested("debug.level") == "INFO"

    config_env.set_nested("new_feature.enabled", "True")
    assert config_env.get_nested("new_feature.enabled") == "True"

    # The original is an int, so the string is cast back to an int.
    config_env.set_nested("report.per_page", "50")
    assert config_env.get_nested("report.per_page") == 50

    # A bad cast is stored as given.
    config_env.set_nested("report.per_page", "many")
    assert config_env.get_nested("report.per_page") == "many"


@pytest.mark.parametrize("raw, expected", [
    ("true", True), ("1", True), ("yes", True),
    ("false", False), ("0", False), ("off", False), ("No", False), ("", False),
])
def test_config_manager_set_nested_bool(config_env, raw, expected):
    config_env.set_nested("site.secure", raw)
    assert config_env.get_nested("site.secure") is expected


def test_set_nested_refuses_to_descend_into_a_value(config_env):
    assert config_env.set_nested("debug.level.sub", "x") is False
    assert config_env.get_nested("debug.level") == "WARNING"


def test_config_manager_reset(config_env):
    config_env.set_nested("debug.level", "DEBUG")
    config_env.reset()
    assert config_env.get_nested("debug.level") == "WARNING"


def test_missing_settings_file_gives_empty_config(tmp_path, monkeypatch):
    monkeypatch.setattr(PathUtils, "get_package_root", lambda: tmp_path)
    manager = ConfigManager()
    manager.reset()
    assert manager.get_all() == {}
    assert manager.get_link_settings() == LinkSettings.defaults()
    monkeypatch.undo()
    manager.reset()


def test_get_link_settings_merges_over_defaults(config_env):
    settings = config_env.get_link_settings()
    assert settings.external_nofollow is False
    assert settings.external_ugc is True
    assert settings.external_target_blank is True
    assert settings.external_noopener is True
    assert settings.internal_nofollow is False
    assert not hasattr(settings, "unknown_flag")


def test_get_link_settings_reads_overrides(config_env):
    config_env.set_nested("links.internal_nofollow", "on")
    assert config_env.get_link_settings().internal_nofollow is True


def test_get_site_context(config_env):
    site = config_env.get_site_context()
    assert site.home_url == "https://www.example.com"
    assert site.home_host == "www.example.com"
    assert site.current_scheme() == "https"
    assert site.resolve_root_relative("/about") == "https://www.example.com/about"


def test_packaged_settings_match_link_defaults():
    manager = ConfigManager()
    assert manager.get_link_settings() == LinkSettings.defaults()
    assert manager.get_nested("site.home_url") == ""
