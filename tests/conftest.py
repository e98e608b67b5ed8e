"""Shared test fixtures."""

import os
from pathlib import Path

import pytest

from settings_profiles.config import Profile, Settings
from settings_profiles.registry import ProfileRegistry
from settings_profiles.switcher import ProfileSwitcher
from settings_profiles.toggles import default_toggles


def make_profile(name: str, active: bool = False, auto_sync: bool = False, **on) -> Profile:
    toggles = default_toggles()
    toggles.update(on)
    return Profile(name=name, active=active, auto_sync=auto_sync, toggles=toggles)


@pytest.fixture
def tmp_config(tmp_path):
    """Return a path for a temporary settings document."""
    return tmp_path / "config.json"


@pytest.fixture
def live_root(tmp_path):
    """Create a mock live config directory."""
    live = tmp_path / "live"
    live.mkdir()

    (live / "hotkeys.json").write_text('{"save": "Mod+S"}\n')
    (live / "app.json").write_text('{"vimMode": false}\n')

    # Two installed plugins, only one with settings
    plugins = live / "plugins"
    (plugins / "calendar").mkdir(parents=True)
    (plugins / "calendar" / "data.json").write_text('{"weekStart": "monday"}\n')
    (plugins / "calendar" / "main.js").write_text("module.exports = {}\n")
    (plugins / "dataview").mkdir()
    (plugins / "dataview" / "main.js").write_text("module.exports = {}\n")

    snippets = live / "snippets"
    (snippets / "nested").mkdir(parents=True)
    (snippets / "wide.css").write_text(".wide {}\n")
    (snippets / "nested" / "dark.css").write_text(".dark {}\n")

    return live


@pytest.fixture
def profiles_dir(tmp_path):
    return tmp_path / "profiles"


@pytest.fixture
def registry(tmp_config, profiles_dir):
    """Registry with profile A (hotkeys, active) and B (hotkeys + app)."""
    settings = Settings(
        profiles_path=str(profiles_dir),
        active_profile_name="A",
        profiles=[
            make_profile("A", active=True, hotkeys=True),
            make_profile("B", hotkeys=True, app=True),
        ],
    )
    reg = ProfileRegistry(settings, tmp_config)
    reg.persist()
    return reg


@pytest.fixture
def reloads():
    return []


@pytest.fixture
def switcher(registry, live_root, reloads):
    return ProfileSwitcher(registry, live_root, request_reload=lambda: reloads.append(1))


def set_mtime(path: Path, seconds: int) -> None:
    os.utime(path, (seconds, seconds))
