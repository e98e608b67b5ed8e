"""Settings document and per-profile metadata files."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from settings_profiles.errors import InvalidPathError
from settings_profiles.paths import validate_profile_name
from settings_profiles.toggles import clean_toggles, default_toggles

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "settings-profiles"
CONFIG_FILE = CONFIG_DIR / "config.json"
DEFAULT_PROFILES_DIR = CONFIG_DIR / "profiles"
PROFILE_FILE = "profile.json"


@dataclass
class Profile:
    """A named snapshot: which toggle groups it governs and whether it auto-syncs."""

    name: str
    active: bool = False
    auto_sync: bool = False
    toggles: dict[str, bool] = field(default_factory=default_toggles)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "autoSync": self.auto_sync,
            "toggles": dict(self.toggles),
        }

    @classmethod
    def from_dict(cls, d: dict) -> Profile:
        return cls(
            name=d["name"],
            auto_sync=bool(d.get("autoSync", False)),
            toggles=clean_toggles(d.get("toggles")),
        )


@dataclass
class Settings:
    """Root settings document."""

    profiles_path: str = str(DEFAULT_PROFILES_DIR)
    active_profile_name: str = ""
    profiles: list[Profile] = field(default_factory=list)

    @property
    def profiles_dir(self) -> Path:
        return Path(self.profiles_path).expanduser()


def load_config(path: Path | None = None) -> Settings:
    """Load settings from disk. Returns empty Settings if file doesn't exist."""
    path = path or CONFIG_FILE
    if not path.exists():
        return Settings()

    data = json.loads(path.read_text())

    profiles: list[Profile] = []
    for entry in data.get("profiles", []):
        try:
            profile = Profile.from_dict(entry)
            validate_profile_name(profile.name)
        except (KeyError, TypeError, InvalidPathError) as e:
            logger.warning("Ignoring profile entry in %s: %s", path, e)
            continue
        if any(p.name == profile.name for p in profiles):
            logger.warning("Ignoring duplicate profile '%s' in %s", profile.name, path)
            continue
        profiles.append(profile)

    active = data.get("activeProfileName", "")
    for p in profiles:
        p.active = p.name == active

    return Settings(
        profiles_path=data.get("profilesPath") or str(DEFAULT_PROFILES_DIR),
        active_profile_name=active if any(p.active for p in profiles) else "",
        profiles=profiles,
    )


def save_config(settings: Settings, path: Path | None = None) -> None:
    """Save settings to disk."""
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "profilesPath": settings.profiles_path,
        "activeProfileName": settings.active_profile_name,
        "profiles": [p.to_dict() for p in settings.profiles],
    }

    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2) + "\n")
    os.replace(tmp, path)


def save_profile_data(profiles: list[Profile], profiles_dir: Path) -> None:
    """Write each profile's metadata to <profiles_dir>/<name>/profile.json."""
    for profile in profiles:
        target = profiles_dir / profile.name
        target.mkdir(parents=True, exist_ok=True)
        (target / PROFILE_FILE).write_text(
            json.dumps(profile.to_dict(), indent=2) + "\n"
        )


def load_profile_data(profiles_dir: Path) -> list[Profile]:
    """Read every <profiles_dir>/*/profile.json, sorted by directory name.

    Unreadable or malformed files are logged and left out.
    """
    if not profiles_dir.is_dir():
        return []

    profiles = []
    for f in sorted(profiles_dir.glob(f"*/{PROFILE_FILE}")):
        if not f.is_file():
            continue
        try:
            data = json.loads(f.read_text())
            profile = Profile.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable profile file %s: %s", f, e)
            continue
        if profile.name != f.parent.name:
            logger.warning(
                "Profile file %s names '%s'; using directory name",
                f,
                profile.name,
            )
            profile.name = f.parent.name
        profiles.append(profile)
    return profiles
