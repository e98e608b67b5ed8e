"""In-memory profile registry backed by the settings document."""

from __future__ import annotations

import logging
from pathlib import Path

from settings_profiles.config import (
    CONFIG_FILE,
    Profile,
    Settings,
    load_config,
    load_profile_data,
    save_config,
    save_profile_data,
)
from settings_profiles.errors import (
    PersistError,
    ProfileExistsError,
    ProfileNotFoundError,
)
from settings_profiles.paths import validate_profile_name

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "Default"


def default_profile() -> Profile:
    """The profile assumed when none is active. Never stored."""
    return Profile(name=DEFAULT_PROFILE_NAME)


class ProfileRegistry:
    """Owns the settings document and keeps the active flag consistent.

    At most one profile is flagged active, and
    ``settings.active_profile_name`` always names it (or is empty).
    Changes only reach disk through ``persist()``.
    """

    def __init__(self, settings: Settings | None = None, path: Path | None = None):
        self.settings = settings or Settings()
        self.path = path or CONFIG_FILE

    @classmethod
    def load(cls, path: Path | None = None) -> ProfileRegistry:
        path = path or CONFIG_FILE
        try:
            settings = load_config(path)
        except (OSError, ValueError, AttributeError) as e:
            raise PersistError(f"Cannot read settings document {path}: {e}") from e
        return cls(settings, path)

    @property
    def profiles(self) -> list[Profile]:
        return self.settings.profiles

    @property
    def profiles_dir(self) -> Path:
        return self.settings.profiles_dir

    def names(self) -> list[str]:
        return [p.name for p in self.settings.profiles]

    def find(self, name: str) -> Profile | None:
        for p in self.settings.profiles:
            if p.name == name:
                return p
        return None

    def get(self, name: str) -> Profile:
        profile = self.find(name)
        if profile is None:
            raise ProfileNotFoundError(f"Profile '{name}' not found")
        return profile

    def get_active(self) -> Profile:
        for p in self.settings.profiles:
            if p.active:
                return p
        return default_profile()

    def has_active(self) -> bool:
        return any(p.active for p in self.settings.profiles)

    def add(self, profile: Profile) -> None:
        validate_profile_name(profile.name)
        if profile.name == DEFAULT_PROFILE_NAME:
            raise ProfileExistsError(f"'{profile.name}' is a reserved profile name")
        if self.find(profile.name) is not None:
            raise ProfileExistsError(f"Profile '{profile.name}' already exists")
        profile.active = False
        self.settings.profiles.append(profile)

    def remove(self, profile: Profile) -> None:
        existing = self.get(profile.name)
        self.settings.profiles.remove(existing)
        if existing.active:
            self.settings.active_profile_name = ""

    def set_active(self, name: str) -> None:
        target = self.get(name)
        for p in self.settings.profiles:
            p.active = p is target
        self.settings.active_profile_name = target.name

    def clear_active(self) -> None:
        for p in self.settings.profiles:
            p.active = False
        self.settings.active_profile_name = ""

    def set_profiles_path(self, profiles_path: str) -> None:
        self.settings.profiles_path = profiles_path

    def persist(self) -> None:
        """Write every profile's profile.json, then the settings document.

        The document is written last so a failed profile write leaves it
        as it was.
        """
        try:
            save_profile_data(self.settings.profiles, self.profiles_dir)
            save_config(self.settings, self.path)
        except OSError as e:
            raise PersistError(f"Failed to save settings to {self.path}: {e}") from e
        logger.debug("Saved %d profile(s) to %s", len(self.profiles), self.path)

    def rebuild_from_storage(self) -> list[str]:
        """Replace the profile list with what profile.json files describe.

        The active profile is kept if it is still present. Returns the
        names found.
        """
        active = self.settings.active_profile_name
        profiles = []
        for profile in load_profile_data(self.profiles_dir):
            if profile.name == DEFAULT_PROFILE_NAME:
                logger.warning("Ignoring stored profile with reserved name '%s'", profile.name)
                continue
            profiles.append(profile)
        self.settings.profiles = profiles
        if active and self.find(active) is not None:
            self.set_active(active)
        else:
            self.clear_active()
        return self.names()
