"""Profile operations: create, switch, edit, remove, save, load and auto-sync."""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping

from settings_profiles.config import Profile
from settings_profiles.errors import (
    InvalidPathError,
    PersistError,
    ProfileExistsError,
    ProfileSyncError,
    SourceMissingError,
    SwitchError,
)
from settings_profiles.paths import ensure_path_exists, join_path, validate_profile_name
from settings_profiles.registry import ProfileRegistry
from settings_profiles.sync import (
    SyncReport,
    copy_overwrite,
    mirror_tree,
    reconcile_newest,
    remove_tree,
)
from settings_profiles.toggles import RESERVED_KEY, TOGGLES, resolve

logger = logging.getLogger(__name__)

EDITABLE_FLAGS = ("auto_sync",)


class SwitchState(Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


def first_remaining(profiles: list[Profile], removed: Profile) -> Profile | None:
    """Pick the first profile, in registry order, that is not being removed."""
    for p in profiles:
        if p is not removed:
            return p
    return None


class ProfileSwitcher:
    """Runs profile operations against a live config root and profile storage.

    The registry's active profile only changes after the files of the
    new profile were copied into the live root without a failure.
    """

    def __init__(
        self,
        registry: ProfileRegistry,
        live_root: str | Path,
        request_reload: Callable[[], None] | None = None,
        elect_fallback: Callable[[list[Profile], Profile], Profile | None] = first_remaining,
        prefer_source_on_tie: bool = True,
    ):
        self.registry = registry
        self.live_root = live_root
        self.request_reload = request_reload
        self.elect_fallback = elect_fallback
        self.prefer_source_on_tie = prefer_source_on_tie
        self.state = SwitchState.IDLE

    def profile_storage(self, name: str) -> Path:
        """The storage directory of a profile. It must sit directly in profiles_dir."""
        root = self.registry.profiles_dir.resolve()
        path = Path(os.path.normpath(join_path(root, name)))
        if path.parent != root:
            raise InvalidPathError(f"Profile storage {path} is outside {root}")
        return path

    def _ensure_storage(self, name: str | None = None) -> Path:
        root = self.registry.profiles_dir if name is None else self.profile_storage(name)
        if not ensure_path_exists(root):
            raise SourceMissingError(f"Profile storage is not available: {root}")
        return root

    def _reload(self) -> None:
        if self.request_reload is None:
            return
        try:
            self.request_reload()
        except Exception:
            logger.exception("Reload request failed")

    def switch_profile(self, name: str) -> SyncReport | None:
        """Copy a profile's files into the live root and make it active.

        Returns None when the profile is already active.
        """
        target = self.registry.get(name)
        if target.active:
            logger.info("Profile '%s' is already active", name)
            self.state = SwitchState.IDLE
            return None

        self.state = SwitchState.IN_PROGRESS
        try:
            self._ensure_storage()
            report = copy_overwrite(self.profile_storage(name), self.live_root, resolve(target))
        except ProfileSyncError:
            self.state = SwitchState.ROLLED_BACK
            raise

        if not report.ok:
            self.state = SwitchState.ROLLED_BACK
            raise SwitchError(
                f"Failed to switch to '{name}': {len(report.failed)} file(s) could not be copied",
                report,
            )

        previous = self.registry.get_active()
        self.registry.set_active(name)
        try:
            self.registry.persist()
        except PersistError:
            if self.registry.find(previous.name) is previous:
                self.registry.set_active(previous.name)
            else:
                self.registry.clear_active()
            self.state = SwitchState.ROLLED_BACK
            raise
        self.state = SwitchState.COMMITTED
        logger.info("Switched to profile '%s'", name)
        self._reload()
        return report

    def create_profile(self, name: str, base_name: str | None = None) -> SyncReport:
        """Clone the base profile's toggles under a new name and seed its storage."""
        validate_profile_name(name)
        if self.registry.find(name) is not None:
            raise ProfileExistsError(f"Profile '{name}' already exists")

        base = self.registry.get(base_name) if base_name else self.registry.get_active()
        profile = Profile(name=name, toggles=dict(base.toggles))
        self.registry.add(profile)
        self.registry.persist()
        logger.info("Created profile '%s' from '%s'", name, base.name)

        self._ensure_storage(name)
        return copy_overwrite(self.live_root, self.profile_storage(name), resolve(base))

    def edit_profile(self, name: str, changes: Mapping[str, object]) -> Profile:
        """Apply boolean toggle changes. The name cannot be changed here."""
        profile = self.registry.get(name)
        for key, value in changes.items():
            if key == "name" or key == RESERVED_KEY:
                if key == "name" and value == profile.name:
                    continue
                logger.warning("Ignoring change to '%s' of profile '%s'", key, name)
                continue
            if not isinstance(value, bool):
                logger.warning("Ignoring non-boolean value for '%s'", key)
                continue
            if key in TOGGLES:
                profile.toggles[key] = value
            elif key in EDITABLE_FLAGS:
                setattr(profile, key, value)
            else:
                logger.warning("Ignoring unknown toggle '%s'", key)
        self.registry.persist()
        return profile

    def remove_profile(self, name: str) -> None:
        """Remove a profile and its storage, switching away first if it is active."""
        profile = self.registry.get(name)
        if profile.active:
            fallback = self.elect_fallback(self.registry.profiles, profile)
            if fallback is not None:
                self.switch_profile(fallback.name)
            else:
                self.registry.clear_active()

        remove_tree(self.profile_storage(name))
        self.registry.remove(profile)
        self.registry.persist()
        logger.info("Removed profile '%s'", name)

    def save_profile(self, name: str | None = None) -> SyncReport:
        """Copy live files over the profile's stored copy."""
        profile = self._named_or_active(name)
        self._ensure_storage(profile.name)
        return copy_overwrite(self.live_root, self.profile_storage(profile.name), resolve(profile))

    def load_profile(self, name: str | None = None) -> SyncReport:
        """Copy the profile's stored files over the live ones."""
        profile = self._named_or_active(name)
        self._ensure_storage()
        report = copy_overwrite(self.profile_storage(profile.name), self.live_root, resolve(profile))
        if report.ok:
            self._reload()
        return report

    def sync_settings(self) -> SyncReport | None:
        """Newest-wins sync of the active profile, if it has auto-sync on."""
        active = self.registry.get_active()
        if not self.registry.has_active() or not active.auto_sync:
            logger.debug("Auto-sync is off for '%s'", active.name)
            return None
        storage = self._ensure_storage(active.name)
        return reconcile_newest(
            self.live_root,
            storage,
            resolve(active),
            prefer_source_on_tie=self.prefer_source_on_tie,
        )

    def change_profiles_path(self, new_path: str) -> None:
        """Move all profile storage to new_path and remember it."""
        if not new_path or not new_path.strip():
            raise InvalidPathError("Profiles path cannot be empty")
        old = self.registry.profiles_dir.resolve()
        new = Path(new_path).expanduser().resolve()
        if new == old:
            return
        if new.is_relative_to(old):
            raise InvalidPathError(f"{new} is inside the current profiles path {old}")

        if old.exists():
            mirror_tree(old, new)
        elif not ensure_path_exists(new):
            raise SourceMissingError(f"Profile storage is not available: {new}")

        self.registry.set_profiles_path(str(new))
        self.registry.persist()
        if old.exists():
            remove_tree(old)
        logger.info("Moved profiles from %s to %s", old, new)

    def _named_or_active(self, name: str | None) -> Profile:
        if name:
            return self.registry.get(name)
        if not self.registry.has_active():
            raise ProfileSyncError("No active profile; name one explicitly")
        return self.registry.get_active()
