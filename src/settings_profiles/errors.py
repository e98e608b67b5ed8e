"""Domain exceptions for settings-profiles.

Root-level failures raise one of these. Failures of individual files
inside a batch are not raised; they are collected as outcomes in a
``SyncReport`` instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from settings_profiles.sync import SyncReport


class ProfileSyncError(RuntimeError):
    """Base exception for all settings-profiles failures."""


class InvalidPathError(ProfileSyncError):
    """Raised when a path or profile name has an empty or malformed segment."""


class ProfileNotFoundError(ProfileSyncError):
    """Raised when a profile name is not in the registry."""


class ProfileExistsError(ProfileSyncError):
    """Raised when a profile name collides with an existing or reserved one."""


class SourceMissingError(ProfileSyncError):
    """Raised when a root directory an operation needs does not exist."""


class PersistError(ProfileSyncError):
    """Raised when the settings document could not be written."""


class SwitchError(ProfileSyncError):
    """Raised when a switch is rolled back because files failed to copy."""

    def __init__(self, message: str, report: SyncReport):
        super().__init__(message)
        self.report = report
