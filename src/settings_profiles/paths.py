"""Path helpers shared by the sync engine and the registry."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from settings_profiles.errors import InvalidPathError

logger = logging.getLogger(__name__)


def is_valid_path(*segments: str | Path | None) -> bool:
    """True if no segment is missing, empty or whitespace-only."""
    if not segments:
        return False
    for seg in segments:
        if seg is None or not str(seg).strip():
            return False
    return True


def join_path(*segments: str | Path) -> Path:
    """Join segments into a Path, rejecting empty ones up front."""
    if not is_valid_path(*segments):
        raise InvalidPathError(f"Invalid path segments: {list(segments)!r}")
    return Path(*segments).expanduser()


def ensure_path_exists(path: str | Path) -> bool:
    """Create path (and parents) if missing. Returns whether it exists now."""
    if not is_valid_path(path):
        return False
    p = Path(path).expanduser()
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Could not create %s: %s", p, e)
        return False
    return p.is_dir()


def validate_profile_name(name: str) -> str:
    """Return name unchanged if it is usable as a single directory name."""
    if not isinstance(name, str) or not is_valid_path(name):
        raise InvalidPathError("Profile name cannot be empty")
    if "/" in name or "\\" in name or os.sep in name or name in (".", ".."):
        raise InvalidPathError(f"Invalid profile name: {name!r}")
    return name
