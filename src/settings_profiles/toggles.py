"""Built-in toggle table: which config files each profile toggle governs."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

WILDCARD = "*"

# Key under which hosts store the active flag; never a resolvable toggle.
RESERVED_KEY = "active"


@dataclass(frozen=True)
class FileSpec:
    """Files and directories, relative to the config root, behind one toggle."""

    name: str
    description: str
    files: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedFileSet:
    """Abstract file set of a profile. Wildcards are still unexpanded."""

    files: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.files or self.paths)


TOGGLE_ORDER: tuple[str, ...] = (
    "app",
    "appearance",
    "bookmarks",
    "community_plugins",
    "core_plugins",
    "graph",
    "hotkeys",
    "plugin_data",
    "plugins",
    "snippets",
    "themes",
    "workspace",
)

TOGGLES: Mapping[str, FileSpec] = MappingProxyType(
    {
        "app": FileSpec(
            name="App",
            description="Editor and file settings",
            files=("app.json",),
        ),
        "appearance": FileSpec(
            name="Appearance",
            description="Fonts, base theme and CSS snippet selection",
            files=("appearance.json",),
        ),
        "bookmarks": FileSpec(
            name="Bookmarks",
            description="Bookmarked files and searches",
            files=("bookmarks.json",),
        ),
        "community_plugins": FileSpec(
            name="Community plugins",
            description="Which community plugins are enabled",
            files=("community-plugins.json",),
        ),
        "core_plugins": FileSpec(
            name="Core plugins",
            description="Which core plugins are enabled",
            files=("core-plugins.json", "core-plugins-migration.json"),
        ),
        "graph": FileSpec(
            name="Graph",
            description="Graph view settings",
            files=("graph.json",),
        ),
        "hotkeys": FileSpec(
            name="Hotkeys",
            description="Custom hotkeys",
            files=("hotkeys.json",),
        ),
        "plugin_data": FileSpec(
            name="Plugin data",
            description="Per-plugin settings (data.json of every installed plugin)",
            files=("plugins/*/data.json",),
        ),
        "plugins": FileSpec(
            name="Plugins",
            description="Installed plugin code",
            files=(
                "plugins/*/manifest.json",
                "plugins/*/main.js",
                "plugins/*/styles.css",
            ),
        ),
        "snippets": FileSpec(
            name="Snippets",
            description="CSS snippets",
            paths=("snippets",),
        ),
        "themes": FileSpec(
            name="Themes",
            description="Installed themes",
            paths=("themes",),
        ),
        "workspace": FileSpec(
            name="Workspace",
            description="Open panes and layout",
            files=("workspace.json",),
        ),
    }
)


def get_toggle(key: str) -> FileSpec | None:
    """Get a toggle's file spec by key, or None if not found."""
    return TOGGLES.get(key)


def list_toggles() -> list[tuple[str, FileSpec]]:
    """Return all toggles in declared order."""
    return [(key, TOGGLES[key]) for key in TOGGLE_ORDER]


def default_toggles() -> dict[str, bool]:
    """All toggles switched off."""
    return {key: False for key in TOGGLE_ORDER}


def clean_toggles(raw: Mapping[str, object] | None) -> dict[str, bool]:
    """Keep only known toggle keys with bool values; fill the rest with False."""
    toggles = default_toggles()
    if not isinstance(raw, Mapping):
        return toggles
    for key, value in raw.items():
        if key in TOGGLES and isinstance(value, bool):
            toggles[key] = value
    return toggles


def resolve(profile) -> ResolvedFileSet:
    """Map a profile's toggles to the files and directories it governs.

    Accepts a Profile or a bare toggles mapping. Toggles are visited in
    TOGGLE_ORDER, so the result depends only on which toggles are on.
    Duplicates are kept.
    """
    toggles: Mapping[str, bool] = getattr(profile, "toggles", profile)
    files: list[str] = []
    paths: list[str] = []
    for key in TOGGLE_ORDER:
        if key == RESERVED_KEY or toggles.get(key) is not True:
            continue
        spec = TOGGLES[key]
        files.extend(spec.files)
        paths.extend(spec.paths)
    return ResolvedFileSet(files=tuple(files), paths=tuple(paths))
