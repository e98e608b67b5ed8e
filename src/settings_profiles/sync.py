"""Core sync engine: file set expansion, copying, reconciling and diffing."""

from __future__ import annotations

import difflib
import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from settings_profiles.errors import InvalidPathError, SourceMissingError
from settings_profiles.paths import is_valid_path
from settings_profiles.toggles import WILDCARD, ResolvedFileSet

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    COPIED = "copied"  # source -> target
    PULLED = "pulled"  # target -> source, reconcile only
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FileOutcome:
    path: str
    outcome: Outcome
    detail: str = ""


@dataclass
class SyncReport:
    """Per-file result of a batch operation."""

    outcomes: list[FileOutcome] = field(default_factory=list)

    def add(self, path: str, outcome: Outcome, detail: str = "") -> None:
        self.outcomes.append(FileOutcome(path, outcome, detail))

    def paths(self, outcome: Outcome) -> list[str]:
        return [o.path for o in self.outcomes if o.outcome is outcome]

    @property
    def copied_count(self) -> int:
        return sum(
            1 for o in self.outcomes if o.outcome in (Outcome.COPIED, Outcome.PULLED)
        )

    @property
    def skipped(self) -> list[str]:
        return self.paths(Outcome.SKIPPED)

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.outcome is Outcome.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed


def _check_roots(*roots: str | Path) -> list[Path]:
    if not is_valid_path(*roots):
        raise InvalidPathError(f"Invalid root path in {[str(r) for r in roots]!r}")
    return [Path(r).expanduser() for r in roots]


def _expand_wildcard(root: Path, pattern: str) -> list[str]:
    """Expand a single '*' segment to every immediate child directory."""
    parts = pattern.split("/")
    idx = parts.index(WILDCARD)
    parent = root.joinpath(*parts[:idx])
    if not parent.is_dir():
        return []
    rest = parts[idx + 1 :]
    expanded = []
    for child in sorted(parent.iterdir()):
        if child.is_dir():
            expanded.append("/".join(parts[:idx] + [child.name] + rest))
    return expanded


def _walk_files(root: Path, rel_dir: str) -> list[str]:
    base = root / rel_dir
    if not base.is_dir():
        return []
    return [
        f.relative_to(root).as_posix()
        for f in sorted(base.rglob("*"))
        if f.is_file()
    ]


def expand_files(root: str | Path, file_set: ResolvedFileSet) -> list[str]:
    """Concrete relative file paths of file_set as seen under root.

    Wildcard entries are matched against root's child directories and
    directory entries are walked recursively. Plain file entries are
    returned whether or not they exist. Duplicates are dropped.
    """
    root = Path(root)
    seen: dict[str, None] = {}
    for entry in file_set.files:
        if WILDCARD in entry.split("/"):
            for rel in _expand_wildcard(root, entry):
                seen.setdefault(rel, None)
        else:
            seen.setdefault(entry, None)
    for rel_dir in file_set.paths:
        for rel in _walk_files(root, rel_dir):
            seen.setdefault(rel, None)
    return list(seen)


def _copy_file(src: Path, dst: Path) -> None:
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)


def copy_overwrite(
    source_root: str | Path,
    target_root: str | Path,
    file_set: ResolvedFileSet,
) -> SyncReport:
    """Copy every file of file_set from source_root over target_root.

    Files missing in the source are skipped and per-file errors are
    recorded; neither stops the batch.
    """
    source, target = _check_roots(source_root, target_root)
    if not source.is_dir():
        raise SourceMissingError(f"Source directory not found: {source}")

    report = SyncReport()
    for rel in expand_files(source, file_set):
        src = source / rel
        if not src.is_file():
            logger.debug("Skipping %s: not in %s", rel, source)
            report.add(rel, Outcome.SKIPPED, "source missing")
            continue
        try:
            _copy_file(src, target / rel)
        except OSError as e:
            logger.warning("Failed to copy %s: %s", rel, e)
            report.add(rel, Outcome.FAILED, str(e))
            continue
        report.add(rel, Outcome.COPIED)

    logger.info(
        "Copied %d file(s) from %s to %s (%d skipped, %d failed)",
        report.copied_count,
        source,
        target,
        len(report.skipped),
        len(report.failed),
    )
    return report


def mirror_tree(source_root: str | Path, target_root: str | Path) -> None:
    """Recursively copy a whole directory tree, overwriting files."""
    source, target = _check_roots(source_root, target_root)
    if not source.is_dir():
        raise SourceMissingError(f"Source directory not found: {source}")
    _copy_dir(source, target)


def _copy_dir(src: Path, dst: Path) -> None:
    dst.mkdir(parents=True, exist_ok=True)

    for item in src.iterdir():
        item_dst = dst / item.name
        if item.is_dir():
            _copy_dir(item, item_dst)
        elif item.is_file():
            shutil.copy2(item, item_dst)


def reconcile_newest(
    source_root: str | Path,
    target_root: str | Path,
    file_set: ResolvedFileSet,
    prefer_source_on_tie: bool = True,
) -> SyncReport:
    """Two-way sync keeping the newest copy of every file.

    A file present on one side only is copied to the other. When both
    exist the one with the later modification time wins; on a tie the
    source wins unless prefer_source_on_tie is False, in which case the
    pair is left alone.
    """
    source, target = _check_roots(source_root, target_root)
    if not source.is_dir():
        raise SourceMissingError(f"Source directory not found: {source}")
    target.mkdir(parents=True, exist_ok=True)

    candidates = dict.fromkeys(expand_files(source, file_set))
    candidates.update(dict.fromkeys(expand_files(target, file_set)))

    report = SyncReport()
    for rel in candidates:
        src = source / rel
        dst = target / rel
        try:
            src_exists = src.is_file()
            dst_exists = dst.is_file()
            if not src_exists and not dst_exists:
                report.add(rel, Outcome.SKIPPED, "missing on both sides")
                continue
            if src_exists and dst_exists:
                src_mtime = src.stat().st_mtime_ns
                dst_mtime = dst.stat().st_mtime_ns
                if src_mtime == dst_mtime and not prefer_source_on_tie:
                    report.add(rel, Outcome.SKIPPED, "unchanged")
                    continue
                push = src_mtime >= dst_mtime
            else:
                push = src_exists
            if push:
                _copy_file(src, dst)
                report.add(rel, Outcome.COPIED)
            else:
                _copy_file(dst, src)
                report.add(rel, Outcome.PULLED)
        except OSError as e:
            logger.warning("Failed to reconcile %s: %s", rel, e)
            report.add(rel, Outcome.FAILED, str(e))

    logger.info(
        "Reconciled %s with %s: %d pushed, %d pulled, %d failed",
        source,
        target,
        len(report.paths(Outcome.COPIED)),
        len(report.paths(Outcome.PULLED)),
        len(report.failed),
    )
    return report


def remove_tree(root: str | Path) -> None:
    """Delete root with everything below it. No-op if root is absent.

    The first error aborts the removal and propagates.
    """
    (path,) = _check_roots(root)
    if not path.exists():
        return
    _remove_dir(path)
    logger.info("Removed %s", path)


def _remove_dir(path: Path) -> None:
    for item in path.iterdir():
        if item.is_dir() and not item.is_symlink():
            _remove_dir(item)
        else:
            item.unlink()
    path.rmdir()


def collect_files(root: Path, file_set: ResolvedFileSet) -> dict[str, str]:
    """Read every expanded file of file_set under root.

    Returns {relative_path: content} for text files.
    """
    files = {}
    for rel in expand_files(root, file_set):
        f = root / rel
        if not f.is_file():
            continue
        try:
            files[rel] = f.read_text()
        except (UnicodeDecodeError, PermissionError):
            files[rel] = "<binary>"
    return files


def diff_trees(
    live_files: dict[str, str],
    stored_files: dict[str, str],
) -> list[str]:
    """Generate unified diffs between stored and live file trees.

    Returns a list of diff strings (one per changed file).
    """
    all_paths = sorted(set(live_files) | set(stored_files))
    diffs = []

    for path in all_paths:
        if path not in stored_files:
            diffs.append(f"  + {path} (live only)")
            continue

        if path not in live_files:
            diffs.append(f"  - {path} (profile only)")
            continue

        if live_files[path] == stored_files[path]:
            continue

        diff_lines = difflib.unified_diff(
            stored_files[path].splitlines(keepends=True),
            live_files[path].splitlines(keepends=True),
            fromfile=f"profile/{path}",
            tofile=f"live/{path}",
        )
        diff_text = "".join(diff_lines)
        if diff_text:
            diffs.append(diff_text)

    return diffs
