"""CLI interface for settings-profiles."""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path

import click

from settings_profiles import __version__
from settings_profiles.config import CONFIG_FILE
from settings_profiles.errors import ProfileSyncError, SwitchError
from settings_profiles.registry import ProfileRegistry
from settings_profiles.switcher import ProfileSwitcher
from settings_profiles.sync import Outcome, SyncReport, collect_files, diff_trees
from settings_profiles.toggles import TOGGLES, list_toggles, resolve


def styled(text: str, **kwargs) -> str:
    return click.style(text, **kwargs)


def info(msg: str) -> None:
    click.echo(f"  {msg}")


def success(msg: str) -> None:
    click.echo(f"  {styled(msg, fg='green')}")


def warn(msg: str) -> None:
    click.echo(f"  {styled(msg, fg='yellow')}")


def error(msg: str) -> None:
    click.echo(f"  {styled(msg, fg='red')}")


def heading(msg: str) -> None:
    click.echo(f"\n  {styled(msg, bold=True)}")


def request_reload() -> None:
    warn("Restart the application for the new settings to take effect.")


def reports_errors(f):
    """Print domain errors in red and exit non-zero instead of tracing back."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SwitchError as e:
            error(str(e))
            _show_failures(e.report)
            sys.exit(1)
        except ProfileSyncError as e:
            error(str(e))
            sys.exit(1)
        except OSError as e:
            error(f"File operation failed: {e}")
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="settings-profiles")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=CONFIG_FILE,
    envvar="SETTINGS_PROFILES_CONFIG",
    show_default=True,
    help="Settings document.",
)
@click.option(
    "--live-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="SETTINGS_PROFILES_LIVE_ROOT",
    help="The application's live configuration directory.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path, live_root: Path | None) -> None:
    """Keep named snapshots of an application's settings and switch between them."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["live_root"] = live_root


def _registry(ctx: click.Context) -> ProfileRegistry:
    if "registry" not in ctx.obj:
        ctx.obj["registry"] = ProfileRegistry.load(ctx.obj["config_path"])
    return ctx.obj["registry"]


def _switcher(ctx: click.Context) -> ProfileSwitcher:
    live_root = ctx.obj["live_root"]
    if live_root is None:
        raise ProfileSyncError(
            "No live config directory given. Use --live-root or SETTINGS_PROFILES_LIVE_ROOT."
        )
    return ProfileSwitcher(_registry(ctx), live_root, request_reload=request_reload)


def _show_failures(report: SyncReport) -> None:
    for f in report.failed:
        error(f"  {f.path}: {f.detail}")


def _show_report(report: SyncReport, verbose: bool) -> None:
    if verbose:
        for o in report.outcomes:
            color = {
                Outcome.COPIED: "green",
                Outcome.PULLED: "cyan",
                Outcome.SKIPPED: "yellow",
                Outcome.FAILED: "red",
            }[o.outcome]
            info(f"  {styled(o.outcome.value, fg=color)} {o.path}")
    info(f"{report.copied_count} file(s) copied, {len(report.skipped)} skipped.")
    _show_failures(report)


@cli.command("list")
@click.pass_context
@reports_errors
def list_cmd(ctx: click.Context) -> None:
    """List profiles. The active one is marked with '*'."""
    registry = _registry(ctx)
    if not registry.profiles:
        warn("No profiles yet. Try: settings-profiles create <name>")
        return

    heading(f"Profiles in {registry.profiles_dir}")
    for p in registry.profiles:
        marker = styled("*", fg="green") if p.active else " "
        on = [k for k, v in p.toggles.items() if v]
        sync = " (auto-sync)" if p.auto_sync else ""
        info(f"{marker} {styled(p.name, bold=True)}{sync}: {', '.join(on) or '(nothing)'}")
    click.echo()


@cli.command()
@click.pass_context
@reports_errors
def current(ctx: click.Context) -> None:
    """Show the active profile."""
    info(f"Current profile: {_registry(ctx).get_active().name}")


@cli.command()
def toggles() -> None:
    """Show which files every toggle governs."""
    heading("Available toggles")
    click.echo()

    for key, spec in list_toggles():
        info(f"{styled(key, bold=True)} ({spec.name}): {spec.description}")
        if spec.files:
            info(f"  Files: {', '.join(spec.files)}")
        if spec.paths:
            info(f"  Directories: {', '.join(spec.paths)}")
    click.echo()


@cli.command()
@click.argument("name")
@click.option("--from", "base_name", default=None, help="Profile to clone (default: active).")
@click.pass_context
@reports_errors
def create(ctx: click.Context, name: str, base_name: str | None) -> None:
    """Create a profile from the current live settings."""
    report = _switcher(ctx).create_profile(name, base_name)
    success(f"Created profile '{name}'.")
    _show_report(report, ctx.obj["verbose"])


@cli.command()
@click.argument("name")
@click.pass_context
@reports_errors
def switch(ctx: click.Context, name: str) -> None:
    """Apply a profile's files to the live config and make it active."""
    report = _switcher(ctx).switch_profile(name)
    if report is None:
        info(f"'{name}' is already the active profile.")
        return
    success(f"Switched to profile '{name}'.")
    _show_report(report, ctx.obj["verbose"])


@cli.command()
@click.argument("name")
@click.option("--enable", "-e", multiple=True, type=click.Choice(list(TOGGLES)), help="Toggle to turn on.")
@click.option("--disable", "-d", multiple=True, type=click.Choice(list(TOGGLES)), help="Toggle to turn off.")
@click.option("--auto-sync/--no-auto-sync", default=None, help="Sync on startup and shutdown.")
@click.pass_context
@reports_errors
def edit(
    ctx: click.Context,
    name: str,
    enable: tuple[str, ...],
    disable: tuple[str, ...],
    auto_sync: bool | None,
) -> None:
    """Turn toggles of a profile on or off."""
    changes: dict[str, bool] = {key: True for key in enable}
    changes.update({key: False for key in disable})
    if auto_sync is not None:
        changes["auto_sync"] = auto_sync
    if not changes:
        warn("Nothing to change.")
        return
    profile = _switcher(ctx).edit_profile(name, changes)
    on = [k for k, v in profile.toggles.items() if v]
    success(f"Updated '{name}': {', '.join(on) or '(nothing)'}")


@cli.command()
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation.")
@click.pass_context
@reports_errors
def remove(ctx: click.Context, name: str, yes: bool) -> None:
    """Remove a profile and its stored files."""
    switcher = _switcher(ctx)
    switcher.registry.get(name)
    if not yes and not click.confirm(f"  Remove profile '{name}' and its stored files?", default=False):
        info("Aborted.")
        return
    switcher.remove_profile(name)
    success(f"Removed profile '{name}'.")
    info(f"Current profile: {switcher.registry.get_active().name}")


@cli.command()
@click.argument("name", required=False)
@click.pass_context
@reports_errors
def save(ctx: click.Context, name: str | None) -> None:
    """Copy live settings into a profile (default: active)."""
    report = _switcher(ctx).save_profile(name)
    success("Saved.")
    _show_report(report, ctx.obj["verbose"])


@cli.command()
@click.argument("name", required=False)
@click.pass_context
@reports_errors
def load(ctx: click.Context, name: str | None) -> None:
    """Copy a profile's settings over the live ones (default: active)."""
    report = _switcher(ctx).load_profile(name)
    if report.ok:
        success("Loaded.")
    _show_report(report, ctx.obj["verbose"])
    if not report.ok:
        sys.exit(1)


@cli.command()
@click.pass_context
@reports_errors
def sync(ctx: click.Context) -> None:
    """Newest-wins sync between live settings and the active profile."""
    report = _switcher(ctx).sync_settings()
    if report is None:
        info("Auto-sync is off for the active profile.")
        return
    success("Synced.")
    _show_report(report, ctx.obj["verbose"])


@cli.command()
@click.argument("new_path")
@click.pass_context
@reports_errors
def move(ctx: click.Context, new_path: str) -> None:
    """Move profile storage to another directory."""
    switcher = _switcher(ctx)
    old = switcher.registry.profiles_dir
    switcher.change_profiles_path(new_path)
    success(f"Moved profiles from {old} to {switcher.registry.profiles_dir}")


@cli.command()
@click.pass_context
@reports_errors
def rescan(ctx: click.Context) -> None:
    """Rebuild the profile list from the profile.json files in storage."""
    registry = _registry(ctx)
    names = registry.rebuild_from_storage()
    registry.persist()
    success(f"Found {len(names)} profile(s): {', '.join(names) or '(none)'}")


@cli.command()
@click.argument("name", required=False)
@click.pass_context
@reports_errors
def diff(ctx: click.Context, name: str | None) -> None:
    """Show unified diff of a profile's stored files vs the live ones."""
    switcher = _switcher(ctx)
    profile = switcher.registry.get(name) if name else switcher.registry.get_active()
    file_set = resolve(profile)

    heading(profile.name)
    live_files = collect_files(Path(switcher.live_root), file_set)
    stored_files = collect_files(switcher.profile_storage(profile.name), file_set)
    diffs = diff_trees(live_files, stored_files)

    if diffs:
        for d in diffs:
            click.echo(d)
    else:
        success("  Everything matches.")
    click.echo()
