"""Command line interface for snapdiff."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from snapdiff.config import ConfigError, ConfigManager, SnapdiffConfig, resolve_with_precedence
from snapdiff.config.resolver import assign_nested
from snapdiff.detection import ChangeSet, detect_changes
from snapdiff.logs import configure_logging
from snapdiff.reporting import (
    ReportEmitter,
    build_json_payload,
    display_path,
    format_summary_line,
)
from snapdiff.scanning import DirectoryScanner, ScanError
from snapdiff.state import (
    PersistError,
    Snapshot,
    SnapshotCorruptError,
    SnapshotError,
    SnapshotMissingError,
    SnapshotStore,
    default_snapshot_path,
)
from snapdiff.state.models import count_entries, total_size_mb

LOGGER = logging.getLogger(__name__)

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    message = display_path(message)
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _resolve_output_modes(
    ctx: click.Context,
    config: SnapdiffConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    """Combine CLI flags with configured defaults into (quiet, summary_only).

    Raises:
        click.ClickException: If the resulting combination is contradictory.
    """
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _without_timestamp(lines: list[str]) -> list[str]:
    return [line for line in lines if not line.startswith("# Last updated:")]


def _store_for(root: Path, snapshot_path: str | None, config: SnapdiffConfig) -> SnapshotStore:
    if snapshot_path:
        return SnapshotStore(Path(snapshot_path))
    return SnapshotStore(default_snapshot_path(root, config.snapshot.directory))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="snapdiff")
def cli() -> None:
    """snapdiff records directory metadata snapshots and reports what changed between runs."""


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--snapshot",
    "snapshot_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Snapshot file to compare against and update (defaults to a per-directory file).",
)
@click.option("--lenient", is_flag=True, help="Skip unreadable entries instead of aborting.")
@click.option("--follow-symlinks", is_flag=True, help="Descend into symlinked directories.")
@click.option(
    "--type-changes", is_flag=True, help="Report paths that switched between file and directory."
)
@click.option("--exit-code", is_flag=True, help="Exit with status 1 when changes are detected.")
@click.option("--json", "json_output", is_flag=True, help="Emit the report as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def scan(
    ctx: click.Context,
    path: str,
    snapshot_path: str | None,
    lenient: bool,
    follow_symlinks: bool,
    type_changes: bool,
    exit_code: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Scan PATH, report changes since the previous scan, and save a new snapshot.

    Args:
        ctx: Click context for parameter source inspection.
        path: Root directory to scan.
        snapshot_path: Optional explicit snapshot file.
        lenient: When True, unreadable entries are skipped rather than fatal.
        follow_symlinks: When True, symlink targets are stat'ed and followed.
        type_changes: When True, file/directory flips are reported as modified.
        exit_code: When True, exit with status 1 if anything changed.
        json_output: When True, emit JSON instead of textual output.
        summary_mode: When True, restrict output to summary lines and warnings.
        quiet: When True, suppress non-error output entirely.
    """
    cli_overrides: dict[str, Any] = {}
    if lenient:
        cli_overrides["scan.fail_fast"] = False
    if follow_symlinks:
        cli_overrides["scan.follow_symlinks"] = True
    if type_changes:
        cli_overrides["detection.include_type_changes"] = True

    changes: ChangeSet | None = None
    try:
        config = ConfigManager().load(cli_overrides=cli_overrides)
        configure_logging(config.logging)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
        )
        emitter = ReportEmitter(console, quiet=quiet_enabled, summary_only=summary_only)

        root = Path(path).expanduser().resolve()
        store = _store_for(root, snapshot_path, config)
        scanner = DirectoryScanner(
            fail_fast=config.scan.fail_fast,
            follow_symlinks=config.scan.follow_symlinks,
        )
        result = scanner.scan(root)

        warnings: list[str] = []
        previous: Snapshot | None = None
        try:
            previous = store.load()
        except SnapshotMissingError:
            LOGGER.info("No previous snapshot at %s; treating as first scan.", store.path)
        except SnapshotCorruptError as exc:
            if config.snapshot.on_corrupt == "fail":
                raise
            warnings.append(
                f"{exc} (previous history ignored; treating this run as a first scan)"
            )

        if previous is not None:
            changes = detect_changes(
                previous,
                result.snapshot,
                include_type_changes=config.detection.include_type_changes,
            )

        if json_output:
            payload = build_json_payload(
                result, changes, snapshot_path=store.path, warnings=warnings
            )
            try:
                store.save(result.snapshot)
            except PersistError as exc:
                payload["error"] = {"code": "persist_error", "message": str(exc)}
                console.print_json(data=payload)
                raise SystemExit(1) from exc
            console.print_json(data=payload)
        else:
            emitter.scan_duration(result.elapsed_seconds)
            emitter.warnings(warnings)
            emitter.skipped(result.errors)
            if changes is None:
                emitter.first_run()
            else:
                emitter.changes(changes)
            store.save(result.snapshot)
            emitter.saved(store.path, result)
            emitter.summary(result, changes)
    except ScanError as exc:
        _handle_cli_error(
            str(exc),
            code="scan_error",
            json_output=json_output,
            details={"path": display_path(exc.path)},
            original=exc,
        )
    except PersistError as exc:
        _handle_cli_error(str(exc), code="persist_error", json_output=json_output, original=exc)
    except SnapshotError as exc:
        _handle_cli_error(str(exc), code="snapshot_error", json_output=json_output, original=exc)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while scanning: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )

    if exit_code and changes is not None and not changes.is_empty:
        ctx.exit(1)


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option(
    "--snapshot",
    "snapshot_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Snapshot file to inspect (defaults to the per-directory file).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit status information as JSON.")
def status(path: str, snapshot_path: str | None, json_output: bool) -> None:
    """Display the stored snapshot for PATH without scanning it."""
    try:
        config = ConfigManager().load(ensure_file=False)
        configure_logging(config.logging)

        root = Path(path).expanduser().resolve()
        shown_root = display_path(root)
        store = _store_for(root, snapshot_path, config)
        if not store.exists():
            raise click.ClickException(
                f"No snapshot found for {shown_root}. Run `snapdiff scan {shown_root}` first."
            )
        snapshot = store.load()

        counts = count_entries(snapshot)
        saved_at = store.last_saved()
        size_mb = round(total_size_mb(snapshot), 2)

        if json_output:
            console.print_json(
                data={
                    "context": {"root": shown_root, "snapshot": display_path(store.path)},
                    "counts": counts,
                    "total_mb": size_mb,
                    "saved_at": saved_at.isoformat() if saved_at else None,
                }
            )
            return

        table = Table(title=f"Snapshot for {escape(shown_root)}")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Snapshot file", escape(display_path(store.path)))
        table.add_row("Files", str(counts["files"]))
        table.add_row("Directories", str(counts["directories"]))
        table.add_row("Total size (MB)", f"{size_mb:.2f}")
        table.add_row("Last saved", saved_at.isoformat() if saved_at else "unknown")
        console.print(table)
        console.print(format_summary_line("Status", root, counts), soft_wrap=True)
    except SnapshotError as exc:
        _handle_cli_error(str(exc), code="snapshot_error", json_output=json_output, original=exc)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_output, original=exc)


@cli.group()
def config() -> None:
    """Manage the snapdiff configuration file."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    try:
        effective = ConfigManager().load(include_env=not no_env, ensure_file=False)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path such as ``scan.fail_fast``.
        value: YAML literal written into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if len(segments) < 2:
        raise click.ClickException("KEY must specify a dotted path such as 'scan.fail_fast'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager()
    try:
        manager.ensure_exists()
        before = manager.read_text().splitlines()
        file_data = manager.load_file_overrides()
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=SnapdiffConfig(), file_overrides=file_data)
        manager.save(file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = manager.read_text().splitlines()
    if _without_timestamp(before) == _without_timestamp(after):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    diff = difflib.unified_diff(
        before,
        after,
        fromfile="config.yaml (before)",
        tofile="config.yaml (after)",
        lineterm="",
    )

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an editor and validate the result."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=SnapdiffConfig(), file_overrides=parsed)
        manager.save(parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
