"""Console rendering of scan results."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.text import Text

from snapdiff.detection import ChangeKind, ChangeSet
from snapdiff.scanning import ScanResult
from snapdiff.state.models import count_entries, total_size, total_size_mb

_KIND_STYLES = {
    ChangeKind.ADDED: "green",
    ChangeKind.REMOVED: "red",
    ChangeKind.MODIFIED: "yellow",
}
_IMPORTANT_MODES = {"summary", "warning", "error"}


def display_path(value: Path | str) -> str:
    """Return ``value`` safe to print, with undecodable bytes shown as ``\\xNN`` escapes."""
    text = str(value)
    try:
        raw = text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        return text.encode("utf-8", "backslashreplace").decode("utf-8")
    return raw.decode("utf-8", "backslashreplace")


def format_change(kind: ChangeKind, path: str) -> Text:
    """Return the report line for a single change, e.g. ``ADDED docs/a.txt``."""
    return Text.assemble((kind.value, _KIND_STYLES[kind]), " ", display_path(path))


def format_summary_line(command: str, root: Path | str, metrics: Mapping[str, Any]) -> str:
    """Return a consistent, markup-formatted summary line.

    Args:
        command: Command name to include in the summary.
        root: Root path the command operated on.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {escape(display_path(root))}: {parts}.[/green]"


class ReportEmitter:
    """Print scan reports honoring quiet and summary-only modes."""

    def __init__(
        self, console: Console, *, quiet: bool = False, summary_only: bool = False
    ) -> None:
        self.console = console
        self.quiet = quiet
        self.summary_only = summary_only

    def emit(self, message: RenderableType, *, mode: str = "detail") -> None:
        """Print ``message`` unless the active mode filters it out.

        Args:
            message: Renderable or markup string to print.
            mode: One of ``detail``, ``summary``, ``warning``, or ``error``.
        """
        if self.quiet and mode != "error":
            return
        if self.summary_only and mode not in _IMPORTANT_MODES:
            return
        self.console.print(message, soft_wrap=True)

    def scan_duration(self, seconds: float) -> None:
        self.emit(f"Scan completed in {seconds:.2f}s")

    def warnings(self, messages: Iterable[str]) -> None:
        for message in messages:
            text = escape(display_path(message))
            self.emit(f"[yellow]Warning: {text}[/yellow]", mode="warning")

    def skipped(self, errors: Mapping[str, str]) -> None:
        if not errors:
            return
        self.emit(
            f"[yellow]{len(errors)} entries could not be read and were skipped:[/yellow]",
            mode="warning",
        )
        for path, reason in sorted(errors.items()):
            entry = f"{escape(display_path(path))}: {escape(reason)}"
            self.emit(f"[yellow]  - {entry}[/yellow]", mode="warning")

    def first_run(self) -> None:
        self.emit("First scan - no previous snapshot")

    def changes(self, changes: ChangeSet) -> None:
        for kind, path in changes.entries():
            self.emit(format_change(kind, path))
        if changes.is_empty:
            self.emit("No changes detected.")

    def saved(self, snapshot_path: Path, result: ScanResult) -> None:
        self.emit(f"Snapshot saved to {escape(display_path(snapshot_path))}")
        self.emit(f"Total size: {total_size_mb(result.snapshot):.2f} MB")

    def summary(self, result: ScanResult, changes: ChangeSet | None) -> None:
        metrics: dict[str, Any] = count_entries(result.snapshot)
        if changes is None:
            metrics["first_run"] = True
        else:
            metrics.update(changes.counts())
        if result.errors:
            metrics["skipped"] = len(result.errors)
        metrics["total_mb"] = f"{total_size_mb(result.snapshot):.2f}"
        self.emit(format_summary_line("Scan", result.root, metrics), mode="summary")


def build_json_payload(
    result: ScanResult,
    changes: ChangeSet | None,
    *,
    snapshot_path: Path,
    warnings: list[str],
) -> dict[str, Any]:
    """Return the JSON document emitted by ``snapdiff scan --json``.

    Args:
        result: Outcome of the current scan.
        changes: Detected changes, or ``None`` on a first run.
        snapshot_path: File the snapshot is persisted to.
        warnings: Non-fatal problems encountered during the run.

    Returns:
        dict[str, Any]: JSON-serializable payload.
    """
    detected = changes if changes is not None else ChangeSet()
    counts: dict[str, Any] = {**count_entries(result.snapshot), **detected.counts()}
    payload: dict[str, Any] = {
        "context": {
            "root": display_path(result.root),
            "snapshot": display_path(snapshot_path),
            "first_run": changes is None,
        },
        "changes": {
            "added": [display_path(path) for path in detected.added],
            "removed": [display_path(path) for path in detected.removed],
            "modified": [display_path(path) for path in detected.modified],
        },
        "counts": counts,
        "summary": {
            "total_bytes": total_size(result.snapshot),
            "total_mb": round(total_size_mb(result.snapshot), 2),
            "elapsed_seconds": round(result.elapsed_seconds, 3),
        },
    }
    if result.errors:
        payload["skipped"] = {
            display_path(path): reason for path, reason in sorted(result.errors.items())
        }
    if warnings:
        payload["warnings"] = [display_path(message) for message in warnings]
    return payload


__all__ = [
    "ReportEmitter",
    "build_json_payload",
    "display_path",
    "format_change",
    "format_summary_line",
]
