"""Configuration models describing snapdiff settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SnapdiffBaseModel(BaseModel):
    """Shared configuration for snapdiff settings models."""

    model_config = ConfigDict(extra="forbid")


class SnapshotSettings(SnapdiffBaseModel):
    """Where snapshots live and how unreadable ones are treated.

    Attributes:
        directory: Directory holding one snapshot file per scanned root.
        on_corrupt: Whether an undecodable snapshot is reported as a warning
            (and treated as a first run) or aborts the command.
    """

    directory: str = "~/.snapdiff/snapshots"
    on_corrupt: Literal["warn", "fail"] = "warn"


class ScanSettings(SnapdiffBaseModel):
    """Directory traversal options.

    Attributes:
        fail_fast: Abort the scan on the first inaccessible entry.
        follow_symlinks: Stat symlink targets and descend into linked directories.
    """

    fail_fast: bool = True
    follow_symlinks: bool = False


class DetectionSettings(SnapdiffBaseModel):
    """Change classification options.

    Attributes:
        include_type_changes: Report paths that switched between file and directory.
    """

    include_type_changes: bool = False


class LoggingSettings(SnapdiffBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file; enables size-based rotation when set.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of rotated log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = Field(default=10, ge=1)
    backup_count: int = Field(default=3, ge=0)


class CLIOptions(SnapdiffBaseModel):
    """CLI output defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class SnapdiffConfig(SnapdiffBaseModel):
    """Top-level configuration for snapdiff."""

    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "SnapdiffBaseModel",
    "SnapshotSettings",
    "ScanSettings",
    "DetectionSettings",
    "LoggingSettings",
    "CLIOptions",
    "SnapdiffConfig",
]
