"""Logging configuration for the snapdiff CLI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from snapdiff.config.exceptions import ConfigError
from snapdiff.config.models import LoggingSettings

PACKAGE_LOGGER = "snapdiff"
_HANDLER_FLAG = "_snapdiff_handler"


def configure_logging(
    settings: LoggingSettings, *, console: Console | None = None
) -> logging.Logger:
    """Attach stderr (and optionally rotating file) handlers to the package logger.

    Handlers installed by a previous call are removed first.

    Args:
        settings: Logging section of the effective configuration.
        console: Console used for terminal output; defaults to a stderr console.

    Returns:
        logging.Logger: The configured ``snapdiff`` logger.

    Raises:
        ConfigError: If the level name is unknown or the log file cannot be opened.
    """
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown logging level: {settings.level}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()

    terminal = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    terminal.setLevel(level)
    handlers: list[logging.Handler] = [terminal]

    if settings.file:
        log_path = Path(settings.file).expanduser()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                log_path,
                maxBytes=settings.max_size_mb * 1024 * 1024,
                backupCount=settings.backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            raise ConfigError(f"Unable to open log file {log_path}: {exc}") from exc
        rotating.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        rotating.setLevel(level)
        handlers.append(rotating)

    for handler in handlers:
        setattr(handler, _HANDLER_FLAG, True)
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = ["configure_logging", "PACKAGE_LOGGER"]
