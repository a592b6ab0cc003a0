"""Logging setup for the agent."""

import enum
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

from noderesource.core.paths import ensure_dir, get_log_path

# Rotate the log file at 2 MiB
LOG_FILE_MAX_BYTES = 2 * 1024 * 1024
LOG_FILE_BACKUPS = 3

_FILE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class LogType(str, enum.Enum):
    """Where log records are written.

    Attributes:
        STDOUT: Console only.
        HOST: Rotating file on the host only.
        BOTH: Console and rotating file.
    """

    STDOUT = "stdout"
    HOST = "host"
    BOTH = "both"


def configure_logging(
    *,
    level: int = logging.INFO,
    log_type: LogType = LogType.STDOUT,
    log_dir: Path | None = None,
) -> None:
    """Initialise the root logger.

    Replaces any handlers installed earlier, so it can be called again by
    tests or when the level changes.

    Args:
        level: Root log level.
        log_type: Console, file, or both.
        log_dir: Directory of the log file; defaults to get_log_dir().

    Raises:
        RuntimeError: If the log directory cannot be created.
    """
    handlers: list[logging.Handler] = []

    if log_type in (LogType.STDOUT, LogType.BOTH):
        handlers.append(RichHandler(rich_tracebacks=True, show_path=False))

    if log_type in (LogType.HOST, LogType.BOTH):
        log_path = get_log_path(log_dir)
        ensure_dir(log_path.parent, "log")
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )
