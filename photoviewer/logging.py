"""
Centralized logging configuration for PhotoViewer.

Console output is colored and prefixed by application area; setup_logging()
adds a timestamped log file (plus a latest.log symlink) for post-mortems.
Session tokens must never be logged in full; use vault.mask_token().
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

RESET = "\033[0m"
DIM = "\033[2m"

# Area -> console color. Unknown areas print in white.
AREA_COLORS = {
    "main": "\033[96m",
    "vault": "\033[94m",
    "session": "\033[95m",
    "api": "\033[32m",
    "shell": "\033[36m",
}
DEFAULT_COLOR = "\033[37m"

LEVEL_COLORS = {
    logging.DEBUG: DIM,
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[91m\033[1m",
}


class AreaFormatter(logging.Formatter):
    """Plain formatter for log files: TIMESTAMP [PHOTOVIEWER.area] LEVEL: message."""

    def __init__(self, area: str = "main"):
        super().__init__()
        self.area = area
        self.prefix = f"PHOTOVIEWER.{area}"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        line = f"{timestamp} [{self.prefix}] {record.levelname}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ColoredConsoleFormatter(AreaFormatter):
    """[PHOTOVIEWER.area] HH:MM:SS LEVEL    message, with ANSI colors."""

    def format(self, record: logging.LogRecord) -> str:
        area_color = AREA_COLORS.get(self.area, DEFAULT_COLOR)
        level_color = LEVEL_COLORS.get(record.levelno, RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        return (
            f"{area_color}[{self.prefix}]{RESET} {DIM}{timestamp}{RESET} "
            f"{level_color}{record.levelname:<8}{RESET} {record.getMessage()}"
        )


_log_path: Optional[Path] = None
_console_level: int = logging.WARNING
_area_loggers: dict[str, logging.Logger] = {}


def _add_file_handler(logger: logging.Logger, area: str) -> None:
    handler = logging.FileHandler(_log_path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(AreaFormatter(area))
    logger.addHandler(handler)


def setup_logging(
    log_dir: Optional[str] = None,
    console_level: int = logging.WARNING,
) -> Path:
    """
    Initialize the logging system.

    Loggers handed out by get_logger() before this call (module-level
    loggers) are reconfigured in place.

    Args:
        log_dir: Directory for log files. Defaults to ~/.photoviewer/logs
        console_level: Minimum level for console output

    Returns:
        Path to the log directory
    """
    global _log_path, _console_level

    log_root = Path(log_dir) if log_dir else Path.home() / ".photoviewer" / "logs"
    log_root.mkdir(parents=True, exist_ok=True)
    _console_level = console_level

    log_filename = datetime.now().strftime("photoviewer_%Y%m%d_%H%M%S.log")
    _log_path = log_root / log_filename

    latest_link = log_root / "latest.log"
    try:
        if latest_link.is_symlink() or latest_link.exists():
            latest_link.unlink()
        latest_link.symlink_to(log_filename)
    except OSError:
        pass  # Symlinks may not work on all systems

    for area, logger in _area_loggers.items():
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()
            else:
                handler.setLevel(console_level)
        _add_file_handler(logger, area)

    get_logger("main").info(f"Logging initialized. Log file: {_log_path}")
    return log_root


def get_logger(area: str = "main") -> logging.Logger:
    """
    Get a logger for a specific application area.

    Example:
        logger = get_logger("vault")
        logger.warning("Master key regenerated")
        # Output: [PHOTOVIEWER.vault] 14:32:15 WARNING  Master key regenerated
    """
    logger = logging.getLogger(f"photoviewer.{area}")

    if area not in _area_loggers:
        logger.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(_console_level)
        console_handler.setFormatter(ColoredConsoleFormatter(area))
        logger.addHandler(console_handler)

        if _log_path:
            _add_file_handler(logger, area)

        _area_loggers[area] = logger

    return logger
