"""
Core log utilities for pyqt-bizforms.

Log directory resolution, file handler setup and discovery of the log files
the application has written.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

from pyqt_bizforms.protocols import BizFormsConfig, get_app_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER_NAME = "pyqt_bizforms"


def get_log_dir(config: Optional[BizFormsConfig] = None) -> Path:
    """Return configured log directory or default."""
    config = config or get_app_config()
    if config.log_dir:
        return Path(config.log_dir)
    return Path.home() / ".local" / "share" / "pyqt_bizforms" / "logs"


def configure_logging(config: Optional[BizFormsConfig] = None, console: bool = True) -> Path:
    """
    Attach a file handler (and optionally a console handler) to the package logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        config: Configuration to read log dir, prefix and level from
        console: Also log to stderr

    Returns:
        Path of the log file in use
    """
    config = config or get_app_config()
    log_dir = get_log_dir(config)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{config.log_prefix}{int(time.time())}.log"

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        if getattr(handler, "_bizforms_handler", False):
            package_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler._bizforms_handler = True
    package_logger.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        stream_handler._bizforms_handler = True
        package_logger.addHandler(stream_handler)

    package_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    logger.info(f"Logging to {log_path}")
    return log_path


def get_current_log_file_path() -> Optional[str]:
    """Get the current log file path from the package logger, if one is attached."""
    for name in (PACKAGE_LOGGER_NAME, None):
        for handler in logging.getLogger(name).handlers:
            if isinstance(handler, logging.FileHandler):
                return handler.baseFilename
    return None


def discover_logs(log_directory: Optional[Path] = None) -> List[Path]:
    """
    Discover application log files, newest first.

    Args:
        log_directory: Directory to search (defaults to configured log directory)

    Returns:
        Paths of files matching the configured log prefix
    """
    log_directory = log_directory or get_log_dir()
    if not log_directory.exists():
        return []
    prefix = get_app_config().log_prefix
    logs = [p for p in log_directory.glob("*.log") if p.name.startswith(prefix)]
    return sorted(logs, key=lambda p: p.stat().st_mtime, reverse=True)
