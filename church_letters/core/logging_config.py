"""Logging setup for the letters service.

Log records go to two files inside ``settings.log_dir`` and to stdout:
- info.log: INFO and above, including every template change and generation
- error.log: ERROR and above, mostly store failures
"""

import logging
import sys
from pathlib import Path

from church_letters.core.config import Settings, get_settings

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handler(path: Path, level: int) -> logging.FileHandler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """Install the file and console handlers on the root logger.

    Calling it again replaces the handlers of the previous call, so an app
    created with different settings logs to its own directory.

    Args:
        settings: Optional settings. If None, uses global settings.

    Returns:
        The configured root logger.
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.log_level == "DEBUG" else logging.INFO

    settings.log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(_file_handler(settings.log_dir / "info.log", logging.INFO))
    root_logger.addHandler(_file_handler(settings.log_dir / "error.log", logging.ERROR))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    return root_logger
