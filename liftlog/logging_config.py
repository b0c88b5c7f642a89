"""Logging setup for LiftLog.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where the records go.  Pull and push summaries land in
``liftlog.log`` inside the application directory.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from liftlog import app_paths

LOG_FILENAME = "liftlog.log"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _file_handler_for(root: logging.Logger, log_path: Path) -> Optional[logging.Handler]:
    target = str(log_path.resolve())
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return handler
    return None


def _console_handler(root: logging.Logger) -> Optional[logging.Handler]:
    for handler in root.handlers:
        if getattr(handler, "_liftlog_console", False):
            return handler
    return None


def configure_logging(
    level: int = logging.INFO,
    path: Optional[Path] = None,
    *,
    console: bool = False,
) -> Path:
    """Attach the LiftLog file handler to the root logger and return its path.

    Calling this again with the same file only lowers the root level, so
    the CLI can call it on every invocation.  ``console`` mirrors records at
    ``level`` and above to stderr.
    """

    log_path = Path(path) if path else app_paths.data_path(LOG_FILENAME)
    app_paths.ensure_directory(log_path.parent)

    root = logging.getLogger()
    root.setLevel(min(root.level, level) if root.handlers else level)

    if _file_handler_for(root, log_path) is None:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(file_handler)

    if console and _console_handler(root) is None:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(level)
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        stream_handler._liftlog_console = True  # type: ignore[attr-defined]
        root.addHandler(stream_handler)

    root.debug("Logging to %s", log_path)
    return log_path


__all__ = ["configure_logging"]
