"""Centralised helpers for managing LiftLog application directories."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

_APP_ENV_VARS: Iterable[str] = ("LOCALAPPDATA", "APPDATA")


def app_dir() -> Path:
    """Return the base directory for settings, snapshots and logs.

    ``LIFTLOG_HOME`` wins when set, then the Windows application data
    folders, then ``~/.liftlog``.
    """

    override = os.environ.get("LIFTLOG_HOME")
    if override:
        return Path(override).expanduser().resolve()
    for env_var in _APP_ENV_VARS:
        value = os.environ.get(env_var)
        if value:
            return Path(value).expanduser().resolve() / "LiftLog"
    return Path.home().resolve() / ".liftlog"


def ensure_directory(path: Path) -> Path:
    """Ensure that ``path`` exists, returning the :class:`~pathlib.Path`."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def data_path(*parts: str) -> Path:
    """Return a path rooted inside :func:`app_dir`, creating parent directories."""

    target = app_dir().joinpath(*parts)
    ensure_directory(target.parent)
    return target


__all__ = ["app_dir", "data_path", "ensure_directory"]
