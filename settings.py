"""Sync configuration helpers for LiftLog."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

from liftlog import app_paths

logger = logging.getLogger(__name__)


DEFAULT_DATA_TAB = "Data"
DEFAULT_EXERCISES_TAB = "Exercises"
SYNC_SETTINGS_FILENAME = "sync_settings.json"


class SyncConfigurationError(RuntimeError):
    """Raised when the spreadsheet id or access token has not been configured."""


def parse_spreadsheet_id(value: str) -> str:
    """Normalise a spreadsheet identifier from raw input or URL."""

    if not value:
        return ""
    value = value.strip()
    if "/spreadsheets/d/" in value:
        value = value.split("/spreadsheets/d/", 1)[1]
        value = value.split("/", 1)[0]
    if "?" in value:
        value = value.split("?", 1)[0]
    if "#" in value:
        value = value.split("#", 1)[0]
    return value


@dataclass
class SyncSettings:
    spreadsheet_id: str = ""
    access_token: str = ""
    token_expiry: Optional[int] = None  # epoch milliseconds
    data_tab: str = DEFAULT_DATA_TAB
    exercises_tab: str = DEFAULT_EXERCISES_TAB

    def is_configured(self) -> bool:
        return bool(self.spreadsheet_id.strip() and self.access_token.strip())

    def require_configured(self) -> None:
        if not self.is_configured():
            raise SyncConfigurationError("Settings not configured")

    def to_json(self) -> Dict[str, object]:
        return {
            "spreadsheet_id": self.spreadsheet_id,
            "access_token": self.access_token,
            "token_expiry": self.token_expiry,
            "data_tab": self.data_tab,
            "exercises_tab": self.exercises_tab,
        }


def default_settings_path() -> str:
    return str(app_paths.data_path(SYNC_SETTINGS_FILENAME))


def _coerce_expiry(value: object) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid token_expiry value %r", value)
        return None


def _coerce_title(value: object, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def load_sync_settings(path: Optional[str] = None) -> SyncSettings:
    """Read sync settings, falling back to ``LIFTLOG_*`` environment variables."""

    path = path or default_settings_path()
    data: Dict[str, object] = {}
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as handle:
            loaded = json.load(handle)
        if isinstance(loaded, dict):
            data = loaded

    spreadsheet_id = data.get("spreadsheet_id") or os.getenv("LIFTLOG_SPREADSHEET_ID", "")
    access_token = data.get("access_token") or os.getenv("LIFTLOG_ACCESS_TOKEN", "")
    return SyncSettings(
        spreadsheet_id=parse_spreadsheet_id(str(spreadsheet_id)),
        access_token=str(access_token).strip(),
        token_expiry=_coerce_expiry(data.get("token_expiry")),
        data_tab=_coerce_title(data.get("data_tab"), DEFAULT_DATA_TAB),
        exercises_tab=_coerce_title(data.get("exercises_tab"), DEFAULT_EXERCISES_TAB),
    )


def save_sync_settings(settings: SyncSettings, path: Optional[str] = None) -> None:
    path = path or default_settings_path()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "w", encoding="utf-8") as handle:
        json.dump(settings.to_json(), handle, indent=2)


__all__ = [
    "DEFAULT_DATA_TAB",
    "DEFAULT_EXERCISES_TAB",
    "SyncConfigurationError",
    "SyncSettings",
    "load_sync_settings",
    "parse_spreadsheet_id",
    "save_sync_settings",
]
