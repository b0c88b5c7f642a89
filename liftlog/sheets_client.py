"""Google Sheets transport used by the LiftLog sync engine.

This module centralises all direct interactions with the Google Sheets API.
It exposes exactly the three range operations the sync engine needs:

* ``read_range`` returns the rows of a range with every cell as a string.
* ``write_range`` writes a block of rows starting at a range.
* ``clear_range`` blanks a range.

Titles are always quoted according to A1 notation rules.  Every failure is
raised as a :class:`SheetsClientError` subclass carrying the remote error
message unchanged; no retries happen here or in the engine.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from liftlog.workbook_service import WorkbookService
from settings import SyncSettings

SCOPES: Sequence[str] = ("https://www.googleapis.com/auth/spreadsheets",)
DEFAULT_VALUE_INPUT_OPTION = "USER_ENTERED"


class SheetsClientError(RuntimeError):
    """Base error raised for Sheets API failures."""


class SheetsCredentialsError(SheetsClientError):
    """Raised when the access token is rejected or has expired."""


class SheetsApiResponseError(SheetsClientError):
    """Raised when the Google API returns an error response."""


def _normalise_title(title: str) -> str:
    """Return a worksheet title quoted according to A1 notation rules."""

    safe = (title or "").strip()
    if not safe:
        raise SheetsClientError("Worksheet title must be configured.")
    safe = safe.replace("'", "''")
    return f"'{safe}'"


def a1_range(title: str, range_spec: str) -> str:
    """Return ``range_spec`` qualified with the quoted worksheet ``title``."""

    return f"{_normalise_title(title)}!{range_spec}"


def _error_message(exc: Exception) -> str:
    reason = getattr(exc, "reason", None)
    if isinstance(reason, str) and reason:
        return reason
    return str(exc)


def _expiry_from_millis(token_expiry: Optional[int]) -> Optional[datetime]:
    if token_expiry is None:
        return None
    # google-auth compares against naive UTC datetimes
    expiry = datetime.fromtimestamp(token_expiry / 1000, tz=timezone.utc)
    return expiry.replace(tzinfo=None)


def build_credentials(access_token: str, token_expiry: Optional[int] = None) -> Credentials:
    """Wrap an already-issued OAuth access token."""

    if not access_token:
        raise SheetsCredentialsError("Access token is missing.")
    return Credentials(token=access_token, expiry=_expiry_from_millis(token_expiry), scopes=list(SCOPES))


def _build_service(credentials: Credentials):
    try:
        return build("sheets", "v4", credentials=credentials, cache_discovery=False)
    except Exception as exc:  # pragma: no cover - HTTP / discovery error guard
        raise SheetsApiResponseError(str(exc)) from exc


class GoogleSheetsClient:
    """Concrete helper that speaks to Google Sheets using the REST API."""

    def __init__(
        self,
        spreadsheet_id: str,
        *,
        credentials: Optional[Credentials] = None,
        service=None,
        value_input_option: str = DEFAULT_VALUE_INPUT_OPTION,
    ) -> None:
        if service is None:
            if credentials is None:
                raise SheetsCredentialsError("Credentials are required to reach Google Sheets.")
            service = _build_service(credentials)
        self._spreadsheet_id = spreadsheet_id
        self._service = service
        self._value_input_option = value_input_option

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def read_range(self, title: str, range_spec: str) -> List[List[str]]:
        """Return the rows in ``range_spec``; an empty range yields ``[]``."""

        request = (
            self._service.spreadsheets()
            .values()
            .get(spreadsheetId=self._spreadsheet_id, range=a1_range(title, range_spec))
        )
        response = self._execute(request)
        values = response.get("values", []) if isinstance(response, Mapping) else []
        return [["" if cell is None else str(cell) for cell in row] for row in values]

    def write_range(self, title: str, range_spec: str, rows: Sequence[Sequence[Any]]) -> None:
        """Write ``rows`` starting at the top-left cell of ``range_spec``."""

        request = (
            self._service.spreadsheets()
            .values()
            .update(
                spreadsheetId=self._spreadsheet_id,
                range=a1_range(title, range_spec),
                valueInputOption=self._value_input_option,
                body={"values": [list(row) for row in rows], "majorDimension": "ROWS"},
            )
        )
        self._execute(request)

    def clear_range(self, title: str, range_spec: str) -> None:
        request = (
            self._service.spreadsheets()
            .values()
            .clear(spreadsheetId=self._spreadsheet_id, range=a1_range(title, range_spec), body={})
        )
        self._execute(request)

    @staticmethod
    def _execute(request) -> Mapping[str, Any]:
        try:
            return request.execute()
        except HttpError as exc:
            raise SheetsApiResponseError(_error_message(exc)) from exc
        except GoogleAuthError as exc:
            raise SheetsCredentialsError(str(exc)) from exc


def is_workbook_target(spreadsheet_id: str) -> bool:
    """Return ``True`` when ``spreadsheet_id`` names a local JSON workbook."""

    return Path(spreadsheet_id).suffix.lower() == ".json"


def build_client(settings: SyncSettings) -> GoogleSheetsClient:
    """Factory helper used by the sync engine to construct a client."""

    if is_workbook_target(settings.spreadsheet_id):
        path = Path(settings.spreadsheet_id).expanduser()
        return GoogleSheetsClient(spreadsheet_id=str(path), service=WorkbookService(path))

    credentials = build_credentials(settings.access_token, settings.token_expiry)
    return GoogleSheetsClient(spreadsheet_id=settings.spreadsheet_id, credentials=credentials)


__all__ = [
    "GoogleSheetsClient",
    "SheetsApiResponseError",
    "SheetsClientError",
    "SheetsCredentialsError",
    "a1_range",
    "build_client",
    "build_credentials",
    "is_workbook_target",
]
