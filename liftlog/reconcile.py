"""Pull and push between the local store and the workout spreadsheet.

``pull``
    Refresh the exercise catalog, then rebuild the local logs from every
    remote row plus every local set whose content signature has no remote
    twin.  This is a content-addressed union rather than a three-way merge:
    a remote set edited on another device never matches its local
    counterpart, so both versions survive as separate sets.

``push``
    Overwrite the whole data tab with the local logs.  Push never reads the
    remote tab first and is last-writer-wins for the entire tab.  The clear
    and the write are two separate requests; when the write fails the tab is
    left empty until the next successful push.

No reconciliation state is kept between calls.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from liftlog.catalog import Catalog, refresh_catalog
from liftlog.models import DATA_HEADERS, FlatRow, WorkoutLog
from liftlog.row_codec import decode_rows, encode_log, encode_logs
from liftlog.sheets_client import GoogleSheetsClient, SheetsClientError, build_client
from liftlog.signature import PositionCounter, row_signature
from settings import SyncSettings
from store import LocalStore

logger = logging.getLogger(__name__)

HEADER_SENTINEL = "Date"
DATA_RANGE = "A:F"
DATA_WRITE_START = "A1"
EXERCISES_RANGE = "A2:E"

ClientFactory = Callable[[SyncSettings], GoogleSheetsClient]


class SyncInProgressError(RuntimeError):
    """Raised when a pull or push is requested while another one is running."""


@dataclass
class SyncResult:
    operation: str
    message: str
    remote_rows: int = 0
    local_unique_rows: int = 0
    written_rows: int = 0
    logs: int = 0
    exercises: int = 0
    catalog_source: Optional[str] = None


def strip_header(rows: Sequence[Sequence[str]]) -> List[List[str]]:
    """Drop the first row when its first cell is the ``Date`` header."""

    body = [list(row) for row in rows]
    if body and body[0] and body[0][0] == HEADER_SENTINEL:
        return body[1:]
    return body


def remote_signatures(rows: Iterable[Sequence[str]]) -> set:
    counter = PositionCounter()
    return {row_signature(row, counter) for row in rows}


def local_unique_rows(
    logs: Iterable[WorkoutLog],
    catalog: Catalog,
    signatures: set,
) -> List[FlatRow]:
    """Encode ``logs`` and keep the rows whose signature is not in ``signatures``.

    Positions are counted over the local rows only, independently of the
    remote counter.
    """

    counter = PositionCounter()
    unique: List[FlatRow] = []
    for log in logs:
        for row in encode_log(log, catalog):
            if row_signature(row, counter) not in signatures:
                unique.append(row)
    return unique


def merge_rows(
    remote_rows: Sequence[Sequence[str]],
    logs: Iterable[WorkoutLog],
    catalog: Catalog,
) -> Tuple[List[FlatRow], List[FlatRow]]:
    """Return ``(remote rows + local-unique rows, local-unique rows)``."""

    unique = local_unique_rows(logs, catalog, remote_signatures(remote_rows))
    merged: List[FlatRow] = [list(row) for row in remote_rows]
    merged.extend(unique)
    return merged, unique


def sort_for_push(logs: Iterable[WorkoutLog]) -> List[WorkoutLog]:
    """Order logs by ascending date; ties keep their store order."""

    return sorted(logs, key=lambda log: log.date)


class SyncEngine:
    """Coordinate pull and push for one :class:`~store.LocalStore`."""

    def __init__(
        self,
        store: LocalStore,
        settings: SyncSettings,
        *,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._client_factory = client_factory or build_client
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def _client(self) -> GoogleSheetsClient:
        self._settings.require_configured()
        return self._client_factory(self._settings)

    def _acquire(self, operation: str) -> None:
        if not self._lock.acquire(blocking=False):
            raise SyncInProgressError(f"Cannot {operation}: another sync is already running.")

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------
    def pull(self) -> SyncResult:
        self._acquire("pull")
        try:
            return self._pull()
        finally:
            self._lock.release()

    def push(self) -> SyncResult:
        self._acquire("push")
        try:
            return self._push()
        finally:
            self._lock.release()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _pull(self) -> SyncResult:
        client = self._client()
        settings = self._settings

        previous_catalog = self._store.list_exercises()
        exercise_rows = client.read_range(settings.exercises_tab, EXERCISES_RANGE)
        exercises, catalog_source = refresh_catalog(exercise_rows, previous_catalog)
        catalog = Catalog(exercises)

        remote_rows = strip_header(client.read_range(settings.data_tab, DATA_RANGE))

        # Local logs carry ids from the catalog they were written against.
        # Catalog lookups are first-id-wins, so listing the previous snapshot
        # first keeps its remote-N ids bound to their old names.
        local_catalog = Catalog(list(previous_catalog) + list(exercises))
        merged, unique = merge_rows(remote_rows, self._store.list_logs(), local_catalog)
        logs = decode_rows(merged, catalog)

        # The catalog and the logs must change together; the logs only
        # resolve against the catalog they were decoded with.
        self._store.replace_exercises(exercises)
        self._store.replace_logs(logs)

        message = (
            f"Synced. Loaded {len(remote_rows)} rows from cloud. "
            f"Found {len(unique)} unsaved local sets."
        )
        logger.info(
            "Pull complete: %s remote rows, %s local-unique rows, %s logs, catalog from %s",
            len(remote_rows),
            len(unique),
            len(logs),
            catalog_source,
        )
        return SyncResult(
            operation="pull",
            message=message,
            remote_rows=len(remote_rows),
            local_unique_rows=len(unique),
            logs=len(logs),
            exercises=len(exercises),
            catalog_source=catalog_source,
        )

    def build_push_rows(self) -> List[FlatRow]:
        """Return the header plus every local set in push order."""

        catalog = Catalog(self._store.list_exercises())
        rows: List[FlatRow] = [list(DATA_HEADERS)]
        rows.extend(encode_logs(sort_for_push(self._store.list_logs()), catalog))
        return rows

    def _push(self) -> SyncResult:
        client = self._client()
        tab = self._settings.data_tab
        rows = self.build_push_rows()

        client.clear_range(tab, DATA_RANGE)
        try:
            client.write_range(tab, DATA_WRITE_START, rows)
        except SheetsClientError:
            logger.error("Push failed after clearing %r; the remote tab is now empty", tab)
            raise

        self._store.mark_all_synced()
        written = len(rows) - 1
        logger.info("Push complete: wrote %s sets to %r", written, tab)
        return SyncResult(
            operation="push",
            message=f"Successfully saved. Overwrote sheet with {written} sets.",
            written_rows=written,
            logs=len(self._store.list_logs()),
            exercises=len(self._store.list_exercises()),
        )


__all__ = [
    "DATA_RANGE",
    "EXERCISES_RANGE",
    "HEADER_SENTINEL",
    "SyncEngine",
    "SyncInProgressError",
    "SyncResult",
    "local_unique_rows",
    "merge_rows",
    "remote_signatures",
    "sort_for_push",
    "strip_header",
]
