"""Offline workbook service backed by a JSON file simulating a spreadsheet.

:class:`WorkbookService` mimics the ``spreadsheets().values()`` surface of the
Google Sheets client closely enough for :class:`~liftlog.sheets_client.GoogleSheetsClient`
to drive it unchanged.  The workbook is stored as
``{"sheets": {"<title>": [[cell, ...], ...]}}``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class _CellRef:
    row: Optional[int]
    column: Optional[int]


class _WorkbookRequest:
    def __init__(self, callback: Callable[[], Mapping[str, object]]) -> None:
        self._callback = callback

    def execute(self) -> Mapping[str, object]:
        return self._callback()


class WorkbookValuesApi:
    def __init__(self, workbook_path: Path) -> None:
        self._workbook_path = workbook_path

    def get(self, spreadsheetId: str, range: str) -> _WorkbookRequest:  # noqa: N803 - API compatibility
        return _WorkbookRequest(lambda: self._handle_get(range))

    def update(  # noqa: N803 - API compatibility
        self,
        spreadsheetId: str,
        range: str,
        body: Mapping[str, object],
        valueInputOption: str = "RAW",
    ) -> _WorkbookRequest:
        return _WorkbookRequest(lambda: self._handle_update(range, body))

    def clear(  # noqa: N803 - API compatibility
        self,
        spreadsheetId: str,
        range: str,
        body: Optional[Mapping[str, object]] = None,
    ) -> _WorkbookRequest:
        return _WorkbookRequest(lambda: self._handle_clear(range))

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def _load(self) -> Dict[str, List[List[str]]]:
        path = self._workbook_path
        if not path.exists():
            return {}
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
        sheets = payload.get("sheets", {})
        return {title: [list(map(str, row)) for row in rows] for title, rows in sheets.items()}

    def _save(self, sheets: Mapping[str, Sequence[Sequence[str]]]) -> None:
        path = self._workbook_path
        if path.parent:
            path.parent.mkdir(parents=True, exist_ok=True)
        payload = {title: [list(row) for row in rows] for title, rows in sheets.items()}
        with open(path, "w", encoding="utf-8") as handle:
            json.dump({"sheets": payload}, handle, indent=2, ensure_ascii=False)

    # ------------------------------------------------------------------
    # Range operations
    # ------------------------------------------------------------------
    def _handle_get(self, range_spec: str) -> Mapping[str, object]:
        sheets = self._load()
        title, start, end = parse_range(range_spec)
        rows = sheets.get(title, [])
        values = _slice_rows(rows, start, end)
        if not values:
            return {"range": range_spec}
        return {"range": range_spec, "values": values}

    def _handle_update(self, range_spec: str, body: Mapping[str, object]) -> Mapping[str, object]:
        sheets = self._load()
        title, start, _end = parse_range(range_spec)
        rows = sheets.setdefault(title, [])
        base_row = start.row or 1
        base_col = start.column or 1
        values = body.get("values", [])
        updated_cells = 0
        for row_offset, row in enumerate(values if isinstance(values, Sequence) else []):
            target_index = base_row - 1 + row_offset
            while len(rows) <= target_index:
                rows.append([])
            target = rows[target_index]
            for col_offset, cell in enumerate(row):
                col_index = base_col - 1 + col_offset
                while len(target) <= col_index:
                    target.append("")
                target[col_index] = "" if cell is None else str(cell)
                updated_cells += 1
        sheets[title] = _trim(rows)
        self._save(sheets)
        return {"updatedRange": range_spec, "updatedCells": updated_cells}

    def _handle_clear(self, range_spec: str) -> Mapping[str, object]:
        sheets = self._load()
        title, start, end = parse_range(range_spec)
        rows = sheets.get(title, [])
        min_row = max(1, start.row or 1)
        max_row = end.row or len(rows)
        min_col = max(1, start.column or 1)
        for row_index in range(min_row - 1, min(max_row, len(rows))):
            row = rows[row_index]
            max_col = end.column or len(row)
            for col_index in range(min_col - 1, min(max_col, len(row))):
                row[col_index] = ""
        sheets[title] = _trim(rows)
        self._save(sheets)
        return {"clearedRange": range_spec}


class WorkbookSpreadsheetsApi:
    def __init__(self, workbook_path: Path) -> None:
        self._workbook_path = workbook_path

    def values(self) -> WorkbookValuesApi:  # noqa: D401 - compatibility proxy
        return WorkbookValuesApi(self._workbook_path)


class WorkbookService:
    """Minimal Sheets API drop-in that stores worksheets in a JSON file."""

    def __init__(self, workbook_path: Path) -> None:
        self._workbook_path = Path(workbook_path)

    def spreadsheets(self) -> WorkbookSpreadsheetsApi:  # noqa: D401 - compatibility proxy
        return WorkbookSpreadsheetsApi(self._workbook_path)


_CELL_RE = re.compile(r"^(?P<col>[A-Z]*)(?P<row>\d+)?$")


def _trim(rows: List[List[str]]) -> List[List[str]]:
    cleaned = []
    for row in rows:
        row = list(row)
        while row and row[-1] == "":
            row.pop()
        cleaned.append(row)
    while cleaned and not cleaned[-1]:
        cleaned.pop()
    return cleaned


def _slice_rows(rows: Sequence[Sequence[str]], start: _CellRef, end: _CellRef) -> List[List[str]]:
    if not rows:
        return []
    min_row = max(1, start.row or 1)
    min_col = max(1, start.column or 1)
    max_row = end.row or len(rows)
    sliced: List[List[str]] = []
    for row_index in range(min_row - 1, min(max_row, len(rows))):
        row = rows[row_index]
        max_col = end.column or len(row)
        current = [str(row[col_index]) for col_index in range(min_col - 1, min(max_col, len(row)))]
        while current and current[-1] == "":
            current.pop()
        sliced.append(current)
    while sliced and not sliced[-1]:
        sliced.pop()
    return sliced


def parse_range(range_spec: str) -> Tuple[str, _CellRef, _CellRef]:
    """Split ``'Title'!A1:F`` into the title and its start/end cells."""

    text = range_spec.strip()
    if "!" in text:
        title, cells = text.rsplit("!", 1)
    else:
        title, cells = text, ""
    title = title.strip()
    if len(title) >= 2 and title.startswith("'") and title.endswith("'"):
        title = title[1:-1].replace("''", "'")
    if not title:
        raise ValueError(f"Invalid range specification: {range_spec!r}")
    if ":" in cells:
        start_text, end_text = cells.split(":", 1)
    else:
        start_text = end_text = cells
    return title, _parse_cell(start_text), _parse_cell(end_text)


def _parse_cell(value: str) -> _CellRef:
    value = value.strip().upper()
    if not value:
        return _CellRef(row=None, column=None)
    match = _CELL_RE.match(value)
    if not match:
        raise ValueError(f"Invalid cell reference: {value!r}")
    column_label = match.group("col")
    row_text = match.group("row")
    column = _column_index(column_label) if column_label else None
    row = int(row_text) if row_text else None
    return _CellRef(row=row, column=column)


def _column_index(label: str) -> int:
    index = 0
    for char in label:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return max(1, index)


__all__ = ["WorkbookService", "parse_range"]
