from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from liftlog import reconcile
from liftlog.catalog import seed_exercises
from liftlog.models import ExerciseId, WorkoutLog, WorkoutSet
from liftlog.sheets_client import build_client
from liftlog.workbook_service import WorkbookService, parse_range
from settings import SyncSettings
from store import LocalStore


def _values(service: WorkbookService):
    return service.spreadsheets().values()


def _write_workbook(path: Path, sheets) -> None:
    path.write_text(json.dumps({"sheets": sheets}), encoding="utf-8")


def test_parse_range_handles_quoted_titles_and_open_ranges() -> None:
    title, start, end = parse_range("'Bob''s Log'!A2:E")
    assert title == "Bob's Log"
    assert (start.row, start.column) == (2, 1)
    assert (end.row, end.column) == (None, 5)

    title, start, end = parse_range("Data!A1")
    assert title == "Data"
    assert (start.row, start.column) == (1, 1)


def test_parse_range_rejects_missing_title() -> None:
    with pytest.raises(ValueError):
        parse_range("!A1")


def test_get_on_missing_workbook_returns_no_values(tmp_path) -> None:
    response = _values(WorkbookService(tmp_path / "absent.json")).get(spreadsheetId="x", range="'Data'!A:F").execute()

    assert "values" not in response


def test_get_slices_rows_and_columns(tmp_path) -> None:
    path = tmp_path / "book.json"
    _write_workbook(
        path,
        {"Exercises": [["Name", "Type", "Muscles", "Description", "Extra", "Ignored"], ["Squat", "Weight", "Legs", "", "x", "y"]]},
    )

    response = _values(WorkbookService(path)).get(spreadsheetId="x", range="'Exercises'!A2:E").execute()

    assert response["values"] == [["Squat", "Weight", "Legs", "", "x"]]


def test_update_then_clear_round_trip(tmp_path) -> None:
    path = tmp_path / "book.json"
    values = _values(WorkbookService(path))

    values.update(
        spreadsheetId="x",
        range="'Data'!A1",
        valueInputOption="USER_ENTERED",
        body={"values": [["Date", "Exercise"], ["2024-01-01", "Squat", 5]]},
    ).execute()
    assert json.loads(path.read_text(encoding="utf-8"))["sheets"]["Data"] == [
        ["Date", "Exercise"],
        ["2024-01-01", "Squat", "5"],
    ]

    values.clear(spreadsheetId="x", range="'Data'!A:F", body={}).execute()
    assert json.loads(path.read_text(encoding="utf-8"))["sheets"]["Data"] == []


def test_push_and_pull_through_a_local_workbook(tmp_path) -> None:
    path = tmp_path / "lifts.json"
    _write_workbook(
        path,
        {
            "Exercises": [
                ["Name", "Type", "Muscle Groups", "Description"],
                ["Bench Press", "Weight", "Chest", ""],
                ["Squat", "Weight", "Legs", ""],
            ],
            "Data": [],
        },
    )
    settings = SyncSettings(spreadsheet_id=str(path), access_token="offline")
    store = LocalStore(
        exercises=seed_exercises(),
        logs=[
            WorkoutLog(
                id="log-1",
                date="2024-03-02",
                exercise_id=ExerciseId("ex_2"),
                sets=[WorkoutSet(id="a", reps=5, weight=225.5)],
            ),
            WorkoutLog(
                id="log-2",
                date="2024-03-01",
                exercise_id=ExerciseId("ex_1"),
                sets=[WorkoutSet(id="b", reps=10, weight=135)],
                notes="easy",
            ),
        ],
    )
    engine = reconcile.SyncEngine(store, settings, client_factory=build_client)

    push = engine.push()
    sheet = json.loads(path.read_text(encoding="utf-8"))["sheets"]["Data"]
    assert push.written_rows == 2
    assert sheet == [
        ["Date", "Exercise", "Reps", "Weight", "Time", "Notes"],
        ["2024-03-01", "Bench Press", "10", "135", "0", "easy"],
        ["2024-03-02", "Squat", "5", "225.5", "0"],
    ]

    pull = engine.pull()
    assert pull.remote_rows == 2
    assert pull.local_unique_rows == 0
    logs = store.list_logs()
    assert [(log.date, log.exercise_id) for log in logs] == [("2024-03-01", "remote-0"), ("2024-03-02", "remote-1")]
    assert logs[1].sets[0].weight == 225.5
