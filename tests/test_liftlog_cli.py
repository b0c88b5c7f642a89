from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import liftlog_cli
from liftlog.models import ExerciseDefinition, ExerciseId, ExerciseName, ExerciseType
from store import LocalStore


@pytest.fixture
def paths(tmp_path, monkeypatch):
    monkeypatch.setenv("LIFTLOG_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("LIFTLOG_SPREADSHEET_ID", raising=False)
    monkeypatch.delenv("LIFTLOG_ACCESS_TOKEN", raising=False)
    store_path = tmp_path / "store.json"
    settings_path = tmp_path / "settings.json"
    return ["--store", str(store_path), "--settings", str(settings_path)], store_path, settings_path


def _exercise(kind: ExerciseType) -> ExerciseDefinition:
    return ExerciseDefinition(id=ExerciseId("ex"), name=ExerciseName("Thing"), type=kind)


def test_parse_set_per_exercise_type() -> None:
    weighted = liftlog_cli.parse_set("10x135", _exercise(ExerciseType.WEIGHT))
    reps = liftlog_cli.parse_set("12", _exercise(ExerciseType.REPS))
    timed = liftlog_cli.parse_set("60s", _exercise(ExerciseType.TIME))

    assert (weighted.reps, weighted.weight, weighted.completed) == (10, 135.0, True)
    assert (reps.reps, reps.weight) == (12, None)
    assert (timed.reps, timed.time) == (0, 60)


def test_parse_set_rejects_garbage() -> None:
    with pytest.raises(ValueError, match="Cannot parse set"):
        liftlog_cli.parse_set("heavy", _exercise(ExerciseType.WEIGHT))


def test_seed_log_and_show(paths, capsys) -> None:
    common, store_path, _settings_path = paths

    assert liftlog_cli.main(common + ["seed"]) == 0
    assert liftlog_cli.main(common + ["log", "squat", "5x225", "5x235", "--date", "2024-06-01", "--notes", "belt"]) == 0
    capsys.readouterr()

    assert liftlog_cli.main(common + ["show", "--date", "2024-06-01"]) == 0
    output = capsys.readouterr().out
    assert "2024-06-01  Squat" in output
    assert "5 reps @ 235" in output
    assert "notes: belt" in output

    store = LocalStore.load(store_path)
    squat = [log for log in store.list_logs() if log.exercise_id == "ex_2"]
    assert len(squat) == 1
    assert not squat[0].synced


def test_log_unknown_exercise_fails(paths, capsys) -> None:
    common, _store_path, _settings_path = paths
    liftlog_cli.main(common + ["seed"])

    assert liftlog_cli.main(common + ["log", "Deadlift", "5x315"]) == 1
    assert "Unknown exercise" in capsys.readouterr().err


def test_delete_set_and_log(paths, capsys) -> None:
    common, store_path, _settings_path = paths
    liftlog_cli.main(common + ["seed"])

    assert liftlog_cli.main(common + ["delete", "seed_log_1", "--set", "s1"]) == 0
    assert [entry.id for entry in LocalStore.load(store_path).get_log("seed_log_1").sets] == ["s2", "s3"]

    assert liftlog_cli.main(common + ["delete", "seed_log_1"]) == 0
    assert LocalStore.load(store_path).list_logs() == []
    assert liftlog_cli.main(common + ["delete", "seed_log_1"]) == 1
    assert "No log" in capsys.readouterr().err


def test_pull_without_configuration_reports_error(paths, capsys) -> None:
    common, _store_path, _settings_path = paths

    assert liftlog_cli.main(common + ["pull"]) == 1
    assert "Error: Settings not configured" in capsys.readouterr().err


def test_configure_accepts_spreadsheet_url(paths, capsys) -> None:
    common, _store_path, settings_path = paths

    code = liftlog_cli.main(
        common
        + [
            "configure",
            "--spreadsheet-id",
            "https://docs.google.com/spreadsheets/d/abc123/edit#gid=0",
            "--access-token",
            "tok",
        ]
    )

    assert code == 0
    saved = json.loads(settings_path.read_text(encoding="utf-8"))
    assert saved["spreadsheet_id"] == "abc123"
    assert saved["access_token"] == "tok"
    assert "Spreadsheet : abc123" in capsys.readouterr().out


def test_push_and_pull_against_local_workbook(paths, tmp_path, capsys) -> None:
    common, store_path, _settings_path = paths
    workbook = tmp_path / "lifts.json"
    liftlog_cli.main(common + ["configure", "--spreadsheet-id", str(workbook), "--access-token", "offline"])
    liftlog_cli.main(common + ["seed"])
    capsys.readouterr()

    assert liftlog_cli.main(common + ["push"]) == 0
    assert "Successfully saved. Overwrote sheet with 3 sets." in capsys.readouterr().out

    assert liftlog_cli.main(common + ["pull"]) == 0
    assert "Synced. Loaded 3 rows from cloud. Found 0 unsaved local sets." in capsys.readouterr().out
    store = LocalStore.load(store_path)
    assert len(store.list_exercises()) == 6
    (log,) = store.list_logs()
    assert [(s.reps, s.weight) for s in log.sets] == [(10, 135), (8, 155), (5, 185)]


def test_stats_for_seeded_bench(paths, capsys) -> None:
    common, _store_path, _settings_path = paths
    liftlog_cli.main(common + ["seed"])
    capsys.readouterr()

    assert liftlog_cli.main(common + ["stats", "Bench Press"]) == 0
    assert "max 185" in capsys.readouterr().out
    assert liftlog_cli.main(common + ["stats", "Bench Press", "--range", "5D"]) == 1


def test_add_set_copies_last_set_as_not_done(paths, capsys) -> None:
    common, store_path, _settings_path = paths
    liftlog_cli.main(common + ["seed"])

    assert liftlog_cli.main(common + ["add-set", "seed_log_1"]) == 0
    assert "Added set 4" in capsys.readouterr().out

    log = LocalStore.load(store_path).get_log("seed_log_1")
    added = log.sets[-1]
    assert len(log.sets) == 4
    assert (added.reps, added.weight, added.time, added.completed) == (5, 185, None, False)
    assert added.id not in {"s1", "s2", "s3"}
    assert liftlog_cli.main(common + ["add-set", "missing"]) == 1


def test_edit_set_changes_only_given_fields(paths, capsys) -> None:
    common, store_path, _settings_path = paths
    liftlog_cli.main(common + ["seed"])

    assert liftlog_cli.main(common + ["edit-set", "seed_log_1", "s2", "--weight", "160", "--not-done"]) == 0
    assert "8 reps @ 160 (not done)" in capsys.readouterr().out

    log = LocalStore.load(store_path).get_log("seed_log_1")
    edited = log.sets[1]
    assert (edited.reps, edited.weight, edited.completed) == (8, 160, False)
    assert (log.sets[0].weight, log.sets[2].weight) == (135, 185)

    assert liftlog_cli.main(common + ["edit-set", "seed_log_1", "s2", "--reps", "9", "--done"]) == 0
    edited = LocalStore.load(store_path).get_log("seed_log_1").sets[1]
    assert (edited.reps, edited.weight, edited.completed) == (9, 160, True)

    assert liftlog_cli.main(common + ["edit-set", "seed_log_1", "nope", "--reps", "1"]) == 1
    assert "No set 'nope'" in capsys.readouterr().err


def test_exercises_search_and_filters(paths, capsys) -> None:
    common, _store_path, _settings_path = paths
    liftlog_cli.main(common + ["seed"])
    capsys.readouterr()

    assert liftlog_cli.main(common + ["exercises", "--search", "press"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split("  ")[0] for line in lines] == ["Bench Press", "Overhead Press"]

    assert liftlog_cli.main(common + ["exercises", "--type", "reps", "--muscle", "Back"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    assert lines[0].startswith("Pull Up")

    assert liftlog_cli.main(common + ["exercises", "--search", "deadlift"]) == 0
    assert capsys.readouterr().out.strip() == "No exercises found."

    assert liftlog_cli.main(common + ["exercises", "--list-muscles"]) == 0
    assert "Shoulders" in capsys.readouterr().out.splitlines()
