from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from liftlog.models import ExerciseId, WorkoutLog, WorkoutSet
from liftlog.stats import progress_points, range_start


def _log(day: str, exercise: str, *sets: WorkoutSet) -> WorkoutLog:
    return WorkoutLog(id=f"{day}-{exercise}", date=day, exercise_id=ExerciseId(exercise), sets=list(sets))


def test_range_start_labels() -> None:
    today = date(2024, 5, 31)

    assert range_start("ALL", today) is None
    assert range_start("1y", today) == "2023-05-31"
    assert range_start("3M", today) == "2024-02-29"
    assert range_start("3M", date(2024, 2, 10)) == "2023-11-10"
    assert range_start("1Y", date(2024, 2, 29)) == "2023-03-01"


def test_range_start_rejects_unknown_label() -> None:
    with pytest.raises(ValueError):
        range_start("6W")


def test_progress_points_aggregate_by_date() -> None:
    logs = [
        _log("2024-01-02", "ex_1", WorkoutSet(id="a", reps=5, weight=200), WorkoutSet(id="b", reps=3, weight=220)),
        _log("2024-01-01", "ex_1", WorkoutSet(id="c", reps=10, weight=135)),
        _log("2024-01-02", "ex_1", WorkoutSet(id="d", reps=8, weight=180)),
        _log("2024-01-02", "ex_3", WorkoutSet(id="e", time=60)),
    ]

    points = progress_points(logs, "ex_1")

    assert [point.date for point in points] == ["2024-01-01", "2024-01-02"]
    second = points[1]
    assert second.max_weight == 220
    assert second.min_weight == 180
    assert second.avg_weight == pytest.approx(200)
    assert second.total_reps == 16
    assert second.max_reps_set == 8


def test_progress_points_for_timed_and_bodyweight_sets() -> None:
    logs = [
        _log("2024-01-01", "ex_3", WorkoutSet(id="a", time=45), WorkoutSet(id="b", time=60)),
        _log("2024-01-01", "ex_5", WorkoutSet(id="c", reps=12), WorkoutSet(id="d", reps=10)),
    ]

    (plank,) = progress_points(logs, "ex_3")
    (pull_up,) = progress_points(logs, "ex_5")

    assert (plank.total_time, plank.max_time_set, plank.max_weight) == (105, 60, None)
    assert (pull_up.total_reps, pull_up.avg_reps_set) == (22, 11.0)


def test_progress_points_respect_since() -> None:
    logs = [
        _log("2023-12-31", "ex_1", WorkoutSet(id="a", reps=5, weight=100)),
        _log("2024-01-01", "ex_1", WorkoutSet(id="b", reps=5, weight=105)),
    ]

    assert [point.date for point in progress_points(logs, "ex_1", since="2024-01-01")] == ["2024-01-01"]
