"""Per-date progress figures for a single exercise."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from liftlog.models import WorkoutLog, WorkoutSet

RANGE_LABELS = ("ALL", "1Y", "3M")


@dataclass
class ProgressPoint:
    date: str
    max_weight: Optional[float] = None
    min_weight: Optional[float] = None
    avg_weight: Optional[float] = None
    total_reps: int = 0
    max_reps_set: int = 0
    avg_reps_set: float = 0.0
    total_time: int = 0
    max_time_set: int = 0


def range_start(label: str, today: Optional[date] = None) -> Optional[str]:
    """Return the first ISO date covered by ``label`` or ``None`` for ``ALL``."""

    label = label.upper()
    if label not in RANGE_LABELS:
        raise ValueError(f"Unknown range {label!r}; expected one of {', '.join(RANGE_LABELS)}")
    today = today or date.today()
    if label == "1Y":
        try:
            return today.replace(year=today.year - 1).isoformat()
        except ValueError:  # 29 February
            return (today - timedelta(days=365)).isoformat()
    if label == "3M":
        month = today.month - 3
        year = today.year
        if month < 1:
            month += 12
            year -= 1
        day = today.day
        while True:
            try:
                return date(year, month, day).isoformat()
            except ValueError:
                day -= 1
    return None


def _point(day: str, sets: List[WorkoutSet]) -> ProgressPoint:
    weights = [entry.weight for entry in sets if entry.weight and entry.weight > 0]
    reps = [entry.reps for entry in sets]
    times = [entry.time or 0 for entry in sets]
    point = ProgressPoint(date=day)
    if weights:
        point.max_weight = max(weights)
        point.min_weight = min(weights)
        point.avg_weight = sum(weights) / len(weights)
    if reps:
        point.total_reps = sum(reps)
        point.max_reps_set = max(reps)
        point.avg_reps_set = point.total_reps / len(reps)
    if times:
        point.total_time = sum(times)
        point.max_time_set = max(times)
    return point


def progress_points(
    logs: Iterable[WorkoutLog],
    exercise_id: str,
    since: Optional[str] = None,
) -> List[ProgressPoint]:
    """Aggregate every set of ``exercise_id`` by date, oldest first."""

    by_date: Dict[str, List[WorkoutSet]] = {}
    for log in logs:
        if log.exercise_id != exercise_id:
            continue
        if since and log.date < since:
            continue
        by_date.setdefault(log.date, []).extend(log.sets)
    return [_point(day, by_date[day]) for day in sorted(by_date)]


__all__ = ["ProgressPoint", "RANGE_LABELS", "progress_points", "range_start"]
