"""Conversion between workout logs and flat sheet rows.

Each set becomes one ``[date, exercise, reps, weight, time, notes]`` row.
Decoding walks the rows in order, regroups them into one log per
``(date, exercise)`` pair and drops rows whose exercise name is not in the
catalog.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from liftlog.catalog import Catalog
from liftlog.models import FlatRow, WorkoutLog, WorkoutSet
from liftlog.signature import PositionCounter, format_number, parse_number

logger = logging.getLogger(__name__)


def encode_log(log: WorkoutLog, catalog: Catalog) -> List[FlatRow]:
    """Return one flat row per set of ``log``.

    Unknown exercise ids are written with the ``Unknown`` sentinel name;
    no set is ever dropped here.
    """

    exercise_name = catalog.name_for(log.exercise_id)
    notes = log.notes or ""
    return [
        [
            log.date,
            exercise_name,
            format_number(entry.reps),
            format_number(entry.weight),
            format_number(entry.time),
            notes,
        ]
        for entry in log.sets
    ]


def encode_logs(logs: Iterable[WorkoutLog], catalog: Catalog) -> List[FlatRow]:
    rows: List[FlatRow] = []
    for log in logs:
        rows.extend(encode_log(log, catalog))
    return rows


def _cell(row: Sequence[str], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


def decode_rows(rows: Iterable[Sequence[str]], catalog: Catalog) -> List[WorkoutLog]:
    """Group flat rows back into workout logs, in first-seen order."""

    counter = PositionCounter()
    grouped: Dict[Tuple[str, str], WorkoutLog] = {}
    dropped = 0

    for row in rows:
        date = _cell(row, 0)
        exercise_name = _cell(row, 1)
        exercise = catalog.by_name(exercise_name)
        if exercise is None:
            dropped += 1
            logger.debug("Dropping row for unknown exercise %r on %s", exercise_name, date)
            continue

        position = counter.next(date, exercise_name)
        weight = parse_number(_cell(row, 3))
        time = parse_number(_cell(row, 4))
        notes = _cell(row, 5)
        workout_set = WorkoutSet(
            id=f"set_{date}_{exercise.id}_{position}",
            reps=int(parse_number(_cell(row, 2))),
            weight=weight if weight > 0 else None,
            time=int(time) if time > 0 else None,
            completed=True,
        )

        key = (date, exercise.id)
        log = grouped.get(key)
        if log is None:
            grouped[key] = WorkoutLog(
                id=f"log_{date}_{exercise.id}",
                date=date,
                exercise_id=exercise.id,
                sets=[workout_set],
                notes=notes,
                synced=True,
            )
            continue
        log.sets.append(workout_set)
        if notes and not log.notes:
            log.notes = notes

    if dropped:
        logger.info("Dropped %s rows with exercise names missing from the catalog", dropped)
    return list(grouped.values())


__all__ = ["decode_rows", "encode_log", "encode_logs"]
