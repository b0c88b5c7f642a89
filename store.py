"""In-memory workout store for LiftLog.

The store is a plain container for the exercise catalog and the workout
logs.  It performs no validation beyond structural shape; every sync
invariant lives in :mod:`liftlog.reconcile` and the modules it drives.
One instance is created at startup and handed to both the command line and
the :class:`~liftlog.reconcile.SyncEngine`.
"""
from __future__ import annotations

import copy
import json
import logging
import os
from datetime import date as date_cls
from pathlib import Path
from typing import Iterable, List, Optional

from liftlog import app_paths
from liftlog.catalog import seed_exercises
from liftlog.models import ExerciseDefinition, ExerciseId, WorkoutLog, WorkoutSet

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "liftlog_store.json"


def default_snapshot_path() -> Path:
    return app_paths.data_path(SNAPSHOT_FILENAME)


def _demo_log(today: str) -> WorkoutLog:
    return WorkoutLog(
        id="seed_log_1",
        date=today,
        exercise_id=ExerciseId("ex_1"),
        sets=[
            WorkoutSet(id="s1", reps=10, weight=135, completed=True),
            WorkoutSet(id="s2", reps=8, weight=155, completed=True),
            WorkoutSet(id="s3", reps=5, weight=185, completed=True),
        ],
        notes="Demo workout data",
        synced=True,
    )


class LocalStore:
    """Own the exercises and logs between syncs."""

    def __init__(
        self,
        exercises: Optional[Iterable[ExerciseDefinition]] = None,
        logs: Optional[Iterable[WorkoutLog]] = None,
    ) -> None:
        self._exercises: List[ExerciseDefinition] = list(exercises or [])
        self._logs: List[WorkoutLog] = list(logs or [])

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------
    def list_exercises(self) -> List[ExerciseDefinition]:
        return copy.deepcopy(self._exercises)

    def list_logs(self) -> List[WorkoutLog]:
        return copy.deepcopy(self._logs)

    def get_log(self, log_id: str) -> Optional[WorkoutLog]:
        for log in self._logs:
            if log.id == log_id:
                return copy.deepcopy(log)
        return None

    def find_exercise(self, name: str) -> Optional[ExerciseDefinition]:
        """Return the exercise named ``name`` (case-insensitive)."""

        wanted = name.strip().casefold()
        for exercise in self._exercises:
            if exercise.name.casefold() == wanted:
                return copy.deepcopy(exercise)
        return None

    # ------------------------------------------------------------------
    # Log mutations
    # ------------------------------------------------------------------
    def add_log(self, log: WorkoutLog) -> None:
        self._logs.append(copy.deepcopy(log))

    def update_log(self, log: WorkoutLog) -> bool:
        """Replace the log with the same id. Returns ``False`` when absent."""

        for index, existing in enumerate(self._logs):
            if existing.id == log.id:
                self._logs[index] = copy.deepcopy(log)
                return True
        return False

    def delete_log(self, log_id: str) -> None:
        self._logs = [log for log in self._logs if log.id != log_id]

    def delete_set(self, log_id: str, set_id: str) -> bool:
        """Remove one set, dropping the whole log when it was the last one."""

        for index, log in enumerate(self._logs):
            if log.id != log_id:
                continue
            remaining = [entry for entry in log.sets if entry.id != set_id]
            if len(remaining) == len(log.sets):
                return False
            if remaining:
                log.sets = remaining
            else:
                del self._logs[index]
            return True
        return False

    def mark_all_synced(self) -> None:
        for log in self._logs:
            log.synced = True

    # ------------------------------------------------------------------
    # Bulk replacement (sync only)
    # ------------------------------------------------------------------
    def replace_logs(self, logs: Iterable[WorkoutLog]) -> None:
        self._logs = copy.deepcopy(list(logs))

    def replace_exercises(self, exercises: Iterable[ExerciseDefinition]) -> None:
        self._exercises = copy.deepcopy(list(exercises))

    def seed_defaults(self, today: Optional[str] = None) -> None:
        """Reset to the built-in catalog and a single demo log dated ``today``."""

        today = today or date_cls.today().isoformat()
        self._exercises = seed_exercises()
        self._logs = [_demo_log(today)]

    # ------------------------------------------------------------------
    # Snapshot persistence
    # ------------------------------------------------------------------
    def save(self, path: Optional[Path] = None) -> Path:
        target = Path(path) if path else default_snapshot_path()
        if target.parent:
            target.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "exercises": [exercise.to_dict() for exercise in self._exercises],
            "logs": [log.to_dict() for log in self._logs],
        }
        with open(target, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
        logger.debug("Saved store snapshot to %s", target)
        return target

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "LocalStore":
        """Load a snapshot; a missing file yields an empty store."""

        target = Path(path) if path else default_snapshot_path()
        if not os.path.exists(target):
            return cls()
        with open(target, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
        exercises = [ExerciseDefinition.from_dict(entry) for entry in payload.get("exercises", [])]
        logs = [WorkoutLog.from_dict(entry) for entry in payload.get("logs", [])]
        logger.debug("Loaded %s exercises and %s logs from %s", len(exercises), len(logs), target)
        return cls(exercises=exercises, logs=logs)


__all__ = ["LocalStore", "default_snapshot_path"]
