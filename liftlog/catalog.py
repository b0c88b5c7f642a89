"""Exercise catalog helpers.

The remote sheet has no surrogate keys, so exercises are joined across stores
by display name only.  :class:`Catalog` is the one place where an
:data:`~liftlog.models.ExerciseName` is translated into a local
:data:`~liftlog.models.ExerciseId` and back.  Remote catalog rows get
positional ids (``remote-<index>``) that are rebuilt on every pull, so logs
holding ids from an earlier catalog snapshot must be treated as stale.
"""
from __future__ import annotations

import copy
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from liftlog.models import ExerciseDefinition, ExerciseId, ExerciseName, ExerciseType

logger = logging.getLogger(__name__)

UNKNOWN_EXERCISE = ExerciseName("Unknown")

SEED_EXERCISES: Tuple[ExerciseDefinition, ...] = (
    ExerciseDefinition(
        id=ExerciseId("ex_1"),
        name=ExerciseName("Bench Press"),
        type=ExerciseType.WEIGHT,
        muscle_groups=["Chest", "Triceps"],
        description="Barbell bench press",
    ),
    ExerciseDefinition(
        id=ExerciseId("ex_2"),
        name=ExerciseName("Squat"),
        type=ExerciseType.WEIGHT,
        muscle_groups=["Legs", "Glutes"],
        description="Back squat",
    ),
    ExerciseDefinition(
        id=ExerciseId("ex_3"),
        name=ExerciseName("Plank"),
        type=ExerciseType.TIME,
        muscle_groups=["Core"],
        description="Front plank",
    ),
    ExerciseDefinition(
        id=ExerciseId("ex_4"),
        name=ExerciseName("Overhead Press"),
        type=ExerciseType.WEIGHT,
        muscle_groups=["Shoulders"],
        description="Standing barbell press",
    ),
    ExerciseDefinition(
        id=ExerciseId("ex_5"),
        name=ExerciseName("Pull Up"),
        type=ExerciseType.REPS,
        muscle_groups=["Back", "Biceps"],
        description="Bodyweight pull up",
    ),
    ExerciseDefinition(
        id=ExerciseId("ex_6"),
        name=ExerciseName("Push Up"),
        type=ExerciseType.REPS,
        muscle_groups=["Chest", "Triceps"],
        description="Standard push up",
    ),
)


def seed_exercises() -> List[ExerciseDefinition]:
    """Return a fresh copy of the built-in catalog."""

    return copy.deepcopy(list(SEED_EXERCISES))


class Catalog:
    """Read-only name/id index over a list of exercise definitions."""

    def __init__(self, exercises: Iterable[ExerciseDefinition]) -> None:
        self._exercises: List[ExerciseDefinition] = list(exercises)
        self._by_id: Dict[str, ExerciseDefinition] = {}
        self._by_name: Dict[str, ExerciseDefinition] = {}
        for exercise in self._exercises:
            self._by_id.setdefault(exercise.id, exercise)
            # first definition wins when a sheet repeats a name
            self._by_name.setdefault(exercise.name, exercise)

    def __len__(self) -> int:
        return len(self._exercises)

    def __iter__(self):
        return iter(self._exercises)

    def by_id(self, exercise_id: str) -> Optional[ExerciseDefinition]:
        return self._by_id.get(exercise_id)

    def by_name(self, name: str) -> Optional[ExerciseDefinition]:
        return self._by_name.get(name)

    def name_for(self, exercise_id: str) -> ExerciseName:
        """Return the display name for ``exercise_id`` or the ``Unknown`` sentinel."""

        exercise = self._by_id.get(exercise_id)
        if exercise is None:
            return UNKNOWN_EXERCISE
        return exercise.name


def _cell(row: Sequence[str], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


def parse_exercise_row(row: Sequence[str], index: int) -> ExerciseDefinition:
    """Convert one ``[name, type, muscles, description, ...]`` row."""

    name = _cell(row, 0) or UNKNOWN_EXERCISE
    muscles_raw = _cell(row, 2)
    muscles = [token.strip() for token in muscles_raw.split(",")] if muscles_raw else []
    return ExerciseDefinition(
        id=ExerciseId(f"remote-{index}"),
        name=ExerciseName(name),
        type=ExerciseType.parse(_cell(row, 1)),
        muscle_groups=muscles,
        description=_cell(row, 3),
    )


def parse_exercise_rows(rows: Sequence[Sequence[str]]) -> List[ExerciseDefinition]:
    return [parse_exercise_row(row, index) for index, row in enumerate(rows)]


def refresh_catalog(
    remote_rows: Sequence[Sequence[str]],
    current: Sequence[ExerciseDefinition],
) -> Tuple[List[ExerciseDefinition], str]:
    """Decide the catalog that results from a pull.

    A non-empty remote tab replaces the local catalog wholesale.  An empty
    remote tab keeps the local catalog, unless that is empty too, in which
    case the seed catalog is installed.  Returns the catalog and its source
    (``"remote"``, ``"local"`` or ``"seed"``).
    """

    if remote_rows:
        exercises = parse_exercise_rows(remote_rows)
        logger.info("Catalog replaced with %s remote exercises", len(exercises))
        return exercises, "remote"
    if current:
        logger.info("Remote catalog empty; keeping %s local exercises", len(current))
        return list(current), "local"
    logger.info("Remote and local catalogs empty; installing seed catalog")
    return seed_exercises(), "seed"


def available_muscles(exercises: Iterable[ExerciseDefinition]) -> List[str]:
    return sorted({muscle for exercise in exercises for muscle in exercise.muscle_groups})


def search_exercises(
    exercises: Iterable[ExerciseDefinition],
    query: str = "",
    types: Sequence[ExerciseType] = (),
    muscles: Sequence[str] = (),
) -> List[ExerciseDefinition]:
    """Return the exercises matching a name search and type/muscle filters.

    ``query`` is a case-insensitive substring of the name.  An empty
    ``types`` or ``muscles`` filter matches everything; otherwise the
    exercise must have one of the listed types and share at least one
    muscle group.  Results are sorted by name.
    """

    needle = query.strip().casefold()
    wanted_muscles = set(muscles)
    matches = [
        exercise
        for exercise in exercises
        if needle in exercise.name.casefold()
        and (not types or exercise.type in types)
        and (not wanted_muscles or wanted_muscles.intersection(exercise.muscle_groups))
    ]
    return sorted(matches, key=lambda exercise: exercise.name.casefold())


__all__ = [
    "Catalog",
    "available_muscles",
    "SEED_EXERCISES",
    "UNKNOWN_EXERCISE",
    "parse_exercise_row",
    "parse_exercise_rows",
    "refresh_catalog",
    "search_exercises",
    "seed_exercises",
]
