"""Data types shared by the local store and the sheet synchronisation code."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, NewType, Optional

ExerciseId = NewType("ExerciseId", str)
ExerciseName = NewType("ExerciseName", str)

# [date, exercise, reps, weight, time, notes]
FlatRow = List[str]

DATA_HEADERS: List[str] = ["Date", "Exercise", "Reps", "Weight", "Time", "Notes"]
EXERCISE_HEADERS: List[str] = ["Name", "Type", "MuscleGroups", "Description"]


class ExerciseType(Enum):
    WEIGHT = "WEIGHT"
    REPS = "REPS"
    TIME = "TIME"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ExerciseType":
        """Map a free-form type cell to an exercise type, defaulting to WEIGHT."""

        text = (raw or "").upper()
        if "REP" in text:
            return cls.REPS
        if "TIME" in text:
            return cls.TIME
        return cls.WEIGHT


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass
class ExerciseDefinition:
    id: ExerciseId
    name: ExerciseName
    type: ExerciseType = ExerciseType.WEIGHT
    muscle_groups: List[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "muscle_groups": list(self.muscle_groups),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExerciseDefinition":
        return cls(
            id=ExerciseId(str(data["id"])),
            name=ExerciseName(str(data["name"])),
            type=ExerciseType.parse(str(data.get("type", ""))),
            muscle_groups=[str(tag) for tag in data.get("muscle_groups", [])],
            description=str(data.get("description", "") or ""),
        )


@dataclass
class WorkoutSet:
    id: str
    reps: int = 0
    weight: Optional[float] = None
    time: Optional[int] = None  # seconds
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "reps": self.reps,
            "weight": self.weight,
            "time": self.time,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkoutSet":
        weight = data.get("weight")
        time = data.get("time")
        return cls(
            id=str(data.get("id") or generate_id("set")),
            reps=int(data.get("reps") or 0),
            weight=float(weight) if weight is not None else None,
            time=int(time) if time is not None else None,
            completed=bool(data.get("completed", False)),
        )


@dataclass
class WorkoutLog:
    id: str
    date: str  # YYYY-MM-DD
    exercise_id: ExerciseId
    sets: List[WorkoutSet] = field(default_factory=list)
    notes: str = ""
    synced: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "exercise_id": self.exercise_id,
            "sets": [entry.to_dict() for entry in self.sets],
            "notes": self.notes,
            "synced": self.synced,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkoutLog":
        return cls(
            id=str(data.get("id") or generate_id("log")),
            date=str(data["date"]),
            exercise_id=ExerciseId(str(data["exercise_id"])),
            sets=[WorkoutSet.from_dict(entry) for entry in data.get("sets", [])],
            notes=str(data.get("notes", "") or ""),
            synced=bool(data.get("synced", False)),
        )


__all__ = [
    "DATA_HEADERS",
    "EXERCISE_HEADERS",
    "ExerciseDefinition",
    "ExerciseId",
    "ExerciseName",
    "ExerciseType",
    "FlatRow",
    "WorkoutLog",
    "WorkoutSet",
    "generate_id",
]
