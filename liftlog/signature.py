"""Content signatures used to match sheet rows against local sets.

A signature is built from the row content plus its positional index, the
1-based rank of the row among rows sharing the same date and exercise name.
Two rows with the same signature are the same fact.  The signature is a
content hash, so an edited set yields a different signature rather than a
match.

Text fields (date, exercise name, notes) have backslashes and the ``|``
delimiter backslash-escaped, so a pipe inside a name cannot shift fields.
All numeric fields pass through :func:`parse_number` and
:func:`format_number` on both sides, so ``"5"`` and ``"5.0"`` compare equal.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Sequence, Tuple

SIGNATURE_DELIMITER = "|"


def escape_field(text: str) -> str:
    return (text or "").replace("\\", "\\\\").replace(SIGNATURE_DELIMITER, "\\" + SIGNATURE_DELIMITER)


def parse_number(value: Any) -> float:
    """Return ``value`` as a float, treating blank or malformed cells as ``0``."""

    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def format_number(value: Any) -> str:
    """Return the canonical string form for a numeric cell."""

    number = parse_number(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


class PositionCounter:
    """Running count of rows per ``(date, exercise name)`` pair."""

    def __init__(self) -> None:
        self._counts: Dict[Tuple[str, str], int] = {}

    def next(self, date: str, exercise_name: str) -> int:
        key = (date, exercise_name)
        position = self._counts.get(key, 0) + 1
        self._counts[key] = position
        return position


def signature(
    date: str,
    exercise_name: str,
    position: int,
    reps: Any,
    weight: Any,
    time: Any,
    notes: str,
) -> str:
    fields = (
        escape_field(date),
        escape_field(exercise_name),
        str(position),
        format_number(reps),
        format_number(weight),
        format_number(time),
        escape_field(notes),
    )
    return SIGNATURE_DELIMITER.join(fields).strip()


def _cell(row: Sequence[Any], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


def row_signature(row: Sequence[Any], counter: PositionCounter) -> str:
    """Advance ``counter`` for ``row`` and return the row's signature."""

    date = _cell(row, 0)
    exercise_name = _cell(row, 1)
    position = counter.next(date, exercise_name)
    return signature(
        date,
        exercise_name,
        position,
        _cell(row, 2),
        _cell(row, 3),
        _cell(row, 4),
        _cell(row, 5),
    )


__all__ = [
    "PositionCounter",
    "SIGNATURE_DELIMITER",
    "escape_field",
    "format_number",
    "parse_number",
    "row_signature",
    "signature",
]
