"""Command line front end for LiftLog."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

import settings as sync_settings
from liftlog.catalog import available_muscles, search_exercises
from liftlog.logging_config import configure_logging
from liftlog.models import ExerciseDefinition, ExerciseType, WorkoutLog, WorkoutSet, generate_id
from liftlog.reconcile import SyncEngine, SyncInProgressError
from liftlog.sheets_client import SheetsClientError
from liftlog.stats import progress_points, range_start
from store import LocalStore

logger = logging.getLogger(__name__)


def _store_path(args: argparse.Namespace) -> Optional[Path]:
    return Path(args.store) if args.store else None


def _load_store(args: argparse.Namespace) -> LocalStore:
    return LocalStore.load(_store_path(args))


def _save_store(args: argparse.Namespace, store: LocalStore) -> None:
    store.save(_store_path(args))


def parse_set(text: str, exercise: ExerciseDefinition) -> WorkoutSet:
    """Parse ``10x135`` (weight), ``12`` (reps) or ``60`` seconds (time)."""

    raw = text.strip().lower()
    try:
        if exercise.type is ExerciseType.WEIGHT:
            reps_text, _, weight_text = raw.partition("x")
            weight = float(weight_text) if weight_text else None
            return WorkoutSet(id=generate_id("set"), reps=int(reps_text), weight=weight, completed=True)
        if exercise.type is ExerciseType.TIME:
            seconds = int(raw.rstrip("s"))
            return WorkoutSet(id=generate_id("set"), reps=0, time=seconds, completed=True)
        return WorkoutSet(id=generate_id("set"), reps=int(raw), completed=True)
    except ValueError as exc:
        raise ValueError(
            f"Cannot parse set {text!r} for {exercise.type.value} exercise {exercise.name}"
        ) from exc


def _format_set(entry: WorkoutSet) -> str:
    parts = [f"{entry.reps} reps"]
    if entry.weight:
        parts.append(f"@ {entry.weight:g}")
    if entry.time:
        parts.append(f"{entry.time}s")
    return " ".join(parts)


def command_configure(args: argparse.Namespace) -> int:
    current = sync_settings.load_sync_settings(args.settings)
    if args.spreadsheet_id is not None:
        current.spreadsheet_id = sync_settings.parse_spreadsheet_id(args.spreadsheet_id)
    if args.access_token is not None:
        current.access_token = args.access_token.strip()
    if args.token_expiry is not None:
        current.token_expiry = args.token_expiry
    if args.data_tab:
        current.data_tab = args.data_tab
    if args.exercises_tab:
        current.exercises_tab = args.exercises_tab
    sync_settings.save_sync_settings(current, args.settings)

    print(f"Spreadsheet : {current.spreadsheet_id or '(not set)'}")
    print(f"Access token: {'set' if current.access_token else '(not set)'}")
    print(f"Tabs        : {current.exercises_tab}, {current.data_tab}")
    return 0


def command_seed(args: argparse.Namespace) -> int:
    store = _load_store(args)
    store.seed_defaults()
    _save_store(args, store)
    print(f"Installed {len(store.list_exercises())} exercises and {len(store.list_logs())} demo log.")
    return 0


def _run_sync(args: argparse.Namespace, operation: str) -> int:
    store = _load_store(args)
    engine = SyncEngine(store, sync_settings.load_sync_settings(args.settings))
    try:
        result = engine.pull() if operation == "pull" else engine.push()
    except (sync_settings.SyncConfigurationError, SheetsClientError, SyncInProgressError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    _save_store(args, store)
    print(result.message)
    return 0


def command_pull(args: argparse.Namespace) -> int:
    return _run_sync(args, "pull")


def command_push(args: argparse.Namespace) -> int:
    return _run_sync(args, "push")


def command_log(args: argparse.Namespace) -> int:
    store = _load_store(args)
    exercise = store.find_exercise(args.exercise)
    if exercise is None:
        print(f"Error: Unknown exercise {args.exercise!r}", file=sys.stderr)
        return 1
    try:
        sets = [parse_set(text, exercise) for text in args.sets]
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    log = WorkoutLog(
        id=generate_id("log"),
        date=args.date or date.today().isoformat(),
        exercise_id=exercise.id,
        sets=sets,
        notes=args.notes or "",
    )
    store.add_log(log)
    _save_store(args, store)
    print(f"Logged {len(sets)} sets of {exercise.name} on {log.date} ({log.id}).")
    return 0


def next_set(log: WorkoutLog) -> WorkoutSet:
    """Return a new, not yet completed set copying the last set's values."""

    last = log.sets[-1] if log.sets else None
    return WorkoutSet(
        id=generate_id("set"),
        reps=last.reps if last else 0,
        weight=last.weight if last else None,
        time=last.time if last else None,
        completed=False,
    )


def command_add_set(args: argparse.Namespace) -> int:
    store = _load_store(args)
    log = store.get_log(args.log_id)
    if log is None:
        print(f"Error: No log {args.log_id!r}", file=sys.stderr)
        return 1
    entry = next_set(log)
    log.sets.append(entry)
    store.update_log(log)
    _save_store(args, store)
    print(f"Added set {len(log.sets)} ({entry.id}): {_format_set(entry)}")
    return 0


def command_edit_set(args: argparse.Namespace) -> int:
    store = _load_store(args)
    log = store.get_log(args.log_id)
    if log is None:
        print(f"Error: No log {args.log_id!r}", file=sys.stderr)
        return 1
    entry = next((item for item in log.sets if item.id == args.set_id), None)
    if entry is None:
        print(f"Error: No set {args.set_id!r} in log {args.log_id!r}", file=sys.stderr)
        return 1

    if args.reps is not None:
        entry.reps = args.reps
    if args.weight is not None:
        entry.weight = args.weight
    if args.time is not None:
        entry.time = args.time
    if args.completed is not None:
        entry.completed = args.completed
    store.update_log(log)
    _save_store(args, store)
    print(f"Updated {entry.id}: {_format_set(entry)}{'' if entry.completed else ' (not done)'}")
    return 0


def command_exercises(args: argparse.Namespace) -> int:
    store = _load_store(args)
    exercises = store.list_exercises()
    if args.list_muscles:
        for muscle in available_muscles(exercises):
            print(muscle)
        return 0

    types = [ExerciseType.parse(value) for value in args.types or []]
    matches = search_exercises(exercises, args.search or "", types, args.muscles or [])
    if not matches:
        print("No exercises found.")
        return 0
    for exercise in matches:
        muscles = ", ".join(exercise.muscle_groups) or "-"
        print(f"{exercise.name:<20} {exercise.type.value:<6} {muscles}")
    return 0


def command_delete(args: argparse.Namespace) -> int:
    store = _load_store(args)
    if args.set_id:
        if not store.delete_set(args.log_id, args.set_id):
            print(f"Error: No set {args.set_id!r} in log {args.log_id!r}", file=sys.stderr)
            return 1
    else:
        if store.get_log(args.log_id) is None:
            print(f"Error: No log {args.log_id!r}", file=sys.stderr)
            return 1
        store.delete_log(args.log_id)
    _save_store(args, store)
    print("Deleted.")
    return 0


def command_show(args: argparse.Namespace) -> int:
    store = _load_store(args)
    names = {exercise.id: exercise.name for exercise in store.list_exercises()}
    logs = [log for log in store.list_logs() if not args.date or log.date == args.date]
    if not logs:
        print("No workouts logged.")
        return 0
    for log in sorted(logs, key=lambda entry: entry.date):
        marker = "" if log.synced else " *"
        print(f"{log.date}  {names.get(log.exercise_id, 'Unknown')}  [{log.id}]{marker}")
        for index, entry in enumerate(log.sets, start=1):
            print(f"    {index}. {_format_set(entry)}  ({entry.id})")
        if log.notes:
            print(f"    notes: {log.notes}")
    return 0


def command_stats(args: argparse.Namespace) -> int:
    store = _load_store(args)
    exercise = store.find_exercise(args.exercise)
    if exercise is None:
        print(f"Error: Unknown exercise {args.exercise!r}", file=sys.stderr)
        return 1
    try:
        since = range_start(args.range)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    points = progress_points(store.list_logs(), exercise.id, since=since)
    if not points:
        print(f"No data for {exercise.name}.")
        return 0
    for point in points:
        if exercise.type is ExerciseType.TIME:
            print(f"{point.date}  total {point.total_time}s  best {point.max_time_set}s")
        elif exercise.type is ExerciseType.REPS:
            print(f"{point.date}  total {point.total_reps} reps  best set {point.max_reps_set}")
        else:
            print(
                f"{point.date}  max {point.max_weight or 0:g}  avg {point.avg_weight or 0:.1f}"
                f"  reps {point.total_reps}"
            )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LiftLog workout logger with Google Sheets sync")
    parser.add_argument("--store", help="Path to the local store snapshot")
    parser.add_argument("--settings", help="Path to the sync settings file")
    parser.add_argument("--verbose", action="store_true", help="Log debug detail, also to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    configure_parser = subparsers.add_parser("configure", help="Set spreadsheet and access token")
    configure_parser.add_argument("--spreadsheet-id", help="Spreadsheet id, URL or local .json workbook")
    configure_parser.add_argument("--access-token", help="OAuth access token")
    configure_parser.add_argument("--token-expiry", type=int, help="Token expiry in epoch milliseconds")
    configure_parser.add_argument("--data-tab", help="Worksheet holding the workout rows")
    configure_parser.add_argument("--exercises-tab", help="Worksheet holding the exercise catalog")
    configure_parser.set_defaults(func=command_configure)

    seed_parser = subparsers.add_parser("seed", help="Reset to the built-in exercises and demo data")
    seed_parser.set_defaults(func=command_seed)

    pull_parser = subparsers.add_parser("pull", help="Merge the spreadsheet into the local store")
    pull_parser.set_defaults(func=command_pull)

    push_parser = subparsers.add_parser("push", help="Overwrite the spreadsheet with the local store")
    push_parser.set_defaults(func=command_push)

    log_parser = subparsers.add_parser("log", help="Record sets for an exercise")
    log_parser.add_argument("exercise", help="Exercise name")
    log_parser.add_argument("sets", nargs="+", help="Sets as 10x135 (weight), 12 (reps) or 60 (seconds)")
    log_parser.add_argument("--date", help="Workout date (YYYY-MM-DD), defaults to today")
    log_parser.add_argument("--notes", help="Notes for the whole log")
    log_parser.set_defaults(func=command_log)

    add_set_parser = subparsers.add_parser("add-set", help="Append a set copied from the log's last set")
    add_set_parser.add_argument("log_id")
    add_set_parser.set_defaults(func=command_add_set)

    edit_set_parser = subparsers.add_parser("edit-set", help="Change fields of one set")
    edit_set_parser.add_argument("log_id")
    edit_set_parser.add_argument("set_id")
    edit_set_parser.add_argument("--reps", type=int)
    edit_set_parser.add_argument("--weight", type=float)
    edit_set_parser.add_argument("--time", type=int, help="Seconds")
    done_group = edit_set_parser.add_mutually_exclusive_group()
    done_group.add_argument("--done", dest="completed", action="store_true", default=None)
    done_group.add_argument("--not-done", dest="completed", action="store_false", default=None)
    edit_set_parser.set_defaults(func=command_edit_set)

    exercises_parser = subparsers.add_parser("exercises", help="Search the exercise catalog")
    exercises_parser.add_argument("--search", help="Part of the exercise name")
    exercises_parser.add_argument("--type", dest="types", action="append", help="WEIGHT, REPS or TIME; repeatable")
    exercises_parser.add_argument("--muscle", dest="muscles", action="append", help="Muscle group; repeatable")
    exercises_parser.add_argument("--list-muscles", action="store_true", help="Print the known muscle groups")
    exercises_parser.set_defaults(func=command_exercises)

    delete_parser = subparsers.add_parser("delete", help="Delete a log or a single set")
    delete_parser.add_argument("log_id")
    delete_parser.add_argument("--set", dest="set_id", help="Only delete this set")
    delete_parser.set_defaults(func=command_delete)

    show_parser = subparsers.add_parser("show", help="List logged workouts")
    show_parser.add_argument("--date", help="Only show this date")
    show_parser.set_defaults(func=command_show)

    stats_parser = subparsers.add_parser("stats", help="Show per-date progress for an exercise")
    stats_parser.add_argument("exercise", help="Exercise name")
    stats_parser.add_argument("--range", default="ALL", help="ALL, 1Y or 3M")
    stats_parser.set_defaults(func=command_stats)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO, console=args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
