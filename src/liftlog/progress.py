"""
Progress metrics: estimated one-rep max, best reps, personal records.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from .suggestion import Equipment, calculate_suggested_weight, format_weight

# how an exercise is logged; "duration" entries carry no load or rep metric
Tracking = Literal["load_reps", "reps_only", "duration"]
LOAD_REPS: Tracking = "load_reps"
REPS_ONLY: Tracking = "reps_only"

DEFAULT_TARGET_REPS = 8


@dataclass(frozen=True)
class ProgressEntry:
    """One logged exercise on a given date, as returned by the repository."""

    date: str
    tracking: str
    sets: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class ProgressPoint:
    date: str
    value: float
    is_current_workout: bool = False


@dataclass
class ExerciseSummary:
    """Stats for one exercise of a finished workout."""

    exercise_id: int
    exercise_name: str
    equipment: str
    tracking: str
    sets: list[dict[str, Any]]
    total_volume: float
    best_e1rm: float
    best_reps: int
    is_pr: bool
    pr_type: str | None
    previous_best: float
    progress: list[ProgressPoint]
    suggested_weight: str | None


def calculate_e1rm(weight: float | None, reps: int | None) -> float:
    """Epley estimate; 0 when either value is missing or non-positive."""
    if not weight or not reps or weight <= 0 or reps <= 0:
        return 0.0
    return weight * (1 + reps / 30)


def _sets_of(entry: ProgressEntry) -> list[Mapping[str, Any]]:
    return entry.sets if isinstance(entry.sets, list) else []


def _best_per_date(values: Iterable[tuple[str, float]]) -> list[ProgressPoint]:
    best: dict[str, float] = {}
    for date, value in values:
        if value > 0 and value > best.get(date, 0):
            best[date] = value
    return [ProgressPoint(date=d, value=v) for d, v in sorted(best.items())]


def compute_e1rm_progress(entries: Iterable[ProgressEntry]) -> list[ProgressPoint]:
    """Best e1RM per date across load-tracked entries, oldest first."""

    def _values():
        for entry in entries:
            if entry.tracking != LOAD_REPS:
                continue
            e1rms = [calculate_e1rm(s.get("weight"), s.get("reps")) for s in _sets_of(entry)]
            yield entry.date, max(e1rms, default=0.0)

    return _best_per_date(_values())


def compute_reps_progress(entries: Iterable[ProgressEntry]) -> list[ProgressPoint]:
    """Best rep count per date across reps-only entries, oldest first."""

    def _values():
        for entry in entries:
            if entry.tracking != REPS_ONLY:
                continue
            reps = [s.get("reps") or 0 for s in _sets_of(entry)]
            yield entry.date, max(reps, default=0)

    return _best_per_date(_values())


def personal_record(points: Sequence[ProgressPoint]) -> ProgressPoint | None:
    best: ProgressPoint | None = None
    for p in points:
        if best is None or p.value > best.value:
            best = p
    return best


def summarize_exercise(
    *,
    exercise_id: int,
    exercise_name: str,
    equipment: Equipment | str,
    tracking: str,
    sets: list[dict[str, Any]],
    workout_date: str,
    history: Iterable[ProgressEntry],
    target_reps: int | None = None,
) -> ExerciseSummary:
    """
    Build the post-workout summary for one exercise.

    ``history`` is every logged entry of the exercise, the current workout
    included. A PR is a value above everything logged on earlier dates.
    ``target_reps`` defaults to the first set's reps when not known.
    """
    is_reps_only = tracking == REPS_ONLY

    total_volume = 0.0
    best_e1rm = 0.0
    best_reps = 0
    for s in sets:
        weight = s.get("weight")
        reps = s.get("reps")
        if weight and reps:
            total_volume += weight * reps
            best_e1rm = max(best_e1rm, calculate_e1rm(weight, reps))
        if reps and reps > best_reps:
            best_reps = reps

    points = compute_reps_progress(history) if is_reps_only else compute_e1rm_progress(history)
    current = float(best_reps) if is_reps_only else best_e1rm
    previous_best = max((p.value for p in points if p.date < workout_date), default=0.0)
    is_pr = current > previous_best and current > 0

    suggested: str | None = None
    if not is_reps_only and sets:
        if target_reps is None:
            target_reps = sets[0].get("reps") or DEFAULT_TARGET_REPS
        result = calculate_suggested_weight(sets, target_reps, equipment)
        if result:
            suggested = format_weight(result.weight)

    return ExerciseSummary(
        exercise_id=exercise_id,
        exercise_name=exercise_name,
        equipment=Equipment.coerce(equipment).value,
        tracking=tracking,
        sets=sets,
        total_volume=total_volume,
        best_e1rm=best_e1rm,
        best_reps=best_reps,
        is_pr=is_pr,
        pr_type=("reps" if is_reps_only else "e1rm") if is_pr else None,
        previous_best=previous_best,
        progress=[
            ProgressPoint(date=p.date, value=p.value, is_current_workout=p.date == workout_date)
            for p in points
        ],
        suggested_weight=suggested,
    )
