"""
Serializable state of a workout that is being logged.

A draft survives page reloads and navigation; it is saved on every change
and cleared once the workout is stored.
"""

from __future__ import annotations

import math
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .progress import Tracking
from .suggestion import PreviousSet


class SetInput(BaseModel):
    # raw text of the input fields; "" means not entered
    weight: str = ""
    reps: str = ""


class PreviousSetModel(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    weight: float | None = None
    reps: int | None = None

    def to_previous_set(self) -> PreviousSet:
        return PreviousSet(weight=self.weight, reps=self.reps)


class ExerciseInput(BaseModel):
    exercise_id: int
    exercise_name: str
    equipment: str = "other"
    tracking: Tracking = "load_reps"
    target_sets: int = Field(ge=0)
    target_reps: str
    target_rir: int | None = None
    sets: list[SetInput] = Field(default_factory=list)
    previous_sets: list[PreviousSetModel] | None = None
    suggested_weight: str | None = None
    is_increase: bool | None = None


class WorkoutDraft(BaseModel):
    template_id: int
    template_name: str
    workout_date: str
    exercise_inputs: list[ExerciseInput] = Field(default_factory=list)
    started_at: int = Field(default_factory=lambda: int(time.time() * 1000))

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> WorkoutDraft:
        return cls.model_validate(data)

    def with_exercise_inputs(self, exercise_inputs: list[ExerciseInput]) -> WorkoutDraft:
        return self.model_copy(update={"exercise_inputs": exercise_inputs})

    def with_workout_date(self, workout_date: str) -> WorkoutDraft:
        return self.model_copy(update={"workout_date": workout_date})


def parse_weight(text: str) -> float | None:
    """Weight typed into a set row; None for blank, negative or non-finite text."""
    text = text.strip()
    if not text:
        return None
    try:
        weight = float(text)
    except ValueError:
        return None
    if not math.isfinite(weight) or weight < 0:
        return None
    return weight


def parse_reps(text: str) -> int | None:
    text = text.strip()
    if not text:
        return None
    try:
        reps = int(text)
    except ValueError:
        # "8.0" from a numeric keypad
        try:
            value = float(text)
        except ValueError:
            return None
        if not math.isfinite(value):
            return None
        reps = int(value)
    return reps if reps >= 0 else None


def draft_sets_to_log_sets(sets: list[SetInput]) -> list[dict[str, Any]]:
    """
    Convert input rows into stored sets.

    Rows with neither weight nor reps are dropped; ``set_index`` keeps the
    row's position (1-based) among all rows, as entered.
    """
    out: list[dict[str, Any]] = []
    for index, s in enumerate(sets, start=1):
        weight = parse_weight(s.weight)
        reps = parse_reps(s.reps)
        if weight is None and reps is None:
            continue
        row: dict[str, Any] = {"set_index": index}
        if weight is not None:
            row["weight"] = weight
        if reps is not None:
            row["reps"] = reps
        out.append(row)
    return out
