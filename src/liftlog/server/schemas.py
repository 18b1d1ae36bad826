"""
Request and response models for the HTTP API.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from ..db.models import TemplateItem, WorkoutTemplate
from ..drafts import ExerciseInput, PreviousSetModel
from ..progress import Tracking
from ..suggestion import Equipment


class ExerciseIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    category: str = "compound"
    equipment: Equipment = Equipment.OTHER
    default_tracking: Tracking = "load_reps"
    aliases: list[str] = Field(default_factory=list)


class ExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    equipment: str
    default_tracking: str
    aliases: list[str] = Field(default_factory=list)


class TemplateItemIn(BaseModel):
    exercise_id: int
    target_sets: int = Field(ge=1, le=20)
    target_reps: str = Field(min_length=1, max_length=32)
    target_rir: int | None = Field(default=None, ge=0, le=10)
    tracking: Tracking = "load_reps"


class TemplateIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    items: list[TemplateItemIn] = Field(default_factory=list)


class TemplateItemOut(BaseModel):
    id: int
    exercise_id: int
    exercise_name: str | None
    equipment: str | None
    order_index: int
    target_sets: int
    target_reps: str
    target_rir: int | None
    tracking: str

    @classmethod
    def from_row(cls, item: TemplateItem) -> TemplateItemOut:
        return cls(
            id=item.id,
            exercise_id=item.exercise_id,
            exercise_name=item.exercise.name if item.exercise else None,
            equipment=item.exercise.equipment if item.exercise else None,
            order_index=item.order_index,
            target_sets=item.target_sets,
            target_reps=item.target_reps,
            target_rir=item.target_rir,
            tracking=item.tracking,
        )


class TemplateOut(BaseModel):
    id: int
    name: str
    description: str | None
    items: list[TemplateItemOut]

    @classmethod
    def from_row(cls, template: WorkoutTemplate) -> TemplateOut:
        return cls(
            id=template.id,
            name=template.name,
            description=template.description,
            items=[TemplateItemOut.from_row(i) for i in template.items],
        )


class LoggedSet(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    set_index: int = Field(ge=1)
    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)


class ExerciseLogIn(BaseModel):
    exercise_id: int | None
    exercise_name_snapshot: str
    tracking: Tracking
    sets: list[LoggedSet] = Field(default_factory=list)
    notes: str | None = None


class ExerciseLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    exercise_id: int | None
    exercise_name_snapshot: str
    tracking: str
    sets: list[LoggedSet]
    notes: str | None


class WorkoutLogIn(BaseModel):
    date: dt.date
    template_id: int | None = None
    template_name_snapshot: str | None = None
    items: list[ExerciseLogIn] = Field(default_factory=list)


class ExerciseLogUpdate(BaseModel):
    id: int
    sets: list[LoggedSet]


class WorkoutLogUpdate(BaseModel):
    date: dt.date | None = None
    items: list[ExerciseLogUpdate] = Field(default_factory=list)


class WorkoutLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    template_id: int | None
    template_name_snapshot: str | None
    items: list[ExerciseLogOut]


class SuggestionRequest(BaseModel):
    previous_sets: list[PreviousSetModel] | None = None
    target_reps: int = Field(ge=0)
    equipment: str = "other"


class SuggestionOut(BaseModel):
    weight: float
    is_increase: bool
    formatted: str


class PrepareDraftRequest(BaseModel):
    template_id: int
    workout_date: dt.date | None = None


class DraftUpdate(BaseModel):
    workout_date: dt.date | None = None
    exercise_inputs: list[ExerciseInput] | None = None
