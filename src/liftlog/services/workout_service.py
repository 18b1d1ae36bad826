"""
Service for preparing, finishing and summarizing workouts.
"""

from __future__ import annotations

import datetime as dt
import logging

from ..db import repo
from ..db.models import TemplateItem, WorkoutLog
from ..drafts import (
    ExerciseInput,
    PreviousSetModel,
    SetInput,
    WorkoutDraft,
    draft_sets_to_log_sets,
)
from ..errors import NotFoundError, ValidationError
from ..progress import LOAD_REPS, ExerciseSummary, summarize_exercise
from ..suggestion import (
    PreviousSet,
    SuggestionResult,
    calculate_suggested_weight,
    format_weight,
    parse_target_reps,
)

logger = logging.getLogger(__name__)


def suggestion_for_item(
    item: TemplateItem, previous_sets: list[PreviousSet] | None
) -> SuggestionResult | None:
    """Run the weight suggestion for one template slot."""
    if item.tracking != LOAD_REPS:
        return None
    target = parse_target_reps(item.target_reps)
    if target is None:
        logger.debug("No numeric target in %r for item %s", item.target_reps, item.id)
        return None
    return calculate_suggested_weight(previous_sets, target, item.exercise.equipment)


class WorkoutService:
    """Service for handling workout-related operations."""

    async def prepare_session(
        self, user_id: int, template_id: int, workout_date: dt.date | None = None
    ) -> WorkoutDraft:
        """
        Build and save a draft for logging ``template_id``.

        Load-tracked exercises get the suggested weight pre-filled in every
        set; the lifter can overwrite it before saving.
        """
        template = await repo.get_template(user_id, template_id)
        workout_date = workout_date or dt.date.today()

        # same-day workouts count as previous; later ones never do
        before = workout_date + dt.timedelta(days=1)
        inputs: list[ExerciseInput] = []
        for item in template.items:
            previous = await repo.get_previous_sets(user_id, item.exercise_id, before=before)
            suggestion = suggestion_for_item(item, previous)
            prefill = format_weight(suggestion.weight) if suggestion else ""
            inputs.append(
                ExerciseInput(
                    exercise_id=item.exercise_id,
                    exercise_name=item.exercise.name,
                    equipment=item.exercise.equipment,
                    tracking=item.tracking,
                    target_sets=item.target_sets,
                    target_reps=item.target_reps,
                    target_rir=item.target_rir,
                    sets=[SetInput(weight=prefill) for _ in range(item.target_sets)],
                    previous_sets=(
                        [PreviousSetModel(weight=p.weight, reps=p.reps) for p in previous]
                        if previous is not None
                        else None
                    ),
                    suggested_weight=prefill or None,
                    is_increase=suggestion.is_increase if suggestion else None,
                )
            )

        draft = WorkoutDraft(
            template_id=template.id,
            template_name=template.name,
            workout_date=workout_date.isoformat(),
            exercise_inputs=inputs,
        )
        await repo.save_draft(user_id, draft)
        logger.info("Prepared draft for template %s (%d exercises)", template.id, len(inputs))
        return draft

    async def update_draft(
        self,
        user_id: int,
        workout_date: dt.date | None = None,
        exercise_inputs: list[ExerciseInput] | None = None,
    ) -> WorkoutDraft:
        """Change the date and/or the inputs of the current draft and save it."""
        draft = await repo.load_draft(user_id)
        if draft is None:
            raise NotFoundError("draft", user_id)
        if workout_date is not None:
            draft = draft.with_workout_date(workout_date.isoformat())
        if exercise_inputs is not None:
            draft = draft.with_exercise_inputs(exercise_inputs)
        await repo.save_draft(user_id, draft)
        return draft

    async def finish_session(self, user_id: int, draft: WorkoutDraft | None = None) -> WorkoutLog:
        """Store the draft as a workout log and clear it."""
        if draft is None:
            draft = await repo.load_draft(user_id)
            if draft is None:
                raise NotFoundError("draft", user_id)

        try:
            workout_date = dt.date.fromisoformat(draft.workout_date)
        except ValueError as e:
            raise ValidationError(f"invalid workout date {draft.workout_date!r}") from e

        items = [
            {
                "exercise_id": ex.exercise_id,
                "exercise_name_snapshot": ex.exercise_name,
                "tracking": ex.tracking,
                "sets": draft_sets_to_log_sets(ex.sets),
            }
            for ex in draft.exercise_inputs
        ]
        log = await repo.create_workout_log(
            user_id,
            date=workout_date,
            template_id=draft.template_id,
            template_name_snapshot=draft.template_name,
            items=items,
        )
        await repo.clear_draft(user_id)
        return log

    async def summarize_workout(self, user_id: int, log_id: int) -> list[ExerciseSummary]:
        """Per-exercise stats, PRs and next-session suggestions for a workout."""
        log = await repo.get_workout_log(user_id, log_id)

        targets: dict[int, int | None] = {}
        if log.template_id is not None:
            try:
                template = await repo.get_template(user_id, log.template_id)
            except NotFoundError:
                logger.debug("Template %s gone, using logged reps as target", log.template_id)
            else:
                targets = {i.exercise_id: parse_target_reps(i.target_reps) for i in template.items}

        equipment = {e.id: e.equipment for e in await repo.list_exercises(user_id)}
        workout_date = log.date.isoformat()

        summaries: list[ExerciseSummary] = []
        for item in log.items:
            history = (
                await repo.get_exercise_progress(user_id, item.exercise_id)
                if item.exercise_id is not None
                else []
            )
            summaries.append(
                summarize_exercise(
                    exercise_id=item.exercise_id or 0,
                    exercise_name=item.exercise_name_snapshot,
                    equipment=equipment.get(item.exercise_id or 0, "other"),
                    tracking=item.tracking,
                    sets=list(item.sets or []),
                    workout_date=workout_date,
                    history=history,
                    target_reps=targets.get(item.exercise_id or 0),
                )
            )
        return summaries
