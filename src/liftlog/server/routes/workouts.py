"""
Workout log API routes: history, logging, editing, summary.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from fastapi import APIRouter, Query

from ...db import repo
from ...services import WorkoutService
from ..schemas import WorkoutLogIn, WorkoutLogOut, WorkoutLogUpdate

router = APIRouter()
service = WorkoutService()


@router.get("/workouts")
async def list_workouts(uid: str = Query(..., description="Auth user ID")) -> list[WorkoutLogOut]:
    """Workout history, newest first."""
    user = await repo.upsert_user(uid)
    return [WorkoutLogOut.model_validate(w) for w in await repo.list_workout_logs(user.id)]


@router.get("/workouts/{log_id}")
async def get_workout(log_id: int, uid: str = Query(..., description="Auth user ID")) -> WorkoutLogOut:
    user = await repo.upsert_user(uid)
    return WorkoutLogOut.model_validate(await repo.get_workout_log(user.id, log_id))


@router.post("/workouts", status_code=201)
async def create_workout(
    req: WorkoutLogIn, uid: str = Query(..., description="Auth user ID")
) -> WorkoutLogOut:
    """Store a completed workout; all exercise logs are written atomically."""
    user = await repo.upsert_user(uid)
    items: list[dict[str, Any]] = [
        {
            "exercise_id": item.exercise_id,
            "exercise_name_snapshot": item.exercise_name_snapshot,
            "tracking": item.tracking,
            "sets": [s.model_dump(exclude_none=True) for s in item.sets],
            "notes": item.notes,
        }
        for item in req.items
    ]
    log = await repo.create_workout_log(
        user.id,
        date=req.date,
        template_id=req.template_id,
        template_name_snapshot=req.template_name_snapshot,
        items=items,
    )
    return WorkoutLogOut.model_validate(log)


@router.patch("/workouts/{log_id}")
async def update_workout(
    log_id: int, req: WorkoutLogUpdate, uid: str = Query(..., description="Auth user ID")
) -> WorkoutLogOut:
    """Move a logged workout to another date and/or correct its sets."""
    user = await repo.upsert_user(uid)
    if req.date is not None:
        await repo.update_workout_log(user.id, log_id, req.date)
    for item in req.items:
        await repo.update_exercise_log(
            user.id, log_id, item.id, [s.model_dump(exclude_none=True) for s in item.sets]
        )
    return WorkoutLogOut.model_validate(await repo.get_workout_log(user.id, log_id))


@router.delete("/workouts/{log_id}")
async def delete_workout(log_id: int, uid: str = Query(..., description="Auth user ID")) -> dict:
    user = await repo.upsert_user(uid)
    await repo.delete_workout_log(user.id, log_id)
    logging.info("User %s deleted workout %s", user.id, log_id)
    return {"ok": True, "message": "Workout log deleted"}


@router.get("/workouts/{log_id}/summary")
async def workout_summary(log_id: int, uid: str = Query(..., description="Auth user ID")) -> dict:
    """Per-exercise volume, e1RM, PRs and the suggested weight for next time."""
    user = await repo.upsert_user(uid)
    summaries = await service.summarize_workout(user.id, log_id)
    return {"ok": True, "items": [dataclasses.asdict(s) for s in summaries]}
