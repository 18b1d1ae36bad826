"""
Exercise progress API route.
"""

from __future__ import annotations

import dataclasses

from fastapi import APIRouter, Query

from ...db import repo
from ...progress import (
    REPS_ONLY,
    compute_e1rm_progress,
    compute_reps_progress,
    personal_record,
)

router = APIRouter()


@router.get("/progress/{exercise_id}")
async def exercise_progress(
    exercise_id: int, uid: str = Query(..., description="Auth user ID")
) -> dict:
    """
    Trend for one exercise: best e1RM per day, or best reps per day for
    reps-only exercises, plus the personal record.
    """
    user = await repo.upsert_user(uid)
    exercise = await repo.get_exercise(user.id, exercise_id)
    entries = await repo.get_exercise_progress(user.id, exercise_id)

    is_reps_only = exercise.default_tracking == REPS_ONLY
    points = compute_reps_progress(entries) if is_reps_only else compute_e1rm_progress(entries)
    pr = personal_record(points)
    return {
        "ok": True,
        "exercise_id": exercise.id,
        "exercise_name": exercise.name,
        "metric": "best_reps" if is_reps_only else "e1rm",
        "points": [dataclasses.asdict(p) for p in points],
        "personal_record": dataclasses.asdict(pr) if pr else None,
        "latest_date": points[-1].date if points else None,
    }
