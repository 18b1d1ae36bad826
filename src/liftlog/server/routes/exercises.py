"""
Exercise library API routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from ...db import repo
from ..schemas import ExerciseIn, ExerciseOut

router = APIRouter()


@router.get("/exercises")
async def list_exercises(uid: str = Query(..., description="Auth user ID")) -> list[ExerciseOut]:
    """List the user's exercises by name."""
    user = await repo.upsert_user(uid)
    rows = await repo.list_exercises(user.id)
    return [ExerciseOut.model_validate(r) for r in rows]


@router.get("/exercises/{exercise_id}")
async def get_exercise(
    exercise_id: int, uid: str = Query(..., description="Auth user ID")
) -> ExerciseOut:
    user = await repo.upsert_user(uid)
    return ExerciseOut.model_validate(await repo.get_exercise(user.id, exercise_id))


@router.post("/exercises", status_code=201)
async def create_exercise(
    req: ExerciseIn, uid: str = Query(..., description="Auth user ID")
) -> ExerciseOut:
    user = await repo.upsert_user(uid)
    row = await repo.create_exercise(user.id, req.model_dump(mode="json"))
    return ExerciseOut.model_validate(row)


@router.put("/exercises/{exercise_id}")
async def update_exercise(
    exercise_id: int, req: ExerciseIn, uid: str = Query(..., description="Auth user ID")
) -> ExerciseOut:
    user = await repo.upsert_user(uid)
    row = await repo.update_exercise(user.id, exercise_id, req.model_dump(mode="json"))
    return ExerciseOut.model_validate(row)


@router.delete("/exercises/{exercise_id}")
async def delete_exercise(
    exercise_id: int, uid: str = Query(..., description="Auth user ID")
) -> dict:
    user = await repo.upsert_user(uid)
    await repo.delete_exercise(user.id, exercise_id)
    return {"ok": True, "message": "Exercise deleted"}
