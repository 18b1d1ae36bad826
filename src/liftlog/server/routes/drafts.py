"""
In-progress workout (draft) API routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from ...db import repo
from ...drafts import WorkoutDraft
from ...services import WorkoutService
from ..schemas import DraftUpdate, PrepareDraftRequest, WorkoutLogOut

router = APIRouter()
service = WorkoutService()


@router.post("/drafts")
async def start_draft(
    req: PrepareDraftRequest, uid: str = Query(..., description="Auth user ID")
) -> WorkoutDraft:
    """Start logging a template; suggested weights come pre-filled."""
    user = await repo.upsert_user(uid)
    return await service.prepare_session(user.id, req.template_id, req.workout_date)


@router.get("/drafts/current")
async def get_draft(uid: str = Query(..., description="Auth user ID")) -> dict:
    user = await repo.upsert_user(uid)
    draft = await repo.load_draft(user.id)
    return {"ok": True, "draft": draft.to_json() if draft else None}


@router.put("/drafts/current")
async def save_draft(
    draft: WorkoutDraft, uid: str = Query(..., description="Auth user ID")
) -> WorkoutDraft:
    user = await repo.upsert_user(uid)
    await repo.save_draft(user.id, draft)
    return draft


@router.patch("/drafts/current")
async def update_draft(
    req: DraftUpdate, uid: str = Query(..., description="Auth user ID")
) -> WorkoutDraft:
    """Change the workout date and/or the set inputs of the current draft."""
    user = await repo.upsert_user(uid)
    return await service.update_draft(user.id, req.workout_date, req.exercise_inputs)


@router.delete("/drafts/current")
async def clear_draft(uid: str = Query(..., description="Auth user ID")) -> dict:
    user = await repo.upsert_user(uid)
    await repo.clear_draft(user.id)
    return {"ok": True}


@router.post("/drafts/current/finish", status_code=201)
async def finish_draft(uid: str = Query(..., description="Auth user ID")) -> WorkoutLogOut:
    """Save the current draft as a workout log and clear it."""
    user = await repo.upsert_user(uid)
    log = await service.finish_session(user.id)
    return WorkoutLogOut.model_validate(log)
