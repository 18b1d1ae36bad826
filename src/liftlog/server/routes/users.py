"""
Current-user API route.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from ...config import SETTINGS
from ...db import repo

router = APIRouter()


@router.post("/me")
async def me(uid: str = Query(..., description="Auth user ID")) -> dict:
    """
    Called by the web app after sign-in. Creates the local user row and,
    for a brand-new user, the starter exercises and templates.
    """
    user = await repo.upsert_user(uid)
    seeded = False
    if SETTINGS.FF_SEED_DEFAULTS:
        try:
            seeded = await repo.seed_user_data(user.id)
        except Exception as e:
            # sign-in must not fail because of the starter data
            logging.exception("Failed to seed user %s: %s", user.id, e)
    return {"ok": True, "user_id": user.id, "seeded": seeded}
