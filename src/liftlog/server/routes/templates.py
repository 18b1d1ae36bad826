"""
Workout template API routes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from ...db import repo
from ..schemas import TemplateIn, TemplateOut

router = APIRouter()


@router.get("/templates")
async def list_templates(uid: str = Query(..., description="Auth user ID")) -> list[TemplateOut]:
    user = await repo.upsert_user(uid)
    return [TemplateOut.from_row(t) for t in await repo.list_templates(user.id)]


@router.get("/templates/{template_id}")
async def get_template(
    template_id: int, uid: str = Query(..., description="Auth user ID")
) -> TemplateOut:
    user = await repo.upsert_user(uid)
    return TemplateOut.from_row(await repo.get_template(user.id, template_id))


@router.post("/templates", status_code=201)
async def create_template(
    req: TemplateIn, uid: str = Query(..., description="Auth user ID")
) -> TemplateOut:
    """Create a template; items are stored in the order given."""
    user = await repo.upsert_user(uid)
    template = await repo.create_template(
        user.id, req.name, req.description, [i.model_dump() for i in req.items]
    )
    logging.info("User %s created template %s", user.id, template.id)
    return TemplateOut.from_row(template)


@router.put("/templates/{template_id}")
async def update_template(
    template_id: int, req: TemplateIn, uid: str = Query(..., description="Auth user ID")
) -> TemplateOut:
    """Replace a template's name, description and items."""
    user = await repo.upsert_user(uid)
    template = await repo.update_template(
        user.id, template_id, req.name, req.description, [i.model_dump() for i in req.items]
    )
    return TemplateOut.from_row(template)


@router.delete("/templates/{template_id}")
async def delete_template(
    template_id: int, uid: str = Query(..., description="Auth user ID")
) -> dict:
    user = await repo.upsert_user(uid)
    await repo.delete_template(user.id, template_id)
    return {"ok": True, "message": "Template deleted"}
