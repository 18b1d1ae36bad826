"""
Stateless weight suggestion endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter

from ...suggestion import calculate_suggested_weight, format_weight
from ..schemas import SuggestionOut, SuggestionRequest

router = APIRouter()


@router.post("/suggestion")
async def suggest_weight(req: SuggestionRequest) -> dict:
    """
    Run the weight suggestion on posted previous sets.

    ``suggestion`` is null when there is nothing to suggest.
    """
    previous = (
        [p.to_previous_set() for p in req.previous_sets] if req.previous_sets is not None else None
    )
    result = calculate_suggested_weight(previous, req.target_reps, req.equipment)
    if result is None:
        return {"ok": True, "suggestion": None}
    out = SuggestionOut(
        weight=result.weight, is_increase=result.is_increase, formatted=format_weight(result.weight)
    )
    return {"ok": True, "suggestion": out.model_dump()}
