"""
Weight suggestion for the next session of an exercise.

Double progression with implicit RIR autoregulation: hold the working weight
until the target reps are hit on every set, then add 2.5% rounded to the
smallest loadable increment for the equipment.
"""

from __future__ import annotations

import enum
import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

INCREASE_PERCENTAGE = 0.025


class Equipment(str, enum.Enum):
    """Equipment tag of an exercise; decides the rounding increment."""

    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    CABLE = "cable"
    MACHINE = "machine"
    BODYWEIGHT = "bodyweight"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: Equipment | str | None) -> Equipment:
        """Map a stored tag to an Equipment, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            logger.debug("Unknown equipment %r, treating as 'other'", value)
            return cls.OTHER


# bodyweight never reaches rounding
EQUIPMENT_INCREMENTS: dict[Equipment, float] = {
    Equipment.BARBELL: 2.5,
    Equipment.DUMBBELL: 2.0,
    Equipment.CABLE: 2.5,
    Equipment.MACHINE: 2.5,
    Equipment.BODYWEIGHT: 0.0,
    Equipment.OTHER: 2.5,
}


@dataclass(frozen=True)
class PreviousSet:
    """One recorded set from the last session; either field may be missing."""

    weight: float | None = None
    reps: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PreviousSet:
        weight = _finite(data.get("weight"))
        reps = _finite(data.get("reps"))
        return cls(weight=weight, reps=int(reps) if reps is not None else None)


def _finite(value: Any) -> float | None:
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class SuggestionResult:
    weight: float
    is_increase: bool


def round_to_increment(weight: float, increment: float) -> float:
    """Round ``weight`` to the nearest multiple of ``increment``; halves go up."""
    return math.floor(weight / increment + 0.5) * increment


def _as_previous_set(item: PreviousSet | Mapping[str, Any]) -> PreviousSet:
    if isinstance(item, PreviousSet):
        return item
    return PreviousSet.from_mapping(item)


def calculate_suggested_weight(
    previous_sets: Iterable[PreviousSet | Mapping[str, Any]] | None,
    target_reps: int,
    equipment: Equipment | str | None = Equipment.OTHER,
) -> SuggestionResult | None:
    """
    Suggest the working weight for the next session.

    Returns None when there is nothing to suggest: bodyweight movements, no
    previous sets, or no previous set with a positive, finite weight. Otherwise the
    heaviest previous weight is increased when every weighted set reached
    ``target_reps`` and kept as-is when any set fell short. The weight is
    never decreased.
    """
    equip = Equipment.coerce(equipment)
    if equip is Equipment.BODYWEIGHT:
        return None

    if not previous_sets:
        return None
    sets = [_as_previous_set(s) for s in previous_sets]

    with_weight = [
        s for s in sets if s.weight is not None and math.isfinite(s.weight) and s.weight > 0
    ]
    if not with_weight:
        return None

    max_weight = max(s.weight for s in with_weight)  # type: ignore[type-var]
    hit_target_on_all_sets = all((s.reps or 0) >= target_reps for s in with_weight)
    increment = EQUIPMENT_INCREMENTS[equip]

    if hit_target_on_all_sets:
        raw_increase = max_weight * (1 + INCREASE_PERCENTAGE)
        if not math.isfinite(raw_increase):
            logger.debug("Increase of %s is not representable, no suggestion", max_weight)
            return None
        suggested = round_to_increment(raw_increase, increment)
        # rounding can land back on the old weight for light loads
        final_weight = suggested if suggested > max_weight else max_weight + increment
        logger.debug(
            "Increase %s: max=%s raw=%.3f rounded=%s final=%s",
            equip.value,
            max_weight,
            raw_increase,
            suggested,
            final_weight,
        )
        return SuggestionResult(weight=final_weight, is_increase=True)

    logger.debug("Maintain %s at %s (target %s missed)", equip.value, max_weight, target_reps)
    return SuggestionResult(weight=max_weight, is_increase=False)


def format_weight(weight: float) -> str:
    """Render a weight without trailing zeros: 42 -> '42', 26.5 -> '26.5'."""
    if weight % 1 == 0:
        return str(int(weight))
    return f"{weight:.1f}"


_FIRST_INT_RE = re.compile(r"\d+")


def parse_target_reps(value: int | str | None) -> int | None:
    """
    Extract the rep target from a template's free-text field.

    "8" -> 8, "12 / side" -> 12, "8-10" -> 8, "" -> None.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    m = _FIRST_INT_RE.search(value)
    return int(m.group()) if m else None
