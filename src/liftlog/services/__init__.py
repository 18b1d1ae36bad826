"""
Services layer for LiftLog business logic.
"""

from .workout_service import WorkoutService

__all__ = ["WorkoutService"]
