"""Starter exercise library and templates for new users."""

from __future__ import annotations

from typing import Any

DEFAULT_EXERCISES: list[dict[str, Any]] = [
    {"name": "Barbell Bench Press", "category": "compound", "equipment": "barbell",
     "default_tracking": "load_reps", "aliases": ["Bench Press", "Flat Bench"]},
    {"name": "Standing Overhead Press", "category": "compound", "equipment": "barbell",
     "default_tracking": "load_reps", "aliases": ["OHP", "Military Press"]},
    {"name": "Cable Lateral Raise", "category": "isolation", "equipment": "cable",
     "default_tracking": "load_reps", "aliases": []},
    {"name": "Triceps Pushdown", "category": "isolation", "equipment": "cable",
     "default_tracking": "load_reps", "aliases": []},
    {"name": "Hanging Knee Raise", "category": "core", "equipment": "bodyweight",
     "default_tracking": "reps_only", "aliases": []},
    {"name": "Cable Woodchopper", "category": "core", "equipment": "cable",
     "default_tracking": "load_reps", "aliases": []},
    {"name": "Pull-ups", "category": "compound", "equipment": "bodyweight",
     "default_tracking": "reps_only", "aliases": ["Lat Pulldown"]},
    {"name": "Chest Supported Row", "category": "compound", "equipment": "dumbbell",
     "default_tracking": "load_reps", "aliases": []},
    {"name": "Incline Dumbbell Curl", "category": "isolation", "equipment": "dumbbell",
     "default_tracking": "load_reps", "aliases": []},
    {"name": "Hammer Curl", "category": "isolation", "equipment": "dumbbell",
     "default_tracking": "load_reps", "aliases": []},
    {"name": "Cable Crunch", "category": "core", "equipment": "cable",
     "default_tracking": "load_reps", "aliases": []},
    {"name": "Dumbbell Side Bend", "category": "core", "equipment": "dumbbell",
     "default_tracking": "load_reps", "aliases": []},
]

# (exercise name, sets, reps, rir, tracking)
DEFAULT_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": "Push",
        "description": "Upper body push focus",
        "items": [
            ("Barbell Bench Press", 3, "6", 2, "load_reps"),
            ("Standing Overhead Press", 2, "8", 2, "load_reps"),
            ("Cable Lateral Raise", 4, "15", 0, "load_reps"),
            ("Triceps Pushdown", 3, "10", 0, "load_reps"),
            ("Hanging Knee Raise", 3, "12", 1, "reps_only"),
            ("Cable Woodchopper", 2, "12 / side", 1, "load_reps"),
        ],
    },
    {
        "name": "Pull",
        "description": "Upper body pull focus",
        "items": [
            ("Pull-ups", 3, "6", 2, "reps_only"),
            ("Chest Supported Row", 3, "8", 2, "load_reps"),
            ("Incline Dumbbell Curl", 3, "10", 0, "load_reps"),
            ("Hammer Curl", 2, "12", 0, "load_reps"),
            ("Cable Crunch", 3, "12", 1, "load_reps"),
            ("Dumbbell Side Bend", 2, "15 / side", 1, "load_reps"),
        ],
    },
]
