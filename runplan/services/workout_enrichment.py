"""Merge planned workouts with their skeleton for presentation and run guidance."""
from __future__ import annotations

from typing import Any

from runplan.models.database_models import PlannedWorkout, WorkoutSkeleton


PLACEHOLDER_PREFIX = "TOKEN_"


def display_steps(planned: PlannedWorkout, skeleton: WorkoutSkeleton) -> list[dict[str, Any]]:
    """Summary steps: hydrated display steps, then hydrated steps, then the skeleton's own."""
    hydrated = planned.hydrated or {}
    return hydrated.get("display_steps") or hydrated.get("steps") or list(skeleton.steps or [])


def executable_steps(planned: PlannedWorkout, skeleton: WorkoutSkeleton) -> list[dict[str, Any]]:
    """Authoritative step sequence for real-time guidance."""
    hydrated = planned.hydrated or {}
    return hydrated.get("steps") or list(skeleton.steps or [])


def workout_title(planned: PlannedWorkout, skeleton: WorkoutSkeleton) -> str:
    hydrated = planned.hydrated or {}
    if hydrated.get("description"):
        return hydrated["description"]
    if skeleton.name and not skeleton.name.startswith(PLACEHOLDER_PREFIX):
        return skeleton.name
    return skeleton.description or planned.token


def enrich_planned_workout(planned: PlannedWorkout, skeleton: WorkoutSkeleton | None = None) -> dict[str, Any]:
    """
    Build the presentation view of a planned workout.

    Malformed tokens hydrate to an empty dict; in that case every field falls
    back to the skeleton defaults.
    """
    skeleton = skeleton or planned.skeleton
    hydrated = planned.hydrated or {}
    return {
        "id": planned.id,
        "scheduled_date": planned.scheduled_date,
        "status": planned.status,
        "token": planned.token,
        "name": skeleton.name,
        "title": workout_title(planned, skeleton),
        "type": skeleton.type,
        "sub_type": skeleton.sub_type,
        "description": hydrated.get("description") or skeleton.description,
        "global_description": hydrated.get("global_description") or skeleton.global_description,
        "steps": display_steps(planned, skeleton),
        "executable_steps": executable_steps(planned, skeleton),
        "hydrated": hydrated,
    }
