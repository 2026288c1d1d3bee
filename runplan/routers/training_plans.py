"""API endpoints for training plan compilation and planned workouts."""
from __future__ import annotations

import logging
import random
from datetime import date
from typing import Annotated, Literal

from fastapi import APIRouter, HTTPException, Depends
from filelock import Timeout
from sqlalchemy.orm import Session

from runplan.config import get_settings
from runplan.database import get_db
from runplan.models.schemas import (
    DeletePlanResult,
    EnrichedWorkoutResponse,
    GeneratePlanRequest,
    HydrationPreview,
    PlanGenerationResult,
    PlannedWorkoutResponse,
    SimulateProgressRequest,
    SimulationSummary,
    TrainingPlanResponse,
    WorkoutCompletionUpdate,
    WorkoutSkipRequest,
)
from runplan.services.errors import NoActivePlan, PlanGenerationError
from runplan.services.hydrator import hydrate
from runplan.services.progress_simulator import ProgressSimulator
from runplan.services.tokens import split_token
from runplan.services.training_planner import TrainingPlanner, plan_generation_lock
from runplan.services.workout_enrichment import enrich_planned_workout


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/training", tags=["training_plans"])

GENERATION_FAILED = "Could not build your plan - try again"


def _compile_plan(request: GeneratePlanRequest, db: Session, regenerate: bool) -> PlanGenerationResult:
    settings = get_settings()
    action = "regenerate" if regenerate else "generate"
    try:
        with plan_generation_lock(settings.lock_dir, request.user_id):
            planner = TrainingPlanner(db)
            if regenerate:
                result = planner.regenerate_plan(request.user_id, request.training_profile, request.display_profile)
            else:
                result = planner.generate_plan(request.user_id, request.training_profile, request.display_profile)
            db.commit()
        return result

    except Timeout:
        db.rollback()
        logger.warning("Plan %s for user %s already in progress", action, request.user_id)
        raise HTTPException(status_code=409, detail="Plan generation already in progress for this user")
    except PlanGenerationError:
        db.rollback()
        logger.exception("Plan %s failed for user %s", action, request.user_id)
        raise HTTPException(status_code=500, detail=GENERATION_FAILED)
    except Exception as e:
        db.rollback()
        logger.exception("Unexpected error during plan %s for user %s", action, request.user_id)
        raise HTTPException(
            status_code=500,
            detail=f"{GENERATION_FAILED}: {str(e)}"
        )


@router.post("/plans/generate", response_model=PlanGenerationResult, status_code=201)
async def generate_training_plan(
    plan_request: GeneratePlanRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Compile the goal's plan template onto the user's calendar.

    Any previous plan is deactivated and its planned workouts removed.

    Returns:
        PlanGenerationResult: New plan id, number of weeks and dropped-token count
    """
    result = _compile_plan(plan_request, db, regenerate=False)
    logger.info("Generated training plan: id=%s, user=%s", result.plan_id, plan_request.user_id)
    return result


@router.post("/plans/regenerate", response_model=PlanGenerationResult, status_code=201)
async def regenerate_training_plan(
    plan_request: GeneratePlanRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Rebuild the user's plan from scratch."""
    result = _compile_plan(plan_request, db, regenerate=True)
    logger.info("Regenerated training plan: id=%s, user=%s", result.plan_id, plan_request.user_id)
    return result


@router.get("/plans/active", response_model=TrainingPlanResponse)
async def get_active_plan(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get the user's active training plan including rest days.

    Args:
        user_id: Owner of the plan

    Returns:
        TrainingPlanResponse: Active plan with its week/day structure
    """
    try:
        plan = TrainingPlanner(db).get_active_plan(user_id)
        if not plan:
            raise HTTPException(status_code=404, detail="No active training plan found")

        logger.info("Retrieved active plan: id=%s, user=%s", plan.id, user_id)
        return plan

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to retrieve active plan for user %s", user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to retrieve training plan: {str(e)}"
        )


@router.delete("/plans/active", response_model=DeletePlanResult)
async def delete_active_plan(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
):
    """Delete the user's planned workouts and deactivate all plans."""
    try:
        result = TrainingPlanner(db).delete_plan(user_id)
        db.commit()
        return result

    except Exception as e:
        db.rollback()
        logger.exception("Failed to delete plan for user %s", user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete plan: {str(e)}"
        )


@router.post("/plans/active/simulate", response_model=SimulationSummary)
async def simulate_progress(
    simulation: SimulateProgressRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Rewind the active plan and synthesize completed workouts (demo data only).

    Disabled unless SIMULATION_ENABLED is set.
    """
    settings = get_settings()
    if not settings.simulation_enabled:
        raise HTTPException(status_code=403, detail="Progress simulation is disabled")

    try:
        rng = random.Random(simulation.seed) if simulation.seed is not None else None
        buffer_days = simulation.buffer_days
        if buffer_days is None:
            buffer_days = settings.simulation_buffer_days

        summary = ProgressSimulator(db, rng=rng).simulate_progress(
            simulation.user_id,
            simulation.weeks_to_complete,
            buffer_days=buffer_days,
        )
        db.commit()
        return summary

    except NoActivePlan as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception("Progress simulation failed for user %s", simulation.user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to simulate progress: {str(e)}"
        )


@router.get("/workouts", response_model=list[EnrichedWorkoutResponse])
async def list_planned_workouts(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
    start_date: date | None = None,
    end_date: date | None = None,
):
    """
    List the user's planned workouts within an optional inclusive date range.

    Returns:
        list[EnrichedWorkoutResponse]: Workouts merged with their skeleton, by date
    """
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    try:
        workouts = TrainingPlanner(db).list_planned_workouts(user_id, start_date, end_date)
        return [enrich_planned_workout(w) for w in workouts]

    except Exception as e:
        logger.exception("Failed to list planned workouts for user %s", user_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list planned workouts: {str(e)}"
        )


@router.get("/workouts/today", response_model=EnrichedWorkoutResponse)
async def get_todays_workout(
    user_id: str,
    db: Annotated[Session, Depends(get_db)],
):
    """Return today's planned workout for the user."""
    workout = TrainingPlanner(db).get_todays_workout(user_id)
    if not workout:
        raise HTTPException(status_code=404, detail="No workout planned for today")
    return enrich_planned_workout(workout)


@router.get("/workouts/{workout_id}", response_model=EnrichedWorkoutResponse)
async def get_planned_workout(
    workout_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    workout = TrainingPlanner(db).get_planned_workout(workout_id)
    if not workout:
        raise HTTPException(status_code=404, detail=f"Workout {workout_id} not found")
    return enrich_planned_workout(workout)


@router.put("/workouts/{workout_id}/complete", response_model=PlannedWorkoutResponse)
async def complete_workout(
    workout_id: int,
    completion: WorkoutCompletionUpdate,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Mark a planned workout as complete with actual performance data.

    Args:
        workout_id: Planned workout ID
        completion: Actual metrics and notes

    Returns:
        PlannedWorkoutResponse: Updated workout record
    """
    try:
        workout = TrainingPlanner(db).complete_workout(
            workout_id,
            actual_duration_minutes=completion.actual_duration_minutes,
            actual_distance_meters=completion.actual_distance_meters,
            notes=completion.notes,
            completed_at=completion.completed_at,
        )
        if not workout:
            raise HTTPException(status_code=404, detail=f"Workout {workout_id} not found")

        db.commit()
        db.refresh(workout)
        return workout

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to complete workout %s", workout_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update workout: {str(e)}"
        )


@router.put("/workouts/{workout_id}/skip", response_model=PlannedWorkoutResponse)
async def skip_workout(
    workout_id: int,
    skip: WorkoutSkipRequest,
    db: Annotated[Session, Depends(get_db)],
):
    try:
        workout = TrainingPlanner(db).skip_workout(workout_id, reason=skip.reason)
        if not workout:
            raise HTTPException(status_code=404, detail=f"Workout {workout_id} not found")

        db.commit()
        db.refresh(workout)
        return workout

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to skip workout %s", workout_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update workout: {str(e)}"
        )


@router.get("/hydrate/{token:path}", response_model=HydrationPreview)
async def preview_hydration(
    token: str,
    units: Literal["metric", "imperial"] = "imperial",
):
    """Hydrate a single token without touching the database."""
    base, param = split_token(token)
    return {
        "token": token,
        "base": base,
        "param": param,
        "units": units,
        "hydrated": hydrate(base, param, units),
    }
