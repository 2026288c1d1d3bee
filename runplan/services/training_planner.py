"""Compile plan templates onto a user's calendar and manage planned workouts."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Iterator

from filelock import FileLock
from sqlalchemy.orm import Session

from runplan.models.database_models import PlannedWorkout, TrainingPlan
from runplan.models.plan_templates import PLAN_TEMPLATES, template_key_for_goal
from runplan.models.schemas import (
    DeletePlanResult,
    DisplayProfile,
    PlanGenerationResult,
    TrainingProfile,
)
from runplan.models.workout_library import entry_day_type, get_library_entry
from runplan.services.errors import PlanTemplateNotFound
from runplan.services.hydrator import hydrate
from runplan.services.skeleton_registry import SkeletonRegistry
from runplan.services.tokens import REST_TOKEN, is_rest, split_token


logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
SUNDAY_FIRST = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONDAY_FIRST = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def get_week_start(today: date, week_start_day: int) -> date:
    """
    Return the most recent date on or before ``today`` that begins a week.

    Args:
        today: Reference date
        week_start_day: 0 for Sunday-anchored weeks, 1 for Monday-anchored weeks

    Example:
        >>> get_week_start(date(2026, 10, 21), 1)  # Wednesday
        datetime.date(2026, 10, 19)
        >>> get_week_start(date(2026, 10, 21), 0)
        datetime.date(2026, 10, 18)
    """
    if week_start_day == 1:
        offset = today.weekday()
    else:
        offset = (today.weekday() + 1) % 7
    return today - timedelta(days=offset)


def weekday_slot_table(week_start_day: int) -> dict[str, int]:
    """Map weekday abbreviations to slot indices within a week."""
    names = MONDAY_FIRST if week_start_day == 1 else SUNDAY_FIRST
    return {name: index for index, name in enumerate(names)}


def preferred_day_indices(preferred_days: list[str], week_start_day: int) -> list[int]:
    """Translate ordered weekday names into slot indices, skipping unknown names and repeats."""
    table = weekday_slot_table(week_start_day)
    indices: list[int] = []
    for name in preferred_days:
        normalized = name.strip()[:3].title()
        index = table.get(normalized)
        if index is None:
            logger.warning("Ignoring unknown preferred day '%s'", name)
            continue
        if index not in indices:
            indices.append(index)
    return indices


def place_week_tokens(week_tokens: list[str], slot_indices: list[int]) -> tuple[list[str], int]:
    """
    Redistribute a template week's workouts onto the preferred slots.

    Only the order of non-rest tokens is kept; their template positions are
    discarded. Tokens beyond the number of preferred slots are dropped.

    Returns:
        Tuple of (7-slot schedule, number of dropped tokens)
    """
    workout_tokens = [token for token in week_tokens if not is_rest(token)]
    schedule = [REST_TOKEN] * DAYS_PER_WEEK
    placed = min(len(workout_tokens), len(slot_indices))
    for i in range(placed):
        schedule[slot_indices[i]] = workout_tokens[i]
    return schedule, len(workout_tokens) - placed


def micro_cycle_for_week(week_index: int, total_weeks: int) -> str:
    """Label a week base/build/peak/taper by its position in the plan; the last week is always taper."""
    if week_index >= total_weeks - 1:
        return "taper"
    ratio = (week_index + 1) / total_weeks
    if ratio <= 0.4:
        return "base"
    if ratio <= 0.7:
        return "build"
    return "peak"


@contextmanager
def plan_generation_lock(lock_dir: Path, user_id: str, timeout: float = 30) -> Iterator[None]:
    """Serialize plan generation for one user across processes."""
    lock_dir.mkdir(parents=True, exist_ok=True)
    safe_user = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in user_id)
    lock = FileLock(str(lock_dir / f"plan-{safe_user}.lock"))
    with lock.acquire(timeout=timeout):
        yield


class TrainingPlanner:
    """Template-driven plan generation, regeneration and planned-workout lifecycle."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate_plan(
        self,
        user_id: str,
        training_profile: TrainingProfile,
        display_profile: DisplayProfile,
        today: date | None = None,
    ) -> PlanGenerationResult:
        """
        Compile the goal's plan template onto the user's calendar.

        Prior planned workouts are deleted and prior plans deactivated before
        the new plan is written, so repeated calls never accumulate state.
        Nothing is committed here; the caller owns the transaction.

        Raises:
            PlanTemplateNotFound: Goal resolved to an unregistered template key
            UnknownWorkoutBase: A template token names a base missing from the library
        """
        template_key = template_key_for_goal(training_profile.goal_distance)
        template = PLAN_TEMPLATES.get(template_key)
        if template is None:
            raise PlanTemplateNotFound(template_key)

        self._delete_planned_workouts(user_id)
        self._deactivate_plans(user_id)

        today = today or date.today()
        start_of_week = get_week_start(today, display_profile.week_start_day)
        slot_indices = preferred_day_indices(training_profile.preferred_days, display_profile.week_start_day)
        if not slot_indices:
            logger.warning("User %s has no usable preferred days; plan will contain only rest days", user_id)

        registry = SkeletonRegistry(self.db)
        total_weeks = len(template["weeks"])
        plan_weeks: list[dict[str, Any]] = []
        queued: list[dict[str, Any]] = []
        dropped_total = 0

        for week_index, template_week in enumerate(template["weeks"]):
            schedule, dropped = place_week_tokens(template_week, slot_indices)
            if dropped:
                dropped_total += dropped
                logger.warning(
                    "Week %d of %s: %d workout(s) exceed %d preferred day(s) and were not scheduled",
                    week_index + 1,
                    template_key,
                    dropped,
                    len(slot_indices),
                )

            days: list[dict[str, Any]] = []
            for slot_index, token in enumerate(schedule):
                base, param = split_token(token)
                skeleton_id = registry.get_or_create(base)
                scheduled = start_of_week + timedelta(days=DAYS_PER_WEEK * week_index + slot_index)
                hydrated = hydrate(base, param, display_profile.unit_system)

                if base != REST_TOKEN:
                    queued.append(
                        {
                            "workout_template_id": skeleton_id,
                            "scheduled_date": scheduled,
                            "token": token,
                            "hydrated": hydrated,
                        }
                    )

                days.append(
                    {
                        "date": scheduled.isoformat(),
                        "workout_template_id": skeleton_id,
                        "description": token,
                        "type": entry_day_type(get_library_entry(base)),
                    }
                )

            plan_weeks.append(
                {
                    "week": week_index + 1,
                    "micro_cycle": micro_cycle_for_week(week_index, total_weeks),
                    "days": days,
                }
            )

        plan = TrainingPlan(
            user_id=user_id,
            name=template["name"],
            meta={
                "goal": training_profile.goal_distance,
                "template": template_key,
                "weeks": total_weeks,
                "level": training_profile.fitness_level,
                "days_per_week": training_profile.days_per_week,
            },
            is_active=True,
            start_date=start_of_week,
            plan=plan_weeks,
        )
        self.db.add(plan)
        self.db.flush()

        self.db.add_all(
            PlannedWorkout(user_id=user_id, training_plan_id=plan.id, status="scheduled", **row)
            for row in queued
        )
        self.db.flush()

        logger.info(
            "Generated plan id=%s | user=%s | template=%s | weeks=%d | workouts=%d | skeletons=%d | dropped=%d",
            plan.id,
            user_id,
            template_key,
            total_weeks,
            len(queued),
            len(registry),
            dropped_total,
        )
        return PlanGenerationResult(
            plan_id=plan.id,
            weeks=total_weeks,
            message=f"{template['name']} training plan generated successfully",
            dropped_tokens=dropped_total,
        )

    def regenerate_plan(
        self,
        user_id: str,
        training_profile: TrainingProfile,
        display_profile: DisplayProfile,
        today: date | None = None,
    ) -> PlanGenerationResult:
        """Drop the user's planned workouts and build a fresh plan."""
        self._delete_planned_workouts(user_id)
        result = self.generate_plan(user_id, training_profile, display_profile, today=today)
        template_name = PLAN_TEMPLATES[template_key_for_goal(training_profile.goal_distance)]["name"]
        result.message = f"{template_name} training plan regenerated successfully"
        return result

    def delete_plan(self, user_id: str) -> DeletePlanResult:
        """Remove the user's planned workouts and deactivate every plan without creating a new one."""
        deleted = self._delete_planned_workouts(user_id)
        deactivated = self._deactivate_plans(user_id)
        logger.info("Deleted plan for user=%s | workouts=%d | plans_deactivated=%d", user_id, deleted, deactivated)
        return DeletePlanResult(
            deactivated_plans=deactivated,
            deleted_workouts=deleted,
            message="Training plan deleted",
        )

    def _delete_planned_workouts(self, user_id: str) -> int:
        return (
            self.db.query(PlannedWorkout)
            .filter(PlannedWorkout.user_id == user_id)
            .delete(synchronize_session="fetch")
        )

    def _deactivate_plans(self, user_id: str) -> int:
        return (
            self.db.query(TrainingPlan)
            .filter(TrainingPlan.user_id == user_id, TrainingPlan.is_active.is_(True))
            .update(
                {"is_active": False, "updated_at": datetime.utcnow()},
                synchronize_session="fetch",
            )
        )

    # ------------------------------------------------------------------
    # Queries and lifecycle
    # ------------------------------------------------------------------
    def get_active_plan(self, user_id: str) -> TrainingPlan | None:
        return (
            self.db.query(TrainingPlan)
            .filter(TrainingPlan.user_id == user_id, TrainingPlan.is_active.is_(True))
            .order_by(TrainingPlan.id.desc())
            .first()
        )

    def list_planned_workouts(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[PlannedWorkout]:
        """Planned workouts for a user ordered by date, optionally bounded (inclusive)."""
        query = self.db.query(PlannedWorkout).filter(PlannedWorkout.user_id == user_id)
        if start_date is not None:
            query = query.filter(PlannedWorkout.scheduled_date >= start_date)
        if end_date is not None:
            query = query.filter(PlannedWorkout.scheduled_date <= end_date)
        return query.order_by(PlannedWorkout.scheduled_date, PlannedWorkout.id).all()

    def get_todays_workout(self, user_id: str, today: date | None = None) -> PlannedWorkout | None:
        today = today or date.today()
        return (
            self.db.query(PlannedWorkout)
            .filter(PlannedWorkout.user_id == user_id, PlannedWorkout.scheduled_date == today)
            .first()
        )

    def get_planned_workout(self, workout_id: int) -> PlannedWorkout | None:
        return self.db.get(PlannedWorkout, workout_id)

    def complete_workout(
        self,
        workout_id: int,
        actual_duration_minutes: float | None = None,
        actual_distance_meters: float | None = None,
        notes: str | None = None,
        completed_at: datetime | None = None,
    ) -> PlannedWorkout | None:
        workout = self.get_planned_workout(workout_id)
        if workout is None:
            return None

        workout.status = "completed"
        workout.completed_at = completed_at or datetime.utcnow()
        workout.actual_duration_minutes = actual_duration_minutes
        workout.actual_distance_meters = actual_distance_meters
        workout.completion_notes = notes
        workout.updated_at = datetime.utcnow()
        self.db.flush()
        logger.info("Marked planned workout %s as completed", workout_id)
        return workout

    def skip_workout(self, workout_id: int, reason: str | None = None) -> PlannedWorkout | None:
        workout = self.get_planned_workout(workout_id)
        if workout is None:
            return None

        workout.status = "skipped"
        workout.skip_reason = reason
        workout.updated_at = datetime.utcnow()
        self.db.flush()
        logger.info("Marked planned workout %s as skipped", workout_id)
        return workout
