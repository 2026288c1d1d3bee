"""Synthetic progress for demos and tests.

Shifts a user's active plan into the past and fabricates plausible completed
activities for the weeks that are now behind them. Every generated activity is
tagged with ``source="simulation"`` so it can be told apart from real data.
"""
from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from runplan.models.database_models import Activity, PlannedWorkout, TrainingPlan
from runplan.models.schemas import SimulationSummary
from runplan.services.errors import NoActivePlan
from runplan.services.tokens import is_rest, split_token


logger = logging.getLogger(__name__)

SIMULATION_SOURCE = "simulation"


@dataclass(frozen=True)
class ActivityRange:
    activity_type: str
    duration_minutes: tuple[int, int]
    distance_meters: tuple[int, int]
    calories: tuple[int, int]


ACTIVITY_RANGES: dict[str, ActivityRange] = {
    "walk_run": ActivityRange("run", (20, 35), (2000, 4000), (150, 300)),
    "easy": ActivityRange("run", (25, 50), (4000, 8000), (250, 500)),
    "long": ActivityRange("run", (60, 150), (12000, 30000), (600, 1500)),
    "cross": ActivityRange("cross-train", (30, 60), (0, 0), (200, 450)),
    "tempo": ActivityRange("run", (35, 60), (6000, 11000), (400, 700)),
    "fallback": ActivityRange("run", (20, 45), (3000, 7000), (200, 450)),
}

_CATEGORY_BY_BASE = {
    "WR": "walk_run",
    "E": "easy",
    "L": "long",
    "X": "cross",
    "T": "tempo",
}


def activity_category(token: str) -> str:
    return _CATEGORY_BY_BASE.get(split_token(token)[0], "fallback")


class ProgressSimulator:
    """Rewind an active plan by N weeks and mark the past weeks as completed."""

    def __init__(self, db: Session, rng: random.Random | None = None):
        self.db = db
        self.rng = rng or random.Random()

    def simulate_progress(
        self,
        user_id: str,
        weeks_to_complete: int,
        buffer_days: int = 0,
    ) -> SimulationSummary:
        """
        Shift the user's active plan backwards and synthesize completions.

        Args:
            user_id: Owner of the active plan
            weeks_to_complete: Number of leading plan weeks to mark as done
            buffer_days: Extra days to move the plan back beyond whole weeks

        Returns:
            SimulationSummary describing the rewritten plan

        Raises:
            NoActivePlan: The user has no active plan
        """
        plan = (
            self.db.query(TrainingPlan)
            .filter(TrainingPlan.user_id == user_id, TrainingPlan.is_active.is_(True))
            .order_by(TrainingPlan.id.desc())
            .first()
        )
        if plan is None:
            raise NoActivePlan(user_id)

        weeks = max(0, min(weeks_to_complete, len(plan.plan)))
        shift = timedelta(days=weeks * 7 + buffer_days)
        new_start = plan.start_date - shift

        # Keys use the dates as stored before any of them are rewritten.
        planned = (
            self.db.query(PlannedWorkout)
            .filter(PlannedWorkout.training_plan_id == plan.id)
            .all()
        )
        by_original_slot = {(pw.scheduled_date, pw.workout_template_id): pw for pw in planned}

        plan_weeks = copy.deepcopy(plan.plan)
        completed = 0
        activities = 0

        for week_index, week in enumerate(plan_weeks):
            for day in week["days"]:
                original = date.fromisoformat(day["date"])
                shifted = original - shift
                day["date"] = shifted.isoformat()

                workout = by_original_slot.get((original, day.get("workout_template_id")))
                if workout is None:
                    continue
                workout.scheduled_date = shifted

                if week_index >= weeks or is_rest(day["description"]):
                    continue
                if workout.status == "completed":
                    # Already done, by the runner or an earlier simulation.
                    continue

                activity = self._synthesize_activity(user_id, workout, shifted)
                self.db.add(activity)
                workout.status = "completed"
                workout.completed_at = activity.start_time + timedelta(minutes=activity.duration_minutes)
                workout.actual_duration_minutes = activity.duration_minutes
                workout.actual_distance_meters = activity.distance_meters
                completed += 1
                activities += 1

        plan.plan = plan_weeks
        flag_modified(plan, "plan")
        plan.start_date = new_start
        plan.updated_at = datetime.utcnow()
        self.db.flush()

        logger.info(
            "Simulated progress | user=%s | plan=%s | weeks=%d | completed=%d | new_start=%s",
            user_id,
            plan.id,
            weeks,
            completed,
            new_start.isoformat(),
        )
        return SimulationSummary(
            plan_id=plan.id,
            weeks_completed=weeks,
            workouts_completed=completed,
            activities_created=activities,
            start_date=new_start,
        )

    def _synthesize_activity(self, user_id: str, workout: PlannedWorkout, day: date) -> Activity:
        ranges = ACTIVITY_RANGES[activity_category(workout.token)]
        start_hour = self.rng.randint(6, 19)
        return Activity(
            user_id=user_id,
            date=day,
            start_time=datetime.combine(day, time(hour=start_hour)),
            activity_type=ranges.activity_type,
            activity_name=(workout.hydrated or {}).get("description") or workout.token,
            duration_minutes=float(self.rng.randint(*ranges.duration_minutes)),
            distance_meters=float(self.rng.randint(*ranges.distance_meters)),
            calories=self.rng.randint(*ranges.calories),
            source=SIMULATION_SOURCE,
            planned_workout_id=workout.id,
        )
