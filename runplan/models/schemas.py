"""Pydantic models describing service inputs and API payloads."""
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


# Profiles supplied by collaborators
class TrainingProfile(BaseModel):
    """Goal and availability preferences captured during onboarding."""

    goal_distance: str = "5K"
    preferred_days: list[str] = Field(default_factory=list, description="Ordered weekday names, e.g. ['Mon', 'Wed', 'Fri']")
    fitness_level: str = "novice"
    days_per_week: int = Field(default=3, ge=1, le=7)


class DisplayProfile(BaseModel):
    """Calendar and unit preferences of the user."""

    week_start_day: Literal[0, 1] = 1
    unit_system: Literal["metric", "imperial"] = "imperial"


# Plan generation
class GeneratePlanRequest(BaseModel):
    """Schema for generating or regenerating a plan."""

    user_id: str = Field(min_length=1)
    training_profile: TrainingProfile
    display_profile: DisplayProfile = Field(default_factory=DisplayProfile)


class PlanGenerationResult(BaseModel):
    """Outcome of a plan generation run."""

    plan_id: int
    weeks: int
    message: str
    dropped_tokens: int = 0


class DeletePlanResult(BaseModel):
    deactivated_plans: int
    deleted_workouts: int
    message: str


# Training plan structure
class DayEntry(BaseModel):
    date: date
    workout_template_id: int | None = None
    description: str
    type: str


class PlanWeek(BaseModel):
    week: int
    micro_cycle: Literal["base", "build", "peak", "taper"]
    days: list[DayEntry] = []


class TrainingPlanResponse(BaseModel):
    """Schema for training plan API response."""

    id: int
    user_id: str
    name: str
    meta: dict[str, Any]
    is_active: bool
    start_date: date
    plan: list[PlanWeek] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PlannedWorkoutResponse(BaseModel):
    """Schema for planned workout API response."""

    id: int
    user_id: str
    training_plan_id: int
    workout_template_id: int
    scheduled_date: date
    status: Literal["scheduled", "completed", "skipped"]
    token: str
    hydrated: dict[str, Any] = {}
    completed_at: datetime | None = None
    actual_duration_minutes: float | None = None
    actual_distance_meters: float | None = None
    completion_notes: str | None = None
    skip_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EnrichedWorkoutResponse(BaseModel):
    """Planned workout merged with its skeleton for presentation."""

    id: int
    scheduled_date: date
    status: str
    token: str
    name: str
    title: str
    type: str
    sub_type: str | None = None
    description: str | None = None
    global_description: str | None = None
    steps: list[dict[str, Any]] = []
    executable_steps: list[dict[str, Any]] = []
    hydrated: dict[str, Any] = {}


class WorkoutCompletionUpdate(BaseModel):
    """Schema for marking a workout as complete."""

    actual_duration_minutes: float | None = Field(None, ge=0)
    actual_distance_meters: float | None = Field(None, ge=0)
    notes: str | None = None
    completed_at: datetime | None = None


class WorkoutSkipRequest(BaseModel):
    reason: str | None = None


# Progress simulation
class SimulateProgressRequest(BaseModel):
    """Schema for shifting a plan back in time and synthesizing completions."""

    user_id: str = Field(min_length=1)
    weeks_to_complete: int = Field(ge=0)
    buffer_days: int | None = Field(None, ge=0)
    seed: int | None = None


class SimulationSummary(BaseModel):
    plan_id: int
    weeks_completed: int
    workouts_completed: int
    activities_created: int
    start_date: date


class HydrationPreview(BaseModel):
    """Hydration of a single token, for tooling and debugging."""

    token: str
    base: str
    param: str
    units: Literal["metric", "imperial"]
    hydrated: dict[str, Any]

    @field_validator("token")
    @classmethod
    def strip_token(cls, value: str) -> str:
        return value.strip()
