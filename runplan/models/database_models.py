"""SQLAlchemy ORM models for plans, planned workouts and skeleton templates."""
from datetime import date, datetime
from sqlalchemy import Integer, Date, DateTime, Float, String, Boolean, Text, ForeignKey, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from runplan.database import Base


class WorkoutSkeleton(Base):
    """Shared, un-hydrated workout definition created once per base code per generation run."""

    __tablename__ = "workout_skeletons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)  # null -> system template
    name: Mapped[str] = mapped_column(String(100), nullable=False)  # TOKEN_<base>
    base_code: Mapped[str] = mapped_column(String(10), nullable=False, index=True)

    type: Mapped[str] = mapped_column(String(30), nullable=False)  # run, cross-train, rest
    sub_type: Mapped[str | None] = mapped_column(String(30), nullable=True)  # easy, long, tempo, interval, recovery
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    global_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Steps are generated per day at hydration time; the shared skeleton keeps none.
    steps: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TrainingPlan(Base):
    """Calendar-mapped training plan compiled from a plan template."""

    __tablename__ = "training_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    meta: Mapped[dict] = mapped_column(JSON, nullable=False)  # goal, template, weeks, level, days_per_week
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Week/day structure including rest days: [{week, micro_cycle, days: [...]}]
    plan: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationship
    workouts: Mapped[list["PlannedWorkout"]] = relationship("PlannedWorkout", back_populates="plan", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_training_plans_user_active", "user_id", "is_active"),
    )


class PlannedWorkout(Base):
    """One dated, hydrated workout belonging to a user's plan."""

    __tablename__ = "planned_workouts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    training_plan_id: Mapped[int] = mapped_column(Integer, ForeignKey("training_plans.id"), nullable=False, index=True)
    workout_template_id: Mapped[int] = mapped_column(Integer, ForeignKey("workout_skeletons.id"), nullable=False)
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[str] = mapped_column(String(20), default="scheduled", nullable=False)  # scheduled, completed, skipped
    token: Mapped[str] = mapped_column(String(20), nullable=False)
    hydrated: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Completion tracking
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    actual_duration_minutes: Mapped[float | None] = mapped_column(Float, nullable=True)
    actual_distance_meters: Mapped[float | None] = mapped_column(Float, nullable=True)
    completion_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    skip_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    plan: Mapped["TrainingPlan"] = relationship("TrainingPlan", back_populates="workouts")
    skeleton: Mapped["WorkoutSkeleton"] = relationship("WorkoutSkeleton", foreign_keys=[workout_template_id])

    __table_args__ = (
        Index("ix_planned_workouts_user_date", "user_id", "scheduled_date"),
    )


class Activity(Base):
    """Recorded (or simulated) training activity."""

    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Activity details
    activity_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    activity_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Duration & Distance
    duration_minutes: Mapped[float | None] = mapped_column(Float, nullable=True)
    distance_meters: Mapped[float | None] = mapped_column(Float, nullable=True)
    calories: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Origin of the row: "app", "healthkit", "strava", "simulation"
    source: Mapped[str] = mapped_column(String(30), nullable=False, default="app", index=True)
    planned_workout_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("planned_workouts.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Timestamps
    start_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
