"""Plan compiler schema: skeletons, plans, planned workouts, activities."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "workout_skeletons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("base_code", sa.String(length=10), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("sub_type", sa.String(length=30), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("global_description", sa.Text(), nullable=True),
        sa.Column("steps", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_workout_skeletons_base_code", "workout_skeletons", ["base_code"], unique=False)

    op.create_table(
        "training_plans",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("plan", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_training_plans_user_id", "training_plans", ["user_id"], unique=False)
    op.create_index("ix_training_plans_user_active", "training_plans", ["user_id", "is_active"], unique=False)

    op.create_table(
        "planned_workouts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("training_plan_id", sa.Integer(), sa.ForeignKey("training_plans.id"), nullable=False),
        sa.Column("workout_template_id", sa.Integer(), sa.ForeignKey("workout_skeletons.id"), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="scheduled"),
        sa.Column("token", sa.String(length=20), nullable=False),
        sa.Column("hydrated", sa.JSON(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("actual_duration_minutes", sa.Float(), nullable=True),
        sa.Column("actual_distance_meters", sa.Float(), nullable=True),
        sa.Column("completion_notes", sa.Text(), nullable=True),
        sa.Column("skip_reason", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_planned_workouts_user_id", "planned_workouts", ["user_id"], unique=False)
    op.create_index("ix_planned_workouts_training_plan_id", "planned_workouts", ["training_plan_id"], unique=False)
    op.create_index("ix_planned_workouts_user_date", "planned_workouts", ["user_id", "scheduled_date"], unique=False)

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("activity_type", sa.String(length=50), nullable=True),
        sa.Column("activity_name", sa.String(length=200), nullable=True),
        sa.Column("duration_minutes", sa.Float(), nullable=True),
        sa.Column("distance_meters", sa.Float(), nullable=True),
        sa.Column("calories", sa.Integer(), nullable=True),
        sa.Column("source", sa.String(length=30), nullable=False, server_default="app"),
        sa.Column(
            "planned_workout_id",
            sa.Integer(),
            sa.ForeignKey("planned_workouts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("start_time", sa.DateTime(timezone=False), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_activities_user_id", "activities", ["user_id"], unique=False)
    op.create_index("ix_activities_date", "activities", ["date"], unique=False)
    op.create_index("ix_activities_source", "activities", ["source"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_activities_source", table_name="activities")
    op.drop_index("ix_activities_date", table_name="activities")
    op.drop_index("ix_activities_user_id", table_name="activities")
    op.drop_table("activities")
    op.drop_index("ix_planned_workouts_user_date", table_name="planned_workouts")
    op.drop_index("ix_planned_workouts_training_plan_id", table_name="planned_workouts")
    op.drop_index("ix_planned_workouts_user_id", table_name="planned_workouts")
    op.drop_table("planned_workouts")
    op.drop_index("ix_training_plans_user_active", table_name="training_plans")
    op.drop_index("ix_training_plans_user_id", table_name="training_plans")
    op.drop_table("training_plans")
    op.drop_index("ix_workout_skeletons_base_code", table_name="workout_skeletons")
    op.drop_table("workout_skeletons")
