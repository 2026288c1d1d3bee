"""Tests for synthetic progress simulation."""
from __future__ import annotations

import random
from datetime import date, timedelta

import pytest

from runplan.models.database_models import Activity, PlannedWorkout, TrainingPlan
from runplan.models.schemas import DisplayProfile, SimulationSummary, TrainingProfile
from runplan.services.errors import NoActivePlan
from runplan.services.progress_simulator import (
    ACTIVITY_RANGES,
    SIMULATION_SOURCE,
    ProgressSimulator,
    activity_category,
)
from runplan.services.training_planner import TrainingPlanner


USER = "sim-runner"


@pytest.fixture()
def active_plan(db_session, reference_day) -> TrainingPlan:
    training = TrainingProfile(goal_distance="5K", preferred_days=["Mon", "Wed", "Fri"], days_per_week=3)
    result = TrainingPlanner(db_session).generate_plan(USER, training, DisplayProfile(), today=reference_day)
    db_session.commit()
    return db_session.get(TrainingPlan, result.plan_id)


def _workouts(db_session) -> list[PlannedWorkout]:
    return (
        db_session.query(PlannedWorkout)
        .filter(PlannedWorkout.user_id == USER)
        .order_by(PlannedWorkout.scheduled_date)
        .all()
    )


def test_simulation_completes_leading_weeks(db_session, active_plan):
    summary = ProgressSimulator(db_session, rng=random.Random(7)).simulate_progress(USER, 2)
    db_session.commit()

    assert summary.weeks_completed == 2
    assert summary.workouts_completed == 6
    assert summary.activities_created == 6
    assert summary.start_date == date(2026, 10, 5)

    plan = db_session.get(TrainingPlan, active_plan.id)
    assert plan.start_date == date(2026, 10, 5)
    assert plan.plan[0]["days"][0]["date"] == "2026-10-05"
    assert plan.plan[2]["days"][0]["date"] == "2026-10-19"

    workouts = _workouts(db_session)
    assert [w.status for w in workouts[:6]] == ["completed"] * 6
    assert all(w.status == "scheduled" for w in workouts[6:])
    assert workouts[0].scheduled_date == date(2026, 10, 5)
    assert workouts[6].scheduled_date == date(2026, 10, 19)
    assert workouts[0].completed_at is not None
    assert workouts[0].actual_duration_minutes is not None


def test_simulated_activities_are_tagged(db_session, active_plan):
    ProgressSimulator(db_session, rng=random.Random(1)).simulate_progress(USER, 1)
    db_session.commit()

    activities = db_session.query(Activity).all()
    completed_ids = {w.id for w in _workouts(db_session) if w.status == "completed"}

    assert len(activities) == 3
    assert {a.source for a in activities} == {SIMULATION_SOURCE}
    assert {a.planned_workout_id for a in activities} == completed_ids
    walk_run = ACTIVITY_RANGES["walk_run"]
    for activity in activities:
        assert activity.activity_name == "Walk/Run"
        assert walk_run.duration_minutes[0] <= activity.duration_minutes <= walk_run.duration_minutes[1]
        assert activity.start_time.date() == activity.date


def test_every_workout_moves_by_the_same_shift(db_session, active_plan):
    # Consecutive weeks share a skeleton, so a one-week shift lands week 2 on week 1's original dates.
    before = {w.id: w.scheduled_date for w in _workouts(db_session)}

    ProgressSimulator(db_session, rng=random.Random(3)).simulate_progress(USER, 1)
    db_session.commit()

    after = {w.id: w.scheduled_date for w in _workouts(db_session)}
    assert after == {wid: day - timedelta(days=7) for wid, day in before.items()}


def test_repeated_simulation_does_not_duplicate_activities(db_session, active_plan):
    simulator = ProgressSimulator(db_session, rng=random.Random(4))
    simulator.simulate_progress(USER, 1)
    db_session.commit()

    summary = simulator.simulate_progress(USER, 2)
    db_session.commit()

    # Week one was completed by the first run; only week two is new.
    assert summary.workouts_completed == 3
    assert summary.activities_created == 3
    assert db_session.query(Activity).count() == 6
    per_workout = [a.planned_workout_id for a in db_session.query(Activity).all()]
    assert len(per_workout) == len(set(per_workout))


def test_workout_completed_by_runner_is_not_simulated(db_session, active_plan):
    first = _workouts(db_session)[0]
    first.status = "completed"
    db_session.commit()

    summary = ProgressSimulator(db_session, rng=random.Random(2)).simulate_progress(USER, 1)

    assert summary.workouts_completed == 2
    assert db_session.query(Activity).filter(Activity.planned_workout_id == first.id).count() == 0


def test_default_buffer_is_whole_weeks_from_plan_start(db_session, active_plan):
    summary = ProgressSimulator(db_session, rng=random.Random(6)).simulate_progress(USER, 1)

    assert isinstance(summary, SimulationSummary)
    assert summary.plan_id == active_plan.id
    assert summary.start_date == date(2026, 10, 12)


def test_buffer_days_extend_the_shift(db_session, active_plan):
    summary = ProgressSimulator(db_session, rng=random.Random(5)).simulate_progress(USER, 1, buffer_days=2)

    assert summary.start_date == date(2026, 10, 10)
    assert _workouts(db_session)[0].scheduled_date == date(2026, 10, 10)


def test_weeks_are_clamped_to_plan_length(db_session, active_plan):
    summary = ProgressSimulator(db_session, rng=random.Random(9)).simulate_progress(USER, 40)

    assert summary.weeks_completed == 9
    assert summary.workouts_completed == 27
    assert summary.start_date == date(2026, 10, 19) - timedelta(weeks=9)


def test_zero_weeks_changes_nothing(db_session, active_plan):
    summary = ProgressSimulator(db_session).simulate_progress(USER, 0)

    assert summary.workouts_completed == 0
    assert summary.start_date == date(2026, 10, 19)
    assert db_session.query(Activity).count() == 0


def test_simulation_requires_active_plan(db_session):
    with pytest.raises(NoActivePlan):
        ProgressSimulator(db_session).simulate_progress("nobody", 2)


@pytest.mark.parametrize(
    "token, category",
    [("WR/3", "walk_run"), ("E4", "easy"), ("L10", "long"), ("X30", "cross"), ("T3", "tempo"), ("F20", "fallback")],
)
def test_activity_category(token, category):
    assert activity_category(token) == category
