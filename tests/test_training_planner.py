"""Tests for plan compilation, scheduling helpers and planned-workout lifecycle."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path

import pytest
from filelock import FileLock, Timeout

from runplan.models.database_models import PlannedWorkout, TrainingPlan, WorkoutSkeleton
from runplan.models.plan_templates import PLAN_TEMPLATES
from runplan.models.schemas import DisplayProfile, TrainingProfile
from runplan.services.errors import PlanTemplateNotFound, UnknownWorkoutBase
from runplan.services.training_planner import (
    TrainingPlanner,
    get_week_start,
    micro_cycle_for_week,
    place_week_tokens,
    plan_generation_lock,
    preferred_day_indices,
)


USER = "runner-1"


def _profiles(goal: str = "5K", days=("Mon", "Wed", "Fri"), week_start: int = 1, units: str = "imperial"):
    training = TrainingProfile(goal_distance=goal, preferred_days=list(days), days_per_week=len(days))
    display = DisplayProfile(week_start_day=week_start, unit_system=units)
    return training, display


class TestSchedulingHelpers:
    def test_week_start_monday_anchored(self):
        assert get_week_start(date(2026, 10, 21), 1) == date(2026, 10, 19)
        assert get_week_start(date(2026, 10, 19), 1) == date(2026, 10, 19)
        # Sunday belongs to the week that began the previous Monday.
        assert get_week_start(date(2026, 10, 25), 1) == date(2026, 10, 19)

    def test_week_start_sunday_anchored(self):
        assert get_week_start(date(2026, 10, 21), 0) == date(2026, 10, 18)
        assert get_week_start(date(2026, 10, 18), 0) == date(2026, 10, 18)
        assert get_week_start(date(2026, 10, 24), 0) == date(2026, 10, 18)

    def test_preferred_day_indices(self):
        assert preferred_day_indices(["Mon", "Wed", "Fri"], 1) == [0, 2, 4]
        assert preferred_day_indices(["Mon", "Wed", "Fri"], 0) == [1, 3, 5]
        assert preferred_day_indices(["Sun", "Sat"], 1) == [6, 5]

    def test_preferred_day_indices_normalizes_and_skips(self):
        assert preferred_day_indices(["monday", "Funday", "MON", " wed"], 1) == [0, 2]

    def test_place_week_tokens_is_order_only(self):
        schedule, dropped = place_week_tokens(["R", "E2", "R", "T3", "X30", "R", "L4"], [6, 0])

        assert schedule == ["T3", "R", "R", "R", "R", "R", "E2"]
        assert dropped == 2

    def test_place_week_tokens_without_overflow(self):
        schedule, dropped = place_week_tokens(["R", "WR/1", "R", "WR/1", "R", "WR/1", "R"], [0, 2, 4, 5])

        assert schedule == ["WR/1", "R", "WR/1", "R", "WR/1", "R", "R"]
        assert dropped == 0

    def test_micro_cycles_for_nine_weeks(self):
        cycles = [micro_cycle_for_week(i, 9) for i in range(9)]
        assert cycles == ["base", "base", "base", "build", "build", "build", "peak", "peak", "taper"]

    def test_single_week_plan_is_taper(self):
        assert micro_cycle_for_week(0, 1) == "taper"

    def test_generation_lock_times_out_when_held(self, tmp_path: Path):
        with plan_generation_lock(tmp_path, "same/user"):
            held = FileLock(str(tmp_path / "plan-same_user.lock"))
            with pytest.raises(Timeout):
                held.acquire(timeout=0)


class TestGeneratePlan:
    def test_couch_to_5k_on_three_days(self, db_session, reference_day):
        training, display = _profiles()

        result = TrainingPlanner(db_session).generate_plan(USER, training, display, today=reference_day)

        assert result.weeks == 9
        assert result.dropped_tokens == 0
        assert result.message == "Couch to 5K - 9 wk training plan generated successfully"

        plan = db_session.get(TrainingPlan, result.plan_id)
        assert plan.is_active is True
        assert plan.start_date == date(2026, 10, 19)
        assert plan.meta["template"] == "C25K"
        assert plan.meta["weeks"] == 9

        week_one = plan.plan[0]
        assert week_one["micro_cycle"] == "base"
        assert [d["description"] for d in week_one["days"]] == ["WR/1", "R", "WR/1", "R", "WR/1", "R", "R"]
        assert [d["type"] for d in week_one["days"]][:2] == ["interval", "rest"]
        assert week_one["days"][0]["date"] == "2026-10-19"
        assert week_one["days"][6]["date"] == "2026-10-25"
        assert plan.plan[-1]["micro_cycle"] == "taper"

        workouts = (
            db_session.query(PlannedWorkout)
            .filter(PlannedWorkout.user_id == USER)
            .order_by(PlannedWorkout.scheduled_date)
            .all()
        )
        assert len(workouts) == 27
        assert [w.scheduled_date for w in workouts[:3]] == [
            date(2026, 10, 19),
            date(2026, 10, 21),
            date(2026, 10, 23),
        ]
        assert all(w.status == "scheduled" for w in workouts)
        assert workouts[0].token == "WR/1"
        assert workouts[0].hydrated["minutes"] == 20
        assert workouts[-1].token == "WR/9"

    def test_metric_5k_week_one_has_single_main_set(self, db_session, reference_day):
        training, display = _profiles(units="metric")

        result = TrainingPlanner(db_session).generate_plan(USER, training, display, today=reference_day)

        assert result.weeks == 9
        week_one = TrainingPlanner(db_session).list_planned_workouts(
            USER, date(2026, 10, 19), date(2026, 10, 25)
        )
        assert [w.token for w in week_one] == ["WR/1"] * 3
        for workout in week_one:
            labels = [s["label"] for s in workout.hydrated["display_steps"]]
            assert labels.count("Main Set") == 1

    def test_rest_days_are_never_persisted(self, db_session, reference_day):
        training, display = _profiles(goal="half-marathon", days=("Tue", "Thu", "Sat", "Sun"))

        TrainingPlanner(db_session).generate_plan(USER, training, display, today=reference_day)

        tokens = [w.token for w in db_session.query(PlannedWorkout).all()]
        assert "R" not in tokens
        assert len(tokens) == 12 * 4

    def test_skeletons_are_shared_per_base(self, db_session, reference_day):
        training, display = _profiles(goal="10K", days=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"))

        result = TrainingPlanner(db_session).generate_plan(USER, training, display, today=reference_day)

        plan = db_session.get(TrainingPlan, result.plan_id)
        names = {s.name for s in db_session.query(WorkoutSkeleton).all()}
        assert names == {"TOKEN_R", "TOKEN_E", "TOKEN_X", "TOKEN_L", "TOKEN_F", "TOKEN_T", "TOKEN_U"}

        by_token: dict[str, set[int]] = {}
        for week in plan.plan:
            for day in week["days"]:
                base = day["description"][0]
                by_token.setdefault(base, set()).add(day["workout_template_id"])
        assert all(len(ids) == 1 for ids in by_token.values())

    def test_overflow_tokens_are_dropped_and_counted(self, db_session, reference_day):
        training, display = _profiles(goal="marathon")

        result = TrainingPlanner(db_session).generate_plan(USER, training, display, today=reference_day)

        # Every marathon week holds five workouts; three preferred days keep the first three.
        assert result.dropped_tokens == 16 * 2
        plan = db_session.get(TrainingPlan, result.plan_id)
        assert [d["description"] for d in plan.plan[0]["days"]] == ["E4", "R", "E5", "R", "X40", "R", "R"]
        assert db_session.query(PlannedWorkout).count() == 16 * 3

    def test_sunday_anchored_metric_plan(self, db_session, reference_day):
        training, display = _profiles(goal="10K", days=("Sun", "Wed"), week_start=0, units="metric")

        result = TrainingPlanner(db_session).generate_plan(USER, training, display, today=reference_day)

        plan = db_session.get(TrainingPlan, result.plan_id)
        assert plan.start_date == date(2026, 10, 18)
        days = plan.plan[0]["days"]
        assert days[0]["description"] == "E2"
        assert days[0]["date"] == "2026-10-18"
        assert days[3]["description"] == "E2"

        first = (
            db_session.query(PlannedWorkout)
            .order_by(PlannedWorkout.scheduled_date)
            .first()
        )
        assert first.hydrated["description"] == "3.2 km easy run"

    def test_no_usable_days_yields_rest_only_plan(self, db_session, reference_day):
        training, display = _profiles(days=("Someday",))

        result = TrainingPlanner(db_session).generate_plan(USER, training, display, today=reference_day)

        assert result.dropped_tokens == 27
        assert db_session.query(PlannedWorkout).count() == 0

    def test_generation_is_idempotent(self, db_session, reference_day):
        planner = TrainingPlanner(db_session)
        training, display = _profiles()

        first = planner.generate_plan(USER, training, display, today=reference_day)
        db_session.commit()
        second = planner.generate_plan(USER, training, display, today=reference_day)
        db_session.commit()

        active = db_session.query(TrainingPlan).filter(TrainingPlan.is_active.is_(True)).all()
        assert [p.id for p in active] == [second.plan_id]
        assert db_session.get(TrainingPlan, first.plan_id).is_active is False

        workouts = db_session.query(PlannedWorkout).all()
        assert len(workouts) == 27
        assert {w.training_plan_id for w in workouts} == {second.plan_id}

    def test_other_users_are_untouched(self, db_session, reference_day):
        planner = TrainingPlanner(db_session)
        training, display = _profiles()

        other = planner.generate_plan("someone-else", training, display, today=reference_day)
        planner.generate_plan(USER, training, display, today=reference_day)

        assert planner.get_active_plan("someone-else").id == other.plan_id
        assert len(planner.list_planned_workouts("someone-else")) == 27

    def test_unknown_base_aborts_without_touching_previous_plan(self, db_session, reference_day, monkeypatch):
        planner = TrainingPlanner(db_session)
        training, display = _profiles()
        original = planner.generate_plan(USER, training, display, today=reference_day)
        db_session.commit()

        monkeypatch.setitem(
            PLAN_TEMPLATES,
            "C25K",
            {"name": "Broken", "weeks": [["R", "WR/1", "R", "ZZ3", "R", "R", "R"]]},
        )
        with pytest.raises(UnknownWorkoutBase):
            planner.generate_plan(USER, training, display, today=reference_day)
        db_session.rollback()

        assert planner.get_active_plan(USER).id == original.plan_id
        assert len(planner.list_planned_workouts(USER)) == 27

    def test_missing_template_raises(self, db_session, reference_day, monkeypatch):
        monkeypatch.delitem(PLAN_TEMPLATES, "C25K")
        training, display = _profiles()

        with pytest.raises(PlanTemplateNotFound):
            TrainingPlanner(db_session).generate_plan(USER, training, display, today=reference_day)

    def test_regenerate_replaces_plan(self, db_session, reference_day):
        planner = TrainingPlanner(db_session)
        planner.generate_plan(USER, *_profiles(), today=reference_day)

        result = planner.regenerate_plan(USER, *_profiles(goal="10K"), today=reference_day)

        assert result.message == "10K - 10 wk build training plan regenerated successfully"
        assert planner.get_active_plan(USER).id == result.plan_id
        assert {w.training_plan_id for w in planner.list_planned_workouts(USER)} == {result.plan_id}


class TestPlanLifecycle:
    def test_delete_plan(self, db_session, reference_day):
        planner = TrainingPlanner(db_session)
        planner.generate_plan(USER, *_profiles(), today=reference_day)

        result = planner.delete_plan(USER)

        assert result.deactivated_plans == 1
        assert result.deleted_workouts == 27
        assert planner.get_active_plan(USER) is None
        assert planner.list_planned_workouts(USER) == []

    def test_delete_without_plan(self, db_session):
        result = TrainingPlanner(db_session).delete_plan(USER)
        assert (result.deactivated_plans, result.deleted_workouts) == (0, 0)

    def test_list_planned_workouts_range(self, db_session, reference_day):
        planner = TrainingPlanner(db_session)
        planner.generate_plan(USER, *_profiles(), today=reference_day)

        start = date(2026, 10, 19)
        workouts = planner.list_planned_workouts(USER, start, start + timedelta(days=6))

        assert [w.scheduled_date for w in workouts] == [
            date(2026, 10, 19),
            date(2026, 10, 21),
            date(2026, 10, 23),
        ]

    def test_todays_workout(self, db_session, reference_day):
        planner = TrainingPlanner(db_session)
        planner.generate_plan(USER, *_profiles(), today=reference_day)

        assert planner.get_todays_workout(USER, today=reference_day).token == "WR/1"
        assert planner.get_todays_workout(USER, today=date(2026, 10, 20)) is None

    def test_complete_workout(self, db_session, reference_day):
        planner = TrainingPlanner(db_session)
        planner.generate_plan(USER, *_profiles(), today=reference_day)
        workout = planner.get_todays_workout(USER, today=reference_day)
        finished = datetime(2026, 10, 21, 7, 30)

        updated = planner.complete_workout(
            workout.id,
            actual_duration_minutes=31,
            actual_distance_meters=3200,
            notes="felt good",
            completed_at=finished,
        )

        assert updated.status == "completed"
        assert updated.completed_at == finished
        assert updated.actual_distance_meters == 3200
        assert updated.completion_notes == "felt good"

    def test_skip_workout(self, db_session, reference_day):
        planner = TrainingPlanner(db_session)
        planner.generate_plan(USER, *_profiles(), today=reference_day)
        workout = planner.get_todays_workout(USER, today=reference_day)

        updated = planner.skip_workout(workout.id, reason="sore calf")

        assert updated.status == "skipped"
        assert updated.skip_reason == "sore calf"

    def test_lifecycle_on_missing_workout(self, db_session):
        planner = TrainingPlanner(db_session)
        assert planner.complete_workout(9999) is None
        assert planner.skip_workout(9999) is None
