"""Command-line access to plan generation, deletion, simulation and token hydration."""
from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from filelock import Timeout

from runplan.config import get_settings
from runplan.database import run_migrations, session_scope
from runplan.logging_config import configure_logging
from runplan.models.schemas import DisplayProfile, TrainingProfile
from runplan.services.errors import NoActivePlan, PlanGenerationError
from runplan.services.hydrator import hydrate
from runplan.services.progress_simulator import ProgressSimulator
from runplan.services.tokens import split_token
from runplan.services.training_planner import TrainingPlanner, plan_generation_lock


logger = logging.getLogger("scripts.manage_plan")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Training plan compiler utilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build a Couch-to-5K plan on Mon/Wed/Fri with Monday-start weeks
  python scripts/manage_plan.py generate --user demo --goal 5K --days Mon Wed Fri

  # Preview a token
  python scripts/manage_plan.py hydrate WR/5A --units metric

  # Pretend the first three weeks are done (requires SIMULATION_ENABLED=true)
  python scripts/manage_plan.py simulate --user demo --weeks 3 --seed 7
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG regardless of LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name in ("generate", "regenerate"):
        sub = subparsers.add_parser(name, help=f"{name.capitalize()} a user's plan")
        sub.add_argument("--user", required=True, help="User identifier")
        sub.add_argument("--goal", default="5K", help="Goal distance (5K, 10K, half-marathon, marathon, just-run-more)")
        sub.add_argument("--days", nargs="+", default=["Mon", "Wed", "Fri"], help="Preferred weekdays in order")
        sub.add_argument("--level", default="novice", help="Fitness level")
        sub.add_argument("--week-start", type=int, choices=(0, 1), default=None, help="0 = Sunday, 1 = Monday")
        sub.add_argument("--units", choices=("metric", "imperial"), default=None)

    delete = subparsers.add_parser("delete", help="Delete a user's plan")
    delete.add_argument("--user", required=True)

    simulate = subparsers.add_parser("simulate", help="Synthesize progress on the active plan")
    simulate.add_argument("--user", required=True)
    simulate.add_argument("--weeks", type=int, required=True, help="Weeks to mark as completed")
    simulate.add_argument("--buffer-days", type=int, default=None)
    simulate.add_argument("--seed", type=int, default=None)

    preview = subparsers.add_parser("hydrate", help="Print the hydration of a token")
    preview.add_argument("token")
    preview.add_argument("--units", choices=("metric", "imperial"), default="imperial")

    return parser.parse_args(argv)


def _profiles(args: argparse.Namespace) -> tuple[TrainingProfile, DisplayProfile]:
    settings = get_settings()
    training = TrainingProfile(
        goal_distance=args.goal,
        preferred_days=args.days,
        fitness_level=args.level,
        days_per_week=len(args.days),
    )
    display = DisplayProfile(
        week_start_day=settings.default_week_start_day if args.week_start is None else args.week_start,
        unit_system=args.units or settings.default_unit_system,
    )
    return training, display


def run(args: argparse.Namespace) -> int:
    settings = get_settings()

    if args.command == "hydrate":
        base, param = split_token(args.token)
        print(json.dumps(hydrate(base, param, args.units), indent=2))
        return 0

    run_migrations()

    if args.command in ("generate", "regenerate"):
        training, display = _profiles(args)
        try:
            with plan_generation_lock(settings.lock_dir, args.user), session_scope() as db:
                planner = TrainingPlanner(db)
                if args.command == "regenerate":
                    result = planner.regenerate_plan(args.user, training, display)
                else:
                    result = planner.generate_plan(args.user, training, display)
        except Timeout:
            logger.error("Another plan generation for %s is running", args.user)
            return 2
        except PlanGenerationError:
            logger.exception("Could not build plan for %s", args.user)
            return 1
        print(result.model_dump_json(indent=2))
        return 0

    if args.command == "delete":
        with session_scope() as db:
            result = TrainingPlanner(db).delete_plan(args.user)
        print(result.model_dump_json(indent=2))
        return 0

    if args.command == "simulate":
        if not settings.simulation_enabled:
            logger.error("Progress simulation is disabled; set SIMULATION_ENABLED=true on a non-production database")
            return 2
        rng = random.Random(args.seed) if args.seed is not None else None
        buffer_days = settings.simulation_buffer_days if args.buffer_days is None else args.buffer_days
        try:
            with session_scope() as db:
                summary = ProgressSimulator(db, rng=rng).simulate_progress(
                    args.user, args.weeks, buffer_days=buffer_days
                )
        except NoActivePlan as e:
            logger.error("%s", e)
            return 1
        print(summary.model_dump_json(indent=2))
        return 0

    return 1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
