"""Static multi-week plan templates and the goal -> template lookup.

Each week is a Sunday-first list of exactly seven tokens. Distances for the
``E``/``L``/``T``/``U`` bases are in miles, ``X``/``F`` parameters are minutes.
"""
from typing import Dict, List, TypedDict

from runplan.models.workout_library import WORKOUT_LIBRARY, is_interval_entry
from runplan.services.tokens import split_token


DAYS_PER_TEMPLATE_WEEK = 7


class PlanTemplate(TypedDict):
    name: str
    weeks: List[List[str]]


PLAN_TEMPLATES: Dict[str, PlanTemplate] = {
    # Couch-to-5K (9 weeks)
    "C25K": {
        "name": "Couch to 5K - 9 wk",
        "weeks": [
            ["R", "WR/1", "R", "WR/1", "R", "WR/1", "R"],
            ["R", "WR/2", "R", "WR/2", "R", "WR/2", "R"],
            ["R", "WR/3", "R", "WR/3", "R", "WR/3", "R"],
            ["R", "WR/4", "R", "WR/4", "R", "WR/4", "R"],
            ["R", "WR/5A", "R", "WR/5B", "R", "WR/5C", "R"],
            ["R", "WR/6A", "R", "WR/6B", "R", "WR/6C", "R"],
            ["R", "WR/7", "R", "WR/7", "R", "WR/7", "R"],
            ["R", "WR/8", "R", "WR/8", "R", "WR/8", "R"],
            ["R", "WR/9", "R", "WR/9", "R", "WR/9", "R"],
        ],
    },
    "TK10": {
        "name": "10K - 10 wk build",
        "weeks": [
            ["R", "E2", "R", "E2", "X30", "R", "L3"],
            ["R", "E2", "R", "E3", "X30", "R", "L3"],
            ["R", "E3", "R", "F20", "X30", "R", "L4"],
            ["R", "E3", "R", "T2", "X30", "R", "L4"],
            ["R", "E3", "R", "F25", "X35", "R", "L5"],
            ["R", "E3", "R", "T3", "X35", "R", "L4"],
            ["R", "E3", "R", "F30", "X35", "R", "L6"],
            ["R", "E4", "R", "T3", "X35", "R", "L6"],
            ["R", "E3", "R", "F25", "X30", "R", "L5"],
            ["R", "E2", "R", "U2", "R", "R", "E6.2"],
        ],
    },
    "HM12": {
        "name": "Half Marathon - 12 wk",
        "weeks": [
            ["R", "E3", "E3", "X30", "E3", "R", "L5"],
            ["R", "E3", "E3", "X30", "E3", "R", "L6"],
            ["R", "E3", "T3", "X30", "E3", "R", "L7"],
            ["R", "E3", "F25", "X30", "E3", "R", "L5"],
            ["R", "E4", "T3", "X35", "E4", "R", "L8"],
            ["R", "E4", "F30", "X35", "E4", "R", "L9"],
            ["R", "E4", "T4", "X35", "E4", "R", "L10"],
            ["R", "E3", "F25", "X30", "E3", "R", "L7"],
            ["R", "E4", "T5", "X40", "E4", "R", "L11"],
            ["R", "E4", "F35", "X40", "E5", "R", "L12"],
            ["R", "E4", "T4", "X30", "E4", "R", "L8"],
            ["R", "E3", "U2", "R", "E2", "R", "L13.1"],
        ],
    },
    "M16": {
        "name": "Marathon - 16 wk finish-strong",
        "weeks": [
            ["R", "E4", "E5", "X40", "E5", "R", "L8"],
            ["R", "E4", "E5", "X40", "E6", "R", "L9"],
            ["R", "E4", "E6", "X40", "E6", "R", "L10"],
            ["R", "E4", "E6", "X40", "E7", "R", "L11"],
            ["R", "E4", "T4", "X45", "E6", "R", "L12"],
            ["R", "E4", "T4", "X45", "E6", "R", "L10"],
            ["R", "E5", "T5", "X45", "E6", "R", "L14"],
            ["R", "E5", "F30", "X45", "E7", "R", "L15"],
            ["R", "E5", "T5", "X45", "E7", "R", "L16"],
            ["R", "E5", "F35", "X45", "E7", "R", "L12"],
            ["R", "E5", "T6", "X45", "E8", "R", "L18"],
            ["R", "E5", "F40", "X45", "E8", "R", "L20"],
            ["R", "E5", "T6", "X45", "E8", "R", "L16"],
            ["R", "E4", "T5", "X40", "E6", "R", "L12"],
            ["R", "E4", "F30", "X30", "E5", "R", "L8"],
            ["R", "E3", "U2", "R", "E3", "U2", "L26.2"],
        ],
    },
}

DEFAULT_GOAL = "5K"

GOAL_TEMPLATE_KEYS: Dict[str, str] = {
    "5K": "C25K",
    "10K": "TK10",
    "half-marathon": "HM12",
    "marathon": "M16",
    "just-run-more": "C25K",
}


def template_key_for_goal(goal: str | None) -> str:
    """Map a goal distance to a template key, falling back to the 5K plan."""
    if goal:
        normalized = goal.strip().lower()
        for known, key in GOAL_TEMPLATE_KEYS.items():
            if known.lower() == normalized:
                return key
    return GOAL_TEMPLATE_KEYS[DEFAULT_GOAL]


def validate_templates(templates: Dict[str, PlanTemplate] | None = None) -> List[str]:
    """
    Check every template against the workout library.

    Returns:
        List of human-readable problems; empty when all templates are consistent.
    """
    problems: List[str] = []
    for key, template in (templates or PLAN_TEMPLATES).items():
        for week_number, week in enumerate(template["weeks"], start=1):
            if len(week) != DAYS_PER_TEMPLATE_WEEK:
                problems.append(f"{key} week {week_number}: expected 7 tokens, got {len(week)}")
            for token in week:
                base, param = split_token(token)
                entry = WORKOUT_LIBRARY.get(base)
                if entry is None:
                    problems.append(f"{key} week {week_number}: unknown base code '{base}' in token '{token}'")
                elif is_interval_entry(entry) and param.upper() not in entry["variants"]:
                    problems.append(f"{key} week {week_number}: unknown variant '{param}' in token '{token}'")
    return problems
