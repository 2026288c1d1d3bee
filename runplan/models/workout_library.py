"""Static workout skeletons keyed by token base code.

Simple bases carry a flat ``steps`` list whose ``description``/``duration``/
``distance`` fields may contain the ``{{mi}}``, ``{{km}}`` and ``{{min}}``
placeholders. Interval bases carry ``warmup``/``cooldown`` plus ``variants``,
each with a compact pattern understood by
:func:`runplan.services.pattern_parser.parse_pattern`.
"""
from typing import Any, Dict


# Bases whose parameter is a distance in miles.
DISTANCE_BASES = frozenset({"E", "L", "U", "T"})
# Bases whose parameter is a duration in minutes.
TIME_BASES = frozenset({"X", "F"})


WORKOUT_LIBRARY: Dict[str, Dict[str, Any]] = {
    "R": {
        "type": "rest",
        "description": "Rest day",
        "global_description": (
            "Recovery is an essential part of training. Your body repairs and strengthens "
            "during rest, making you ready for the next challenge."
        ),
        "steps": [],
    },
    # Couch-to-5K walk/run progression
    "WR": {
        "type": "run",
        "sub_type": "interval",
        "description": "Walk/Run",
        "global_description": (
            "Build your running endurance gradually with structured walk-run intervals. "
            "This proven approach helps beginners develop cardiovascular fitness while "
            "reducing injury risk."
        ),
        "warmup": {"label": "Warmup", "duration": "5 min", "effort": "easy"},
        "cooldown": {"label": "Cool-down", "duration": "5 min", "effort": "easy"},
        "variants": {
            "1": {"pattern": "60s run / 90s walk", "repeats": 8, "summary": "Repeat 8 times: 60 sec run, 90 sec walk"},
            "2": {"pattern": "90s run / 120s walk", "repeats": 6, "summary": "Repeat 6 times: 90 sec run, 2 min walk"},
            "3": {
                "pattern": "90s run / 90s walk / 180s run / 180s walk",
                "repeats": 2,
                "summary": "Repeat 2 times: 90s run, 90s walk, 3 min run, 3 min walk",
            },
            "4": {
                "pattern": "3m run / 90s walk / 5m run / 2.5m walk / 3m run / 90s walk / 5m run",
                "summary": "A varied pace run with walking breaks",
            },
            "5A": {"pattern": "5m run / 3m walk / 5m run / 3m walk / 5m run", "summary": "3x 5 minute runs with 3 minute walk breaks"},
            "5B": {"pattern": "8m run / 5m walk / 8m run", "summary": "Two 8-minute runs with a 5 minute walk break"},
            "5C": {"pattern": "20m run", "summary": "Continuous 20 minute run"},
            "6A": {
                "pattern": "5m run / 3m walk / 8m run / 3m walk / 5m run",
                "summary": "Two 5-minute and one 8-minute run with walk breaks",
            },
            "6B": {"pattern": "10m run / 3m walk / 10m run", "summary": "Two 10-minute runs with a 3 minute walk break"},
            "6C": {"pattern": "25m run", "summary": "Continuous 25 minute run"},
            "7": {"pattern": "25m run", "summary": "Continuous 25 minute run"},
            "8": {"pattern": "28m run", "summary": "Continuous 28 minute run"},
            "9": {"pattern": "30m run", "summary": "Continuous 30 minute run"},
        },
    },
    "E": {
        "type": "run",
        "sub_type": "easy",
        "description": "{{mi}} mi easy run",
        "metric_description": "{{km}} km easy run",
        "global_description": (
            "Easy runs form the foundation of your training. Run at a comfortable pace where "
            "you can hold a conversation, building your aerobic base and endurance."
        ),
        "steps": [
            {"order": 1, "label": "Run", "distance": "{{km}}", "effort": "easy"},
        ],
    },
    "L": {
        "type": "run",
        "sub_type": "long",
        "description": "{{mi}} mi long run",
        "metric_description": "{{km}} km long run",
        "global_description": (
            "Long runs build cardiovascular endurance and mental toughness. Focus on "
            "maintaining a steady, comfortable effort throughout the duration."
        ),
        "steps": [
            {"order": 1, "label": "Run", "distance": "{{km}}", "effort": "easy"},
        ],
    },
    "X": {
        "type": "cross-train",
        "description": "{{min}} min cross-training",
        "global_description": (
            "Cross-training activities like cycling, swimming, or yoga complement your running "
            "by building strength, improving flexibility, and providing active recovery."
        ),
        "steps": [
            {"order": 1, "label": "Cross-Training", "duration": "{{min}} min", "effort": "moderate"},
        ],
    },
    "T": {
        "type": "run",
        "sub_type": "tempo",
        "description": "Tempo run - {{mi}} mi at threshold",
        "metric_description": "Tempo run - {{km}} km at threshold",
        "global_description": (
            "Tempo runs improve your lactate threshold and race pace. Run at a 'comfortably hard' "
            "effort where you can only speak a few words at a time."
        ),
        "steps": [
            {"order": 1, "label": "Warm-up", "duration": "10 min", "effort": "easy"},
            {"order": 2, "label": "Tempo", "distance": "{{km}}", "effort": "hard"},
            {"order": 3, "label": "Cool-down", "duration": "10 min", "effort": "easy"},
        ],
    },
    "F": {
        "type": "run",
        "sub_type": "interval",
        "description": "Fartlek - {{min}} min session",
        "global_description": (
            "Fartlek training combines fast and slow running in an unstructured format. Vary your "
            "pace based on how you feel, building speed and mental flexibility."
        ),
        "steps": [
            {"order": 1, "label": "Warm-up", "duration": "10 min", "effort": "easy"},
            {"order": 2, "label": "Fartlek", "duration": "{{min}} min", "effort": "hard"},
            {"order": 3, "label": "Cool-down", "duration": "10 min", "effort": "easy"},
        ],
    },
    "U": {
        "type": "run",
        "sub_type": "recovery",
        "description": "{{mi}} mi shake-out run",
        "metric_description": "{{km}} km shake-out run",
        "global_description": (
            "Recovery runs help flush out metabolic waste and promote blood flow to tired muscles. "
            "Keep the effort very easy and focus on relaxed form."
        ),
        "steps": [
            {"order": 1, "label": "Run", "distance": "{{km}}", "effort": "very easy"},
        ],
    },
}


def get_library_entry(base: str) -> Dict[str, Any] | None:
    """Return the skeleton for ``base`` or ``None`` when the code is unknown."""
    return WORKOUT_LIBRARY.get(base)


def is_interval_entry(entry: Dict[str, Any]) -> bool:
    return "variants" in entry


def entry_day_type(entry: Dict[str, Any]) -> str:
    """Calendar day type shown for a slot: the sub-type when present, else the type."""
    return entry.get("sub_type") or entry["type"]
