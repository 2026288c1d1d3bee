"""Parser for the compact interval notation used by walk/run variants.

Grammar (informal)::

    pattern  := group | sequence
    group    := "(" sequence ")" "x" INT
    sequence := segment ("/" segment)*
    segment  := DURATION ACTION [extra ...]

``DURATION`` is a number with an optional ``s`` (seconds) or ``m`` (minutes)
suffix, e.g. ``90s`` or ``2.5m``. Malformed segments are dropped, never raised.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Any


_GROUP_PATTERN = re.compile(r"^\((.+)\)\s*x\s*(\d+)$", re.IGNORECASE)


class Action(str, Enum):
    """Closed vocabulary of interval actions; anything unknown is treated as recovery."""

    RUN = "run"
    OTHER = "other"

    @classmethod
    def from_token(cls, token: str) -> "Action":
        if token.lower() == cls.RUN.value:
            return cls.RUN
        return cls.OTHER

    @property
    def effort(self) -> str:
        if self is Action.RUN:
            return "moderate"
        return "easy"


def _normalize_duration(token: str) -> str:
    if token.endswith("s"):
        return f"{token[:-1]} sec"
    if token.endswith("m"):
        return f"{token[:-1]} min"
    return token


def _parse_segment(segment: str) -> dict[str, Any] | None:
    parts = segment.split()
    if len(parts) < 2:
        return None

    duration_token, action_token = parts[0], parts[1].lower()
    return {
        "label": action_token.title(),
        "duration": _normalize_duration(duration_token),
        "effort": Action.from_token(action_token).effort,
    }


def parse_pattern(pattern: str, explicit_repeats: int | None = None) -> list[dict[str, Any]]:
    """
    Expand an interval pattern into an ordered list of steps.

    Args:
        pattern: Compact notation such as ``"90s run / 90s walk"`` or
            ``"(5m run/3m walk) x3"``
        explicit_repeats: Number of times to repeat the sequence. Ignored when
            the pattern carries its own ``(...) xN`` group suffix.

    Returns:
        Steps with ``label``, ``duration`` and ``effort`` keys. The caller is
        responsible for numbering them.

    Example:
        >>> parse_pattern("90s run/90s walk", 1)
        [{'label': 'Run', 'duration': '90 sec', 'effort': 'moderate'}, {'label': 'Walk', 'duration': '90 sec', 'effort': 'easy'}]
    """
    body = pattern.strip()
    repeats = explicit_repeats if explicit_repeats is not None else 1

    group = _GROUP_PATTERN.match(body)
    if group:
        body = group.group(1)
        repeats = int(group.group(2))

    single_pass = [
        step
        for step in (_parse_segment(segment) for segment in body.split("/"))
        if step is not None
    ]

    steps: list[dict[str, Any]] = []
    for _ in range(repeats):
        steps.extend(dict(step) for step in single_pass)
    return steps
