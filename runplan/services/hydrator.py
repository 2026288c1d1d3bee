"""Expand a workout token into concrete, unit-resolved steps."""
from __future__ import annotations

import logging
import math
import re
from typing import Any, Literal

from runplan.models.workout_library import (
    DISTANCE_BASES,
    TIME_BASES,
    get_library_entry,
    is_interval_entry,
)
from runplan.services.pattern_parser import parse_pattern


logger = logging.getLogger(__name__)

UnitSystem = Literal["metric", "imperial"]

KM_PER_MILE = 1.60934
MAIN_SET_LABEL = "Main Set"
TIMED_LABELS = ("Run", "Walk")

_LEADING_DECIMAL = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_MINUTES = re.compile(r"(\d+(?:\.\d+)?)\s*min")
_SECONDS = re.compile(r"(\d+(?:\.\d+)?)\s*sec")


def parse_decimal(value: str) -> float | None:
    """Read the leading decimal number of ``value`` the way ``parseFloat`` does; non-finite results count as unparseable."""
    match = _LEADING_DECIMAL.match(value or "")
    if not match:
        return None
    number = float(match.group(1))
    if not math.isfinite(number):
        return None
    return number


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _as_number(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


def duration_seconds(duration: str | None) -> float:
    """Convert a human duration (``"5 min"``, ``"90 sec"``) into seconds; unknown formats count as zero."""
    if not duration:
        return 0.0
    minutes = _MINUTES.search(duration)
    if minutes:
        return float(minutes.group(1)) * 60
    seconds = _SECONDS.search(duration)
    if seconds:
        return float(seconds.group(1))
    return 0.0


def _substitute(text: str, bindings: dict[str, str]) -> str:
    for placeholder, replacement in bindings.items():
        text = text.replace(placeholder, replacement)
    return text


def _hydrate_step(template: dict[str, Any], miles: float, km: float, bindings: dict[str, str]) -> dict[str, Any]:
    step = dict(template)
    for field in ("label", "description", "duration", "notes"):
        if isinstance(step.get(field), str):
            step[field] = _substitute(step[field], bindings)

    distance = step.get("distance")
    if isinstance(distance, str):
        if "{{km}}" in distance:
            step["distance"] = int(_round_half_up(km * 1000))
        elif "{{mi}}" in distance:
            step["distance"] = int(_round_half_up(miles * KM_PER_MILE * 1000))
        else:
            parsed = parse_decimal(distance)
            if parsed is None:
                step.pop("distance")
            else:
                step["distance"] = _as_number(parsed)
    return step


def _description_for(entry: dict[str, Any], units: str) -> str:
    if units == "metric" and entry.get("metric_description"):
        return entry["metric_description"]
    return entry["description"]


def _hydrate_interval(entry: dict[str, Any], param: str) -> dict[str, Any]:
    key = param.upper()
    variant = entry["variants"].get(key)
    if variant is None:
        logger.debug("Unknown interval variant '%s'", key)
        return {"variant": key}

    warmup = entry.get("warmup")
    cooldown = entry.get("cooldown")

    executable: list[dict[str, Any]] = []
    if warmup:
        executable.append(dict(warmup))
    executable.extend(parse_pattern(variant["pattern"], variant.get("repeats")))
    if cooldown:
        executable.append(dict(cooldown))
    for order, step in enumerate(executable, start=1):
        step["order"] = order

    total_seconds = sum(
        duration_seconds(step.get("duration"))
        for step in executable
        if step.get("label") in TIMED_LABELS
    )
    main_minutes = int(_round_half_up(total_seconds / 60))

    main_set: dict[str, Any] = {
        "label": MAIN_SET_LABEL,
        "duration": f"{main_minutes} min",
        "effort": "moderate",
    }
    if variant.get("summary"):
        main_set["notes"] = variant["summary"]

    display: list[dict[str, Any]] = []
    if warmup:
        display.append(dict(warmup))
    display.append(main_set)
    if cooldown:
        display.append(dict(cooldown))
    for order, step in enumerate(display, start=1):
        step["order"] = order

    hydrated: dict[str, Any] = {
        "variant": key,
        "minutes": main_minutes,
        "description": entry["description"],
        "steps": executable,
        "display_steps": display,
    }
    if variant.get("summary"):
        hydrated["summary"] = variant["summary"]
    if entry.get("global_description"):
        hydrated["global_description"] = entry["global_description"]
    return hydrated


def _hydrate_templated(
    entry: dict[str, Any],
    units: str,
    miles: float,
    km: float,
    minutes: float,
) -> dict[str, Any]:
    bindings = {
        "{{mi}}": _format_number(miles),
        "{{km}}": _format_number(km),
        "{{min}}": _format_number(minutes),
    }
    steps = [_hydrate_step(template, miles, km, bindings) for template in entry.get("steps", [])]

    hydrated: dict[str, Any] = {
        "description": _substitute(_description_for(entry, units), bindings),
        "steps": steps,
        "display_steps": steps,
    }
    if entry.get("global_description"):
        hydrated["global_description"] = _substitute(entry["global_description"], bindings)
    return hydrated


def hydrate(base: str, param: str, units: UnitSystem | str = "imperial") -> dict[str, Any]:
    """
    Produce the hydrated workout for a token.

    Malformed parameters degrade to an empty (or partial) hydration rather than
    raising; callers fall back to the skeleton defaults in that case.

    Args:
        base: Token base code (``E``, ``WR``...)
        param: Token parameter (miles, minutes, or interval variant key)
        units: ``"metric"`` or ``"imperial"``

    Returns:
        Dict with any of ``variant``, ``distance_mi``, ``distance_km``,
        ``minutes``, ``value``, ``description``, ``summary``,
        ``global_description``, ``steps`` and ``display_steps``.

    Example:
        >>> hydrate("E", "4", "imperial")["distance_km"]
        6.4
        >>> hydrate("ZZ", "5", "metric")
        {}
    """
    entry = get_library_entry(base)
    if entry is None:
        return {}

    if is_interval_entry(entry):
        return _hydrate_interval(entry, param)

    number = parse_decimal(param)

    if base in DISTANCE_BASES:
        # Meters must stay finite after conversion.
        if number is None or not math.isfinite(number * KM_PER_MILE * 1000):
            logger.debug("Unusable distance parameter '%s' for base %s", param, base)
            return {}
        km = _round_half_up(number * KM_PER_MILE, 1)
        hydrated = _hydrate_templated(entry, units, miles=number, km=km, minutes=0)
        return {"distance_mi": _as_number(number), "distance_km": _as_number(km), **hydrated}

    if base in TIME_BASES:
        if number is None:
            return {}
        hydrated = _hydrate_templated(entry, units, miles=0, km=0, minutes=number)
        return {"minutes": _as_number(number), **hydrated}

    if number is None:
        return {}
    return {"value": _as_number(number)}
