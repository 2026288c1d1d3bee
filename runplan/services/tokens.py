"""Workout token notation helpers.

A token is ``BASE`` or ``BASE/PARAM``: ``E4``, ``X40``, ``WR/5A``, ``R``.
"""
from __future__ import annotations

import re


REST_TOKEN = "R"

_COMPACT_TOKEN = re.compile(r"^([A-Za-z]+)(.*)$")


def split_token(token: str) -> tuple[str, str]:
    """
    Split a token into its base code and parameter.

    Example:
        >>> split_token("WR/5A")
        ('WR', '5A')
        >>> split_token("E4")
        ('E', '4')
        >>> split_token("R")
        ('R', '')
    """
    token = token.strip()
    if "/" in token:
        base, param = token.split("/", 1)
        return base, param

    match = _COMPACT_TOKEN.match(token)
    if not match:
        return token, ""
    return match.group(1), match.group(2)


def is_rest(token: str) -> bool:
    return split_token(token)[0] == REST_TOKEN
