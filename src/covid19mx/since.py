"""Resolve --since values into the snapshot day to compare against."""

from __future__ import annotations

import re
from datetime import date, timedelta

from .errors import SinceError

_KEYWORDS = {
    "yesterday": 1,
    "2 days ago": 2,
}
_OFFSET_RE = re.compile(r"-?(\d+)d?")


def days_back(value: str) -> int:
    """Return how many days back `value` points to.

    Accepts `yesterday`, `2 days ago`, and `N`, `-N`, `Nd`, `-Nd`.
    """
    text = value.strip().lower()
    if text in _KEYWORDS:
        return _KEYWORDS[text]
    match = _OFFSET_RE.fullmatch(text)
    if not match:
        raise SinceError(f"Valor de --since no reconocido: {value!r}")
    return int(match.group(1))


def resolve_since(value: str, today: date | None = None) -> date:
    today = today or date.today()
    days = days_back(value)
    try:
        return today - timedelta(days=days)
    except (OverflowError, ValueError) as exc:
        raise SinceError(f"--since fuera de rango: {value!r}") from exc
