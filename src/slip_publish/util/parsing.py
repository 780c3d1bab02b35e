"""Shared parsing helpers for tolerant numeric/string coercion."""

from __future__ import annotations

import math
from typing import Any

SERIES_DELIMITER = "|"


def safe_float(value: Any) -> float | None:
    """Parse number-like input into float, returning None when invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        parsed = float(value)
        return parsed if math.isfinite(parsed) else None
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            parsed = float(raw)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def safe_int(value: Any) -> int | None:
    """Parse number-like input into int, returning None when invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.startswith("+"):
            raw = raw[1:]
        try:
            return int(raw)
        except ValueError:
            return None
    return None


def parse_series(value: Any) -> tuple[float, ...]:
    """Parse a pipe-delimited numeric series such as ``"10|12|9"``.

    Order is preserved as written. Tokens that are not finite numbers are
    skipped so that one bad cell does not discard the rest of the history.
    Empty, blank or non-string input yields an empty tuple.
    """
    if not isinstance(value, str):
        return ()
    values: list[float] = []
    for token in value.split(SERIES_DELIMITER):
        parsed = safe_float(token)
        if parsed is None:
            continue
        values.append(parsed)
    return tuple(values)
