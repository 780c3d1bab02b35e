"""Over/under hit counting against a line."""

from __future__ import annotations

from collections.abc import Sequence

OVER = "OVER"
UNDER = "UNDER"
DIRECTIONS = (OVER, UNDER)
DEFAULT_WINDOW = 5


def normalize_direction(direction: str | None) -> str | None:
    if direction is None:
        return None
    cleaned = direction.strip().upper()
    return cleaned or None


def recent_window(series: Sequence[float], window: int = DEFAULT_WINDOW) -> tuple[float, ...]:
    """Most recent ``window`` values; series are stored newest game first."""
    if window <= 0:
        return tuple(series)
    return tuple(series[:window])


def count_hits(series: Sequence[float], direction: str | None, line: float | None) -> int | None:
    """Count values strictly beyond ``line`` in ``direction``.

    Returns None when there is nothing to evaluate: an empty series, a missing
    line, or a direction other than OVER/UNDER. A push (value == line) is never
    a hit.
    """
    if not series or line is None:
        return None
    side = normalize_direction(direction)
    if side == OVER:
        return sum(1 for value in series if value > line)
    if side == UNDER:
        return sum(1 for value in series if value < line)
    return None
