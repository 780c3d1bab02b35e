"""Board assembly: rank enriched slips best-first, cap, and shape the JSON payload."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from slip_publish.enrich import HITS_FIELD
from slip_publish.legs import DETAIL_COLUMN
from slip_publish.util.parsing import safe_float

BOARD_SCHEMA_VERSION = 1
SOURCE_FIELD = "source"
REQUIRED_LEG_FIELDS: tuple[str, ...] = (
    "id",
    "player",
    "stat",
    "direction",
    "line",
    HITS_FIELD,
    "leg_text",
)


def slip_score(row: Mapping[str, Any], score_fields: Sequence[str]) -> float | None:
    """First numeric value among ``score_fields``; None when no field parses."""
    for field_name in score_fields:
        value = safe_float(row.get(field_name))
        if value is not None:
            return value
    return None


def rank_rows(
    rows: Iterable[dict[str, Any]], *, score_fields: Sequence[str]
) -> list[dict[str, Any]]:
    """Sort best-first; ties keep input order and unscored rows go last."""
    scored = [(slip_score(row, score_fields), idx, row) for idx, row in enumerate(rows)]
    scored.sort(key=lambda item: (item[0] is None, -(item[0] or 0.0), item[1]))
    return [row for _, _, row in scored]


def cap_rows(rows: list[dict[str, Any]], top_n: int) -> list[dict[str, Any]]:
    if top_n <= 0:
        return list(rows)
    return rows[:top_n]


def combine_sources(
    per_source: Mapping[str, list[dict[str, Any]]],
    *,
    score_fields: Sequence[str],
    top_n: int,
) -> list[dict[str, Any]]:
    """Merge sources into one board tagged with each row's source name."""
    merged: list[dict[str, Any]] = []
    for name, rows in per_source.items():
        for row in rows:
            tagged = dict(row)
            tagged.setdefault(SOURCE_FIELD, name)
            merged.append(tagged)
    return cap_rows(rank_rows(merged, score_fields=score_fields), top_n)


def board_payload(
    source: str, rows: list[dict[str, Any]], *, generated_at_utc: str
) -> dict[str, Any]:
    return {
        "schema_version": BOARD_SCHEMA_VERSION,
        "source": source,
        "generated_at_utc": generated_at_utc,
        "count": len(rows),
        "slips": rows,
    }


def validate_board_payload(payload: Any) -> list[str]:
    """Return a list of problems; empty means the dashboard can read it."""
    if not isinstance(payload, dict):
        return ["payload must be an object"]
    errors: list[str] = []
    slips = payload.get("slips")
    if not isinstance(slips, list):
        return ["slips must be a list"]
    if payload.get("count") != len(slips):
        errors.append("count does not match slips length")
    for idx, slip in enumerate(slips):
        if not isinstance(slip, dict):
            errors.append(f"slips[{idx}] must be an object")
            continue
        legs = slip.get(DETAIL_COLUMN)
        if not isinstance(legs, list):
            errors.append(f"slips[{idx}].{DETAIL_COLUMN} must be a list")
            continue
        for leg_idx, leg in enumerate(legs):
            if not isinstance(leg, dict):
                errors.append(f"slips[{idx}].{DETAIL_COLUMN}[{leg_idx}] must be an object")
                continue
            missing = [name for name in REQUIRED_LEG_FIELDS if name not in leg]
            if missing:
                errors.append(
                    f"slips[{idx}].{DETAIL_COLUMN}[{leg_idx}] missing {','.join(missing)}"
                )
            hits = leg.get(HITS_FIELD)
            if hits is not None and (isinstance(hits, bool) or not isinstance(hits, int)):
                errors.append(f"slips[{idx}].{DETAIL_COLUMN}[{leg_idx}].{HITS_FIELD} not int")
    return errors
