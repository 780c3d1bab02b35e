"""Slip enrichment: per-leg last-5 hit counts and the cold-leg slip filter."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from slip_publish.audit_index import AuditIndex
from slip_publish.derived_stats import stat_series
from slip_publish.hit_rate import DEFAULT_WINDOW, count_hits, recent_window
from slip_publish.legs import DETAIL_COLUMN, ParsedLeg, extract_legs

HITS_FIELD = "last5_hits"


@dataclass(frozen=True)
class EnrichedLeg:
    leg: ParsedLeg
    last5_hits: int | None = None

    def to_detail(self) -> dict[str, Any]:
        """Stable ``legs_detail`` shape read by the dashboard."""
        leg = self.leg
        return {
            "id": leg.id,
            "player": leg.player,
            "stat": leg.stat,
            "direction": leg.direction,
            "line": leg.line,
            "tier": leg.tier,
            HITS_FIELD: self.last5_hits,
            "leg_text": leg.raw_text,
        }


def leg_hits(leg: ParsedLeg, index: AuditIndex, *, window: int = DEFAULT_WINDOW) -> int | None:
    if not leg.parsed or leg.line is None:
        return None
    record = index.lookup(leg.player)
    if record is None:
        return None
    series = recent_window(stat_series(record, leg.stat), window)
    return count_hits(series, leg.direction, leg.line)


def enrich_leg(leg: ParsedLeg, index: AuditIndex, *, window: int = DEFAULT_WINDOW) -> EnrichedLeg:
    return EnrichedLeg(leg=leg, last5_hits=leg_hits(leg, index, window=window))


def keep_slip(legs: Sequence[EnrichedLeg]) -> bool:
    """False when any leg missed every game in its window (a known 0).

    Legs without data never count against a slip.
    """
    return not any(leg.last5_hits == 0 for leg in legs)


def enrich_slip(
    row: Mapping[str, Any], index: AuditIndex, *, window: int = DEFAULT_WINDOW
) -> tuple[dict[str, Any], bool]:
    """Return a copy of ``row`` with enriched ``legs_detail`` and the keep decision."""
    enriched = [enrich_leg(leg, index, window=window) for leg in extract_legs(row)]
    out = dict(row)
    out[DETAIL_COLUMN] = [leg.to_detail() for leg in enriched]
    return out, keep_slip(enriched)


def enrich_rows(
    rows: Iterable[Mapping[str, Any]],
    index: AuditIndex,
    *,
    apply_filter: bool,
    window: int = DEFAULT_WINDOW,
) -> list[dict[str, Any]]:
    """Enrich rows in input order, dropping cold slips when ``apply_filter``."""
    out: list[dict[str, Any]] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        enriched, keep = enrich_slip(row, index, window=window)
        if apply_filter and not keep:
            continue
        out.append(enriched)
    return out
