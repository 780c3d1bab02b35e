"""Leg parsing for encoded leg text and the row shapes Atlas emits."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from slip_publish.derived_stats import normalize_stat_code
from slip_publish.hit_rate import normalize_direction
from slip_publish.util.parsing import safe_float, safe_int

MAX_LEGS = 5
LEG_COLUMNS: tuple[str, ...] = tuple(f"leg_{idx}" for idx in range(1, MAX_LEGS + 1))
BLOB_COLUMNS: tuple[str, ...] = ("legs", "slip_key")
DETAIL_COLUMN = "legs_detail"
LEG_DELIMITER = "|"

_ID_TAG_RE = re.compile(r"\[\s*id\s*:\s*(\d+)\s*\]", re.IGNORECASE)
_LEG_RE = re.compile(
    r"""
    ^\s*(?P<player>.+?)\s+
    (?P<direction>over|under)\s+
    (?P<stat>[a-z0-9+]+)\s+
    (?P<line>[+-]?(?:\d+(?:\.\d*)?|\.\d+))
    (?:\s*\(\s*(?P<tier>[^()]+?)\s*\))?
    \s*$
    """,
    re.IGNORECASE | re.VERBOSE,
)


@dataclass(frozen=True)
class ParsedLeg:
    """One wager leg. Unparseable text leaves every structured field as None."""

    raw_text: str
    player: str | None = None
    direction: str | None = None
    stat: str | None = None
    line: float | None = None
    tier: str | None = None
    id: int | None = None

    @property
    def parsed(self) -> bool:
        return self.player is not None and self.stat is not None


def parse_leg_text(text: str) -> ParsedLeg:
    """Parse ``<player> <OVER|UNDER> <STAT> <line> [(<TIER>)] [[id:<n>]]``."""
    raw = text if isinstance(text, str) else ""
    leg_id: int | None = None
    id_match = _ID_TAG_RE.search(raw)
    if id_match:
        leg_id = int(id_match.group(1))
    body = _ID_TAG_RE.sub(" ", raw)

    match = _LEG_RE.match(body)
    if match is None:
        # The id tag stands on its own, so it survives an unparseable body.
        return ParsedLeg(raw_text=raw, id=leg_id)
    player = " ".join(match.group("player").split())
    tier = match.group("tier")
    return ParsedLeg(
        raw_text=raw,
        player=player or None,
        direction=normalize_direction(match.group("direction")),
        stat=normalize_stat_code(match.group("stat")),
        line=safe_float(match.group("line")),
        tier=" ".join(tier.split()).upper() if tier else None,
        id=leg_id,
    )


def _text(value: Any) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(str(value).split())
    return cleaned or None


def _display_text(leg: ParsedLeg) -> str:
    parts = [leg.player, leg.direction, leg.stat]
    if leg.line is not None:
        parts.append(f"{leg.line:g}")
    text = " ".join(part for part in parts if part)
    if leg.tier:
        text = f"{text} ({leg.tier})"
    if leg.id is not None:
        text = f"{text} [id:{leg.id}]"
    return text


def leg_from_detail(detail: Mapping[str, Any]) -> ParsedLeg:
    """Build a leg from a structured ``legs_detail`` object.

    Objects that lack player/stat/direction but carry leg text are parsed from
    that text instead. A structured object without a usable line takes the
    line from its leg text when that text parses.
    """
    raw_text = str(detail.get("leg_text") or detail.get("raw_text") or "").strip()
    player = _text(detail.get("player"))
    stat = normalize_stat_code(_text(detail.get("stat")))
    direction = normalize_direction(_text(detail.get("direction")))
    leg_id = safe_int(detail.get("id"))
    if not (player and stat and direction) and raw_text:
        parsed = parse_leg_text(raw_text)
        if parsed.id is None and leg_id is not None:
            return replace(parsed, id=leg_id)
        return parsed

    leg = ParsedLeg(
        raw_text=raw_text,
        player=player,
        direction=direction,
        stat=stat,
        line=safe_float(detail.get("line")),
        tier=(_text(detail.get("tier")) or "").upper() or None,
        id=leg_id,
    )
    if not raw_text:
        return replace(leg, raw_text=_display_text(leg))
    if leg.line is None:
        parsed = parse_leg_text(raw_text)
        if parsed.parsed:
            leg = replace(
                leg,
                line=parsed.line,
                tier=leg.tier or parsed.tier,
                id=parsed.id if leg.id is None else leg.id,
            )
    return leg


def legs_from_detail(row: Mapping[str, Any]) -> list[ParsedLeg]:
    value = row.get(DETAIL_COLUMN)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, list):
        return []
    return [leg_from_detail(item) for item in value if isinstance(item, Mapping)]


def legs_from_columns(row: Mapping[str, Any]) -> list[ParsedLeg]:
    legs: list[ParsedLeg] = []
    for column in LEG_COLUMNS:
        value = row.get(column)
        text = str(value).strip() if value is not None else ""
        if text:
            legs.append(parse_leg_text(text))
    return legs


def legs_from_blob(row: Mapping[str, Any]) -> list[ParsedLeg]:
    for column in BLOB_COLUMNS:
        blob = row.get(column)
        if not isinstance(blob, str) or not blob.strip():
            continue
        parts = [part.strip() for part in blob.split(LEG_DELIMITER)]
        return [parse_leg_text(part) for part in parts if part]
    return []


LegExtractor = Callable[[Mapping[str, Any]], list[ParsedLeg]]

LEG_EXTRACTORS: tuple[tuple[str, LegExtractor], ...] = (
    ("legs_detail", legs_from_detail),
    ("leg_columns", legs_from_columns),
    ("legs_blob", legs_from_blob),
)


def extract_legs_with_source(row: Mapping[str, Any]) -> tuple[str, list[ParsedLeg]]:
    """Run extractors in order and return the first non-empty result."""
    for name, extractor in LEG_EXTRACTORS:
        legs = extractor(row)
        if legs:
            return name, legs
    return "", []


def extract_legs(row: Mapping[str, Any]) -> list[ParsedLeg]:
    return extract_legs_with_source(row)[1]
