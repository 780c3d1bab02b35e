"""Player audit index: last-5 box-score series keyed by normalized player name."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import polars as pl

from slip_publish.normalize import player_key, player_keys
from slip_publish.util.parsing import parse_series

RESOLVED_PLAYER_COLUMN = "resolved_player"
BOARD_PLAYER_COLUMN = "board_player"
SERIES_COLUMNS: dict[str, str] = {
    "points": "last5_pts",
    "rebounds": "last5_reb",
    "assists": "last5_ast",
    "made3s": "last5_fg3m",
}

AUDIT_OK = "ok"
AUDIT_EMPTY = "empty"
AUDIT_MISSING = "missing"
AUDIT_UNREADABLE = "unreadable"


@dataclass(frozen=True)
class PlayerAuditRecord:
    """Recent-game series for one player, newest game first."""

    player: str
    points: tuple[float, ...] = ()
    rebounds: tuple[float, ...] = ()
    assists: tuple[float, ...] = ()
    made3s: tuple[float, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player,
            "points": list(self.points),
            "rebounds": list(self.rebounds),
            "assists": list(self.assists),
            "made3s": list(self.made3s),
        }


def _frozen_records() -> Mapping[str, PlayerAuditRecord]:
    return MappingProxyType({})


@dataclass(frozen=True)
class AuditIndex:
    """Read-only lookup from player-name keys to audit records.

    One record can be reachable under several keys (display vs resolved name,
    whitespace-collapsed vs alphabetic-only form).
    """

    records: Mapping[str, PlayerAuditRecord] = field(default_factory=_frozen_records)
    player_count: int = 0
    status: str = AUDIT_EMPTY
    source: str = ""

    def lookup(self, name: str | None) -> PlayerAuditRecord | None:
        if not name:
            return None
        for key in player_keys(name):
            record = self.records.get(key)
            if record is not None:
                return record
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __len__(self) -> int:
        return self.player_count

    def summary(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "source": self.source,
            "players": self.player_count,
        }


def _cell(row: Mapping[str, Any], column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


def _record_from_row(row: Mapping[str, Any], name: str) -> PlayerAuditRecord:
    series = {attr: parse_series(_cell(row, column)) for attr, column in SERIES_COLUMNS.items()}
    return PlayerAuditRecord(player=name, **series)


def build_audit_index(rows: Iterable[Mapping[str, Any]], *, source: str = "") -> AuditIndex:
    """Build an index from audit rows; the first row seen for a player wins."""
    records: dict[str, PlayerAuditRecord] = {}
    players = 0
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        resolved = _cell(row, RESOLVED_PLAYER_COLUMN)
        board = _cell(row, BOARD_PLAYER_COLUMN)
        name = resolved or board
        key = player_key(name)
        if not key or key in records:
            continue
        record = _record_from_row(row, name)
        records[key] = record
        players += 1
        for variant in (resolved, board):
            if not variant:
                continue
            for alias in player_keys(variant):
                records.setdefault(alias, record)

    return AuditIndex(
        records=MappingProxyType(records),
        player_count=players,
        status=AUDIT_OK if players else AUDIT_EMPTY,
        source=source,
    )


def load_audit_index(path: Path | None) -> AuditIndex:
    """Load the audit CSV; a missing or unreadable file yields an empty index."""
    if path is None or not path.exists() or not path.is_file():
        return AuditIndex(status=AUDIT_MISSING, source=str(path or ""))
    try:
        frame = pl.read_csv(path, infer_schema=False, encoding="utf8-lossy")
    except (OSError, pl.exceptions.PolarsError):
        return AuditIndex(status=AUDIT_UNREADABLE, source=str(path))
    return build_audit_index(frame.to_dicts(), source=str(path))
