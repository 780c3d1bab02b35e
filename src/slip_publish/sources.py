"""Readers for Atlas recommendation outputs (CSV or JSON)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import polars as pl

from slip_publish.runtime_config import SourceConfig

SOURCE_OK = "ok"
SOURCE_EMPTY = "empty"
SOURCE_MISSING = "missing"
SOURCE_UNREADABLE = "unreadable"

JSON_ROW_KEYS: tuple[str, ...] = ("slips", "rows")


@dataclass(frozen=True)
class SourceLoad:
    name: str
    path: Path
    status: str
    filter_cold: bool = False
    rows: list[dict[str, Any]] = field(default_factory=list)
    error: str = ""

    @property
    def available(self) -> bool:
        return self.status in {SOURCE_OK, SOURCE_EMPTY}


def _rows_from_json(payload: Any, path: Path) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        for key in JSON_ROW_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
    if not isinstance(payload, list):
        raise ValueError(f"recommendation JSON must be a list of rows: {path}")
    return [dict(item) for item in payload if isinstance(item, dict)]


def read_recommendation_rows(path: Path) -> list[dict[str, Any]]:
    """Read rows from ``path``; CSV cells are kept as strings."""
    if path.suffix.lower() == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        return _rows_from_json(payload, path)
    frame = pl.read_csv(path, infer_schema=False, encoding="utf8-lossy")
    return frame.to_dicts()


def load_source(source: SourceConfig) -> SourceLoad:
    """Load one configured source, reporting missing/unreadable instead of raising."""
    path = source.path
    if not path.exists() or not path.is_file():
        return SourceLoad(
            name=source.name,
            path=path,
            status=SOURCE_MISSING,
            filter_cold=source.filter_cold,
        )
    try:
        rows = read_recommendation_rows(path)
    except (OSError, ValueError, pl.exceptions.PolarsError) as exc:
        return SourceLoad(
            name=source.name,
            path=path,
            status=SOURCE_UNREADABLE,
            filter_cold=source.filter_cold,
            error=str(exc),
        )
    return SourceLoad(
        name=source.name,
        path=path,
        status=SOURCE_OK if rows else SOURCE_EMPTY,
        filter_cold=source.filter_cold,
        rows=rows,
    )
