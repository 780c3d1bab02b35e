"""Stat-code normalization and derived (combination) series evaluation."""

from __future__ import annotations

from slip_publish.audit_index import PlayerAuditRecord

BASE_STATS: dict[str, str] = {
    "PTS": "points",
    "REB": "rebounds",
    "AST": "assists",
    "FG3M": "made3s",
}

COMBO_STATS: dict[str, tuple[str, ...]] = {
    "PR": ("PTS", "REB"),
    "PA": ("PTS", "AST"),
    "RA": ("REB", "AST"),
    "PRA": ("PTS", "REB", "AST"),
}

BASE_ALIASES: dict[str, str] = {
    "P": "PTS",
    "PT": "PTS",
    "PTS": "PTS",
    "POINTS": "PTS",
    "R": "REB",
    "REB": "REB",
    "REBS": "REB",
    "REBOUNDS": "REB",
    "A": "AST",
    "AST": "AST",
    "ASTS": "AST",
    "ASSISTS": "AST",
    "FG3M": "FG3M",
    "FG3": "FG3M",
    "3PM": "FG3M",
    "3PT": "FG3M",
    "3PTM": "FG3M",
    "THREES": "FG3M",
}

_COMBO_LETTER = {"PTS": "P", "REB": "R", "AST": "A"}


def normalize_stat_code(stat: str | None) -> str | None:
    """Map a raw stat label to PTS/REB/AST/FG3M/PR/PA/RA/PRA.

    Unknown labels come back uppercased so they can be carried through.
    """
    if stat is None:
        return None
    code = "".join(stat.split()).upper()
    if not code:
        return None
    if code in COMBO_STATS:
        return code
    if "+" in code:
        return _normalize_combo(code)
    return BASE_ALIASES.get(code, code)


def _normalize_combo(code: str) -> str:
    letters: list[str] = []
    for part in code.split("+"):
        base = BASE_ALIASES.get(part)
        letter = _COMBO_LETTER.get(base or "")
        if letter is None or letter in letters:
            return code
        letters.append(letter)
    ordered = "".join(letter for letter in "PRA" if letter in letters)
    return ordered if ordered in COMBO_STATS else code


def base_series(record: PlayerAuditRecord, base: str) -> tuple[float, ...]:
    attr = BASE_STATS.get(base)
    if attr is None:
        return ()
    return getattr(record, attr)


def stat_series(record: PlayerAuditRecord | None, stat: str | None) -> tuple[float, ...]:
    """Series for ``stat`` from the player's audit record.

    Combination stats are summed index by index over the indices every
    contributing series has; if any contributing series is empty the result is
    empty. Unknown stats and a missing record also yield an empty tuple.
    """
    if record is None:
        return ()
    code = normalize_stat_code(stat)
    if code is None:
        return ()
    if code in BASE_STATS:
        return base_series(record, code)
    parts = COMBO_STATS.get(code)
    if parts is None:
        return ()
    columns = [base_series(record, part) for part in parts]
    if any(not column for column in columns):
        return ()
    return tuple(sum(values) for values in zip(*columns, strict=False))
