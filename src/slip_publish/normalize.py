"""Player-name keys used to join recommendation legs against the audit table."""

from __future__ import annotations

import re
import unicodedata

SUFFIXES = {"jr", "sr", "ii", "iii", "iv", "v"}


def player_key(name: str) -> str:
    """Case-fold, collapse internal whitespace and trim."""
    return " ".join(name.casefold().split())


def alpha_player_key(name: str) -> str:
    """Alphabetic-only key: accents folded, punctuation/digits/spaces removed."""
    lowered = name.casefold().strip()
    normalized = unicodedata.normalize("NFKD", lowered)
    ascii_only = "".join(ch for ch in normalized if ord(ch) < 128)
    return re.sub(r"[^a-z]+", "", ascii_only)


def player_keys(name: str) -> list[str]:
    """Lookup keys for a raw name, most specific first, without duplicates."""
    keys: list[str] = []
    for candidate in (player_key(name), alpha_player_key(name), _alpha_without_suffix(name)):
        if candidate and candidate not in keys:
            keys.append(candidate)
    return keys


def _alpha_without_suffix(name: str) -> str:
    words = [alpha_player_key(word) for word in re.split(r"[\s,]+", name)]
    words = [word for word in words if word]
    if len(words) > 1 and words[-1] in SUFFIXES:
        return "".join(words[:-1])
    return ""
