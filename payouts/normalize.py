from __future__ import annotations

import re
import unicodedata
from typing import Iterable, Optional

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Fold a player name for fuzzy matching: trim, lower-case, strip accents, collapse spaces."""
    folded = unicodedata.normalize("NFD", name.strip().lower())
    stripped = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return _WHITESPACE_RE.sub(" ", stripped)


def normalize_query(query: Optional[str]) -> str:
    return normalize_name(query) if query else ""


def name_matches(name: str, query: str) -> bool:
    """True when the normalized ``name`` contains the already-normalized ``query``."""
    return query in normalize_name(name)


def any_name_matches(names: Optional[Iterable[str]], query: str) -> bool:
    return any(name_matches(n, query) for n in (names or []))
