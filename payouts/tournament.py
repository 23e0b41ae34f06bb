from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from .config import DEFAULT_REPORT_TIMEZONE
from .models import AnalysisRecord

_LEGACY_LABEL_PATTERNS = (
    re.compile(r"^DIÁRIO-"),
    re.compile(r"^DATA \+ HORÁRIO\b"),
    re.compile(r"^\d{2}/\d{2}/\d{4}[, ]\s*\d{2}:\d{2}$"),
)


def _parse_iso(value: str) -> datetime:
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def default_tournament_label(created_at: str | datetime, tz_name: str = DEFAULT_REPORT_TIMEZONE) -> str:
    """Label a report by its local creation date and time, e.g. ``19/10/2026 21:05``."""
    dt = created_at if isinstance(created_at, datetime) else _parse_iso(created_at)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    local = dt.astimezone(ZoneInfo(tz_name))
    return local.strftime("%d/%m/%Y %H:%M")


def needs_normalization(label: Optional[str]) -> bool:
    if not label or not isinstance(label, str):
        return True
    return any(p.search(label) for p in _LEGACY_LABEL_PATTERNS)


def normalize_tournament(record: AnalysisRecord, tz_name: str = DEFAULT_REPORT_TIMEZONE) -> AnalysisRecord:
    if not needs_normalization(record.tournament):
        return record
    try:
        label = default_tournament_label(record.created_at, tz_name)
    except ValueError:
        return record
    return record.with_tournament(label)
