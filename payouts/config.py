from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, List, Optional


DEFAULT_PLACEMENT_PRIZES: Dict[int, float] = {
    1: 25.0,
    2: 15.0,
    3: 10.0,
    4: 5.0,
}
DEFAULT_KILL_PRIZE = 0.50
DEFAULT_ENTRY_FEE = 5.0
DEFAULT_FIXED_PROFIT = 20.0

# Full lobby: base prize rules apply unscaled at this slot count.
FULL_LOBBY_SLOTS = 24
AUTO_PROFIT_RATE = 0.20
# Heuristic estimate of total kills in a full lobby, used to size the base pool.
ESTIMATED_KILLS_FULL_LOBBY = 60

ANALYSIS_CALL_DELAY_S = 1.3
OCR_CALL_DELAY_S = 0.5

LEADERBOARD_SIZE = 10
LEADERBOARD_POOL = 50

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

DEFAULT_REPORT_TIMEZONE = "America/Sao_Paulo"


@dataclass(frozen=True)
class GeminiConfig:
    api_key: str
    model: str
    timeout_s: int
    base_url: str = GEMINI_BASE_URL


@dataclass(frozen=True)
class SupabaseConfig:
    url: str
    key: str
    timeout_s: int = 15

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.key)


@dataclass(frozen=True)
class ServiceConfig:
    report_timezone: str
    settings_poll_s: float
    cors_origins: List[str]


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def gemini_config_from_env() -> GeminiConfig:
    return GeminiConfig(
        api_key=os.environ.get("GEMINI_API_KEY", "").strip(),
        model=os.environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        timeout_s=int(_env_float("GEMINI_TIMEOUT_S", 60)),
    )


def supabase_config_from_env() -> SupabaseConfig:
    return SupabaseConfig(
        url=os.environ.get("SUPABASE_URL", "").strip().rstrip("/"),
        key=os.environ.get("SUPABASE_KEY", "").strip(),
    )


def service_config_from_env(origins: Optional[str] = None) -> ServiceConfig:
    raw_origins = origins if origins is not None else os.environ.get("CORS_ORIGINS", "*")
    return ServiceConfig(
        report_timezone=os.environ.get("REPORT_TIMEZONE", DEFAULT_REPORT_TIMEZONE),
        settings_poll_s=_env_float("SETTINGS_POLL_S", 15.0),
        cors_origins=[o.strip() for o in raw_origins.split(",") if o.strip()],
    )
