from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import (
    DEFAULT_ENTRY_FEE,
    DEFAULT_FIXED_PROFIT,
    DEFAULT_KILL_PRIZE,
    DEFAULT_PLACEMENT_PRIZES,
)


class AdjustmentMode(str, Enum):
    """How much of the collected entry fees the organizer keeps."""

    AUTO = "auto"
    FIXED = "fixed"


def _safe_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _safe_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _mode(value: Any, default: AdjustmentMode = AdjustmentMode.AUTO) -> AdjustmentMode:
    try:
        return AdjustmentMode(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class MatchResult:
    player_names: Optional[List[str]]
    kills: Optional[int]
    placement: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playerNames": list(self.player_names) if self.player_names is not None else None,
            "kills": self.kills,
            "placement": self.placement,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchResult":
        names = data.get("playerNames")
        return cls(
            player_names=[str(n) for n in names] if isinstance(names, list) else None,
            kills=_optional_int(data.get("kills")),
            placement=_optional_int(data.get("placement")),
        )


@dataclass
class PrizeRules:
    placement_prizes: Dict[int, float]
    kill_prize: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "placementPrizes": {str(k): v for k, v in self.placement_prizes.items()},
            "killPrize": self.kill_prize,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrizeRules":
        raw = data.get("placementPrizes")
        if not isinstance(raw, dict):
            raw = {}
        prizes: Dict[int, float] = {}
        for rank, amount in raw.items():
            try:
                prizes[int(rank)] = _safe_float(amount)
            except (TypeError, ValueError):
                continue
        return cls(placement_prizes=prizes, kill_prize=_safe_float(data.get("killPrize")))

    @classmethod
    def default(cls) -> "PrizeRules":
        return cls(placement_prizes=dict(DEFAULT_PLACEMENT_PRIZES), kill_prize=DEFAULT_KILL_PRIZE)


# Derived from PrizeRules and the tournament configuration; same shape.
AdjustedPrizes = PrizeRules


@dataclass(frozen=True)
class Earnings:
    placement_prize: float
    kill_prize: float
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "placementPrize": self.placement_prize,
            "killPrize": self.kill_prize,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Earnings":
        placement_prize = _safe_float(data.get("placementPrize"))
        kill_prize = _safe_float(data.get("killPrize"))
        return cls(placement_prize=placement_prize, kill_prize=kill_prize, total=placement_prize + kill_prize)


@dataclass(frozen=True)
class RankedResult:
    id: str
    match_result: MatchResult
    earnings: Earnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "matchResult": self.match_result.to_dict(),
            "earnings": self.earnings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankedResult":
        return cls(
            id=str(data.get("id") or ""),
            match_result=MatchResult.from_dict(data.get("matchResult") or {}),
            earnings=Earnings.from_dict(data.get("earnings") or {}),
        )


@dataclass
class AnalysisConfigSnapshot:
    entry_fee: float
    slots_sold: int
    prize_rules: PrizeRules
    adjusted_prizes: Optional[AdjustedPrizes]
    adjustment_mode: AdjustmentMode
    fixed_profit: float

    @property
    def prize_table(self) -> PrizeRules:
        return self.adjusted_prizes if self.adjusted_prizes is not None else self.prize_rules

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entryFee": self.entry_fee,
            "slotsSold": self.slots_sold,
            "prizeRules": self.prize_rules.to_dict(),
            "adjustedPrizes": self.adjusted_prizes.to_dict() if self.adjusted_prizes is not None else None,
            "adjustmentMode": self.adjustment_mode.value,
            "fixedProfit": self.fixed_profit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisConfigSnapshot":
        adjusted = data.get("adjustedPrizes")
        return cls(
            entry_fee=_safe_float(data.get("entryFee")),
            slots_sold=_safe_int(data.get("slotsSold")),
            prize_rules=PrizeRules.from_dict(data.get("prizeRules") or {}),
            adjusted_prizes=PrizeRules.from_dict(adjusted) if isinstance(adjusted, dict) else None,
            adjustment_mode=_mode(data.get("adjustmentMode")),
            fixed_profit=_safe_float(data.get("fixedProfit")),
        )


@dataclass
class AnalysisRecord:
    id: str
    created_at: str  # ISO 8601
    tournament: Optional[str]
    mode: Optional[str]
    entries: List[RankedResult]
    config: AnalysisConfigSnapshot

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "createdAt": self.created_at,
            "tournament": self.tournament,
            "mode": self.mode,
            "entries": [e.to_dict() for e in self.entries],
            "config": self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisRecord":
        return cls(
            id=str(data.get("id") or ""),
            created_at=str(data.get("createdAt") or ""),
            tournament=data.get("tournament"),
            mode=data.get("mode"),
            entries=[RankedResult.from_dict(e) for e in (data.get("entries") or [])],
            config=AnalysisConfigSnapshot.from_dict(data.get("config") or {}),
        )

    def with_tournament(self, tournament: Optional[str]) -> "AnalysisRecord":
        return replace(self, tournament=tournament)


@dataclass
class AppSettings:
    """Globally shared configuration; any field may be unset in the store."""

    entry_fee: Optional[float] = None
    adjustment_mode: Optional[AdjustmentMode] = None
    fixed_profit: Optional[float] = None
    prize_rules: Optional[PrizeRules] = None

    FIELDS = ("entryFee", "adjustmentMode", "fixedProfit", "prizeRules")

    def with_defaults(self) -> "AppSettings":
        return AppSettings(
            entry_fee=self.entry_fee if self.entry_fee is not None else DEFAULT_ENTRY_FEE,
            adjustment_mode=self.adjustment_mode or AdjustmentMode.AUTO,
            fixed_profit=self.fixed_profit if self.fixed_profit is not None else DEFAULT_FIXED_PROFIT,
            prize_rules=self.prize_rules if self.prize_rules is not None else PrizeRules.default(),
        )

    def merged(self, patch: Dict[str, Any]) -> "AppSettings":
        """Apply a camelCase patch; only keys present in the patch change."""
        current = self.to_dict()
        for key in self.FIELDS:
            if key in patch:
                current[key] = patch[key]
        return AppSettings.from_dict(current)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entryFee": self.entry_fee,
            "adjustmentMode": self.adjustment_mode.value if self.adjustment_mode else None,
            "fixedProfit": self.fixed_profit,
            "prizeRules": self.prize_rules.to_dict() if self.prize_rules is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        mode = data.get("adjustmentMode")
        rules = data.get("prizeRules")
        entry_fee = data.get("entryFee")
        fixed_profit = data.get("fixedProfit")
        return cls(
            entry_fee=_safe_float(entry_fee) if entry_fee is not None else None,
            adjustment_mode=_mode(mode) if mode else None,
            fixed_profit=_safe_float(fixed_profit) if fixed_profit is not None else None,
            prize_rules=PrizeRules.from_dict(rules) if isinstance(rules, dict) else None,
        )


@dataclass
class ReportFilters:
    date_from: Optional[str] = None  # YYYY-MM-DD
    date_to: Optional[str] = None  # YYYY-MM-DD
    tournament: Optional[str] = None
    player_name: Optional[str] = None


@dataclass
class MoneySummary:
    values: List[float] = field(default_factory=list)
    total: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"values": list(self.values), "total": self.total}
