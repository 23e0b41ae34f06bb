from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import LEADERBOARD_POOL, LEADERBOARD_SIZE
from .models import AnalysisRecord, ReportFilters
from .normalize import any_name_matches, name_matches, normalize_name, normalize_query
from .prizes import target_profit


@dataclass
class KpiSummary:
    total_collected: float = 0.0
    total_profit: float = 0.0
    total_prizes: float = 0.0
    matches: int = 0
    kills: int = 0
    avg_kills: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCollected": self.total_collected,
            "totalProfit": self.total_profit,
            "totalPrizes": self.total_prizes,
            "matches": self.matches,
            "kills": self.kills,
            "avgKills": self.avg_kills,
        }


@dataclass
class LeaderboardRow:
    name: str
    value: float


@dataclass
class Leaderboards:
    top_kills: List[LeaderboardRow] = field(default_factory=list)
    top_participations: List[LeaderboardRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topKills": [{"name": r.name, "kills": r.value} for r in self.top_kills],
            "topParticipations": [{"name": r.name, "games": int(r.value)} for r in self.top_participations],
        }


@dataclass
class ReportRow:
    id: str
    tournament: Optional[str]
    created_at: str
    collected: float
    target_profit: float
    real_profit: float
    prizes: float
    kills: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tournament": self.tournament,
            "createdAt": self.created_at,
            "collected": self.collected,
            "targetProfit": self.target_profit,
            "realProfit": self.real_profit,
            "prizes": self.prizes,
            "kills": self.kills,
        }


@dataclass
class Dashboard:
    records: List[AnalysisRecord]
    kpis: KpiSummary
    leaderboards: Leaderboards
    rows: List[ReportRow]
    tournaments: List[str]


def passes_date_filter(created_at: str, filters: ReportFilters) -> bool:
    day = created_at[:10]
    if filters.date_from and day < filters.date_from:
        return False
    if filters.date_to and day > filters.date_to:
        return False
    return True


def filter_records(records: List[AnalysisRecord], filters: ReportFilters) -> List[AnalysisRecord]:
    query = normalize_query(filters.player_name)
    out: List[AnalysisRecord] = []
    for rec in records:
        if not passes_date_filter(rec.created_at, filters):
            continue
        if filters.tournament and rec.tournament != filters.tournament:
            continue
        if query and not any(any_name_matches(e.match_result.player_names, query) for e in rec.entries):
            continue
        out.append(rec)
    return out


def collected(rec: AnalysisRecord) -> float:
    return rec.config.entry_fee * rec.config.slots_sold


def placement_payout_total(rec: AnalysisRecord) -> float:
    return sum(float(v) for v in rec.config.prize_table.placement_prizes.values())


def kill_payout_rate(rec: AnalysisRecord) -> float:
    return rec.config.prize_table.kill_prize


def match_kills(rec: AnalysisRecord) -> int:
    return sum(e.match_result.kills or 0 for e in rec.entries)


def attributed_kills(rec: AnalysisRecord, player_query: str) -> float:
    """Kills credited to a row; with a player query, only that player's split share counts."""
    if not player_query:
        return match_kills(rec)
    total = 0.0
    for e in rec.entries:
        players = e.match_result.player_names or []
        if not any(name_matches(n, player_query) for n in players):
            continue
        kills = e.match_result.kills or 0
        total += kills / len(players) if players else 0.0
    return total


def compute_kpis(records: List[AnalysisRecord]) -> KpiSummary:
    summary = KpiSummary()
    for rec in records:
        rec_collected = collected(rec)
        kills = match_kills(rec)
        prizes_paid = placement_payout_total(rec) + kills * kill_payout_rate(rec)

        summary.total_collected += rec_collected
        summary.total_prizes += prizes_paid
        summary.total_profit += max(0.0, rec_collected - prizes_paid)
        summary.matches += 1
        summary.kills += kills

    summary.avg_kills = summary.kills / summary.matches if summary.matches > 0 else 0.0
    return summary


def _top(
    totals: Dict[str, float],
    display: Dict[str, str],
    player_query: str,
    limit: int,
    pool: int,
) -> List[LeaderboardRow]:
    rows = [LeaderboardRow(name=display.get(key, key), value=value) for key, value in totals.items()]
    rows = sorted(rows, key=lambda r: -r.value)[:pool]
    if player_query:
        rows = [r for r in rows if name_matches(r.name, player_query)]
    return rows[:limit]


def build_leaderboards(
    records: List[AnalysisRecord],
    player_name: Optional[str] = None,
    limit: int = LEADERBOARD_SIZE,
    pool: int = LEADERBOARD_POOL,
) -> Leaderboards:
    kills_by_player: Dict[str, float] = {}
    games_by_player: Dict[str, float] = {}
    display_by_key: Dict[str, str] = {}

    for rec in records:
        for e in rec.entries:
            players = e.match_result.player_names or []
            if not players:
                continue
            per_player = (e.match_result.kills or 0) / len(players)
            for p in players:
                key = normalize_name(p)
                display_by_key.setdefault(key, p)
                kills_by_player[key] = kills_by_player.get(key, 0.0) + per_player
                games_by_player[key] = games_by_player.get(key, 0) + 1

    query = normalize_query(player_name)
    return Leaderboards(
        top_kills=_top(kills_by_player, display_by_key, query, limit, pool),
        top_participations=_top(games_by_player, display_by_key, query, limit, pool),
    )


def build_report_rows(records: List[AnalysisRecord], player_name: Optional[str] = None) -> List[ReportRow]:
    query = normalize_query(player_name)
    rows: List[ReportRow] = []
    for rec in records:
        rec_collected = collected(rec)
        kills = attributed_kills(rec, query)
        prizes = placement_payout_total(rec) + kills * kill_payout_rate(rec)
        rows.append(
            ReportRow(
                id=rec.id,
                tournament=rec.tournament,
                created_at=rec.created_at,
                collected=rec_collected,
                target_profit=target_profit(rec_collected, rec.config.adjustment_mode, rec.config.fixed_profit),
                real_profit=max(0.0, rec_collected - prizes),
                prizes=prizes,
                kills=kills,
            )
        )
    return rows


def tournament_options(records: List[AnalysisRecord]) -> List[str]:
    seen: Dict[str, None] = {}
    for rec in records:
        if rec.tournament:
            seen.setdefault(rec.tournament, None)
    return list(seen)


def build_dashboard(records: List[AnalysisRecord], filters: ReportFilters) -> Dashboard:
    """Filter the stored reports and compute every dashboard view over the result."""
    data = filter_records(records, filters)
    return Dashboard(
        records=data,
        kpis=compute_kpis(data),
        leaderboards=build_leaderboards(data, filters.player_name),
        rows=build_report_rows(data, filters.player_name),
        tournaments=tournament_options(records),
    )
