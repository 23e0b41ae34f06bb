from __future__ import annotations

from .models import Earnings, MatchResult, PrizeRules


def calculate_earnings(match_result: MatchResult, prize_table: PrizeRules) -> Earnings:
    placement = match_result.placement or 0
    kills = match_result.kills or 0

    placement_prize = prize_table.placement_prizes.get(placement, 0.0)
    kill_prize = kills * prize_table.kill_prize
    return Earnings(
        placement_prize=placement_prize,
        kill_prize=kill_prize,
        total=placement_prize + kill_prize,
    )
