from __future__ import annotations

from typing import Dict, Optional

from .config import AUTO_PROFIT_RATE, ESTIMATED_KILLS_FULL_LOBBY, FULL_LOBBY_SLOTS
from .models import AdjustedPrizes, AdjustmentMode, PrizeRules


def organizer_profit(
    total_collected: float,
    mode: AdjustmentMode,
    fixed_profit: float,
    auto_profit_rate: float = AUTO_PROFIT_RATE,
) -> float:
    if mode == AdjustmentMode.AUTO:
        return total_collected * auto_profit_rate
    return fixed_profit


def target_profit(
    total_collected: float,
    mode: AdjustmentMode,
    fixed_profit: float,
    auto_profit_rate: float = AUTO_PROFIT_RATE,
) -> float:
    """Profit the organizer aims for; a fixed target never exceeds what was collected."""
    if mode == AdjustmentMode.FIXED:
        return min(total_collected, fixed_profit or 0.0)
    return total_collected * auto_profit_rate


def adjust_prizes(
    rules: PrizeRules,
    slots_sold: int,
    entry_fee: float,
    mode: AdjustmentMode,
    fixed_profit: float,
    *,
    reference_slots: int = FULL_LOBBY_SLOTS,
    auto_profit_rate: float = AUTO_PROFIT_RATE,
    estimated_kills: int = ESTIMATED_KILLS_FULL_LOBBY,
) -> Optional[AdjustedPrizes]:
    """Scale placement prizes to the funds actually collected for this lobby.

    Returns None when no slot was sold and the rules untouched at the full
    lobby size. Otherwise every placement prize is multiplied by
    ``prize_pool / base_pool`` where the base pool counts the placement prizes
    plus ``estimated_kills`` kill prizes. The kill prize itself is never scaled.
    """
    if slots_sold == 0:
        return None

    if slots_sold == reference_slots:
        return PrizeRules(placement_prizes=dict(rules.placement_prizes), kill_prize=rules.kill_prize)

    total_collected = slots_sold * entry_fee
    profit = organizer_profit(total_collected, mode, fixed_profit, auto_profit_rate)
    total_prize_pool = max(0.0, total_collected - profit)

    base_placement = sum(float(p) for p in rules.placement_prizes.values())
    base_kills = estimated_kills * rules.kill_prize
    base_total = base_placement + base_kills

    if base_total == 0:
        return PrizeRules(placement_prizes={}, kill_prize=0.0)

    factor = total_prize_pool / base_total
    scaled: Dict[int, float] = {rank: prize * factor for rank, prize in rules.placement_prizes.items()}
    return PrizeRules(placement_prizes=scaled, kill_prize=rules.kill_prize)


def effective_prizes(rules: PrizeRules, adjusted: Optional[AdjustedPrizes]) -> PrizeRules:
    return adjusted if adjusted is not None else rules
