from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from .earnings import calculate_earnings
from .models import MatchResult, PrizeRules, RankedResult


def flatten_batches(batches: Iterable[Sequence[MatchResult]]) -> List[MatchResult]:
    """Concatenate per-screenshot batches, keeping batch order then result order."""
    return [result for batch in batches for result in batch]


def has_valid_placement(result: MatchResult) -> bool:
    return result.placement is not None and result.placement > 0


def result_id(result: MatchResult, index: int) -> str:
    # Not unique across reports; two teams with the same names only differ by index.
    names = "".join(result.player_names) if result.player_names is not None else "unknown"
    return f"{names}-{index}"


def _sort_key(ranked: RankedResult):
    placement = ranked.match_result.placement
    kills = ranked.match_result.kills or 0
    return (placement if placement is not None else math.inf, -kills)


def rank_results(batches: Iterable[Sequence[MatchResult]], prize_table: PrizeRules) -> List[RankedResult]:
    """Build the ordered ranking for one analysis run.

    Entries without a positive placement are dropped. The rest are ordered by
    placement ascending, ties by kills descending; the display rank is the
    1-based position, so two teams reporting the same placement both stay.
    """
    valid = [r for r in flatten_batches(batches) if has_valid_placement(r)]
    ranked = [
        RankedResult(id=result_id(r, idx), match_result=r, earnings=calculate_earnings(r, prize_table))
        for idx, r in enumerate(valid)
    ]
    return sorted(ranked, key=_sort_key)


def display_rank(index: int) -> int:
    return index + 1
