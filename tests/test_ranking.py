from payouts.models import MatchResult, PrizeRules
from payouts.ranking import display_rank, rank_results


def _r(names, kills, placement) -> MatchResult:
    return MatchResult(player_names=names, kills=kills, placement=placement)


def _table() -> PrizeRules:
    return PrizeRules(placement_prizes={1: 25.0, 2: 15.0}, kill_prize=0.5)


def test_same_placement_is_broken_by_kills() -> None:
    ranked = rank_results([[_r(["A"], 5, 1), _r(["B"], 8, 1)]], _table())
    assert [r.match_result.kills for r in ranked] == [8, 5]
    assert [display_rank(i) for i in range(len(ranked))] == [1, 2]
    # Both teams reported placement 1, so both get the first-place prize.
    assert ranked[0].earnings.total == 29.0
    assert ranked[1].earnings.total == 27.5


def test_invalid_placements_are_dropped() -> None:
    ranked = rank_results([[_r(["A"], 1, None), _r(["B"], 2, 0), _r(["C"], 3, -1), _r(["D"], 0, 3)]], _table())
    assert [r.id for r in ranked] == ["D-0"]


def test_ids_follow_the_filtered_batch_order() -> None:
    batches = [
        [_r(["Ana"], 2, 2), _r(["X"], 9, None)],
        [_r(["Bia", "Caio"], 4, 1)],
    ]
    ranked = rank_results(batches, _table())
    assert [r.id for r in ranked] == ["BiaCaio-1", "Ana-0"]


def test_missing_names_and_kills() -> None:
    ranked = rank_results([[_r(["A"], None, 2), _r(None, 1, 2)]], _table())
    assert [r.id for r in ranked] == ["unknown-1", "A-0"]


def test_full_ties_keep_input_order() -> None:
    ranked = rank_results([[_r(["A"], 2, 3)], [_r(["B"], 2, 3)]], _table())
    assert [r.id for r in ranked] == ["A-0", "B-1"]


def test_no_batches() -> None:
    assert rank_results([], _table()) == []
