import pytest

from payouts.models import AdjustmentMode, AnalysisRecord, AppSettings, PrizeRules


def _record_dict():
    return {
        "id": "1760900000000",
        "createdAt": "2026-10-19T20:00:00.000Z",
        "tournament": "Copa",
        "mode": "duo",
        "entries": [
            {
                "id": "AnaBia-0",
                "matchResult": {"playerNames": ["Ana", "Bia"], "kills": 6, "placement": 1},
                "earnings": {"placementPrize": 14.12, "killPrize": 3.0, "total": 99},
            }
        ],
        "config": {
            "entryFee": 5,
            "slotsSold": 12,
            "prizeRules": {"placementPrizes": {"1": 25, "2": 15}, "killPrize": 0.5},
            "adjustedPrizes": {"placementPrizes": {"1": 14.12}, "killPrize": 0.5},
            "adjustmentMode": "auto",
            "fixedProfit": 20,
        },
    }


def test_record_from_stored_json() -> None:
    record = AnalysisRecord.from_dict(_record_dict())
    assert record.config.prize_rules.placement_prizes == {1: 25.0, 2: 15.0}
    assert record.config.prize_table.placement_prizes == {1: 14.12}
    # Stored totals are not trusted; total is always placement + kills.
    assert record.entries[0].earnings.total == pytest.approx(17.12)
    assert record.to_dict()["config"]["prizeRules"]["placementPrizes"] == {"1": 25.0, "2": 15.0}


def test_record_without_adjusted_prizes_pays_base_rules() -> None:
    data = _record_dict()
    data["config"]["adjustedPrizes"] = None
    record = AnalysisRecord.from_dict(data)
    assert record.config.adjusted_prizes is None
    assert record.config.prize_table.placement_prizes[2] == 15.0


def test_unknown_mode_falls_back_to_auto() -> None:
    data = _record_dict()
    data["config"]["adjustmentMode"] = "weird"
    assert AnalysisRecord.from_dict(data).config.adjustment_mode == AdjustmentMode.AUTO


def test_settings_defaults_and_patches() -> None:
    stored = AppSettings.from_dict({"entryFee": 7, "adjustmentMode": None, "fixedProfit": None, "prizeRules": None})
    effective = stored.with_defaults()
    assert effective.entry_fee == 7.0
    assert effective.adjustment_mode == AdjustmentMode.AUTO
    assert effective.fixed_profit == 20.0
    assert effective.prize_rules == PrizeRules.default()

    patched = stored.merged({"adjustmentMode": "fixed", "fixedProfit": 30})
    assert patched.entry_fee == 7.0
    assert patched.adjustment_mode == AdjustmentMode.FIXED
    assert patched.fixed_profit == 30.0


def test_record_dict_round_trip() -> None:
    data = _record_dict()
    record = AnalysisRecord.from_dict(data)
    assert AnalysisRecord.from_dict(record.to_dict()) == record


def test_malformed_stored_prize_rules_read_as_empty() -> None:
    rules = PrizeRules.from_dict({"placementPrizes": [25, 15], "killPrize": 0.5})
    assert rules.placement_prizes == {}
    assert rules.kill_prize == 0.5
