from payouts.models import AdjustmentMode, AnalysisConfigSnapshot, AnalysisRecord, PrizeRules
from payouts.tournament import default_tournament_label
from payouts_api.api.transformers.report_transformer import transform_report_to_frontend


def _record(created_at: str) -> AnalysisRecord:
    return AnalysisRecord(
        id="1",
        created_at=created_at,
        tournament=None,
        mode=None,
        entries=[],
        config=AnalysisConfigSnapshot(
            entry_fee=5.0,
            slots_sold=24,
            prize_rules=PrizeRules.default(),
            adjusted_prizes=None,
            adjustment_mode=AdjustmentMode.AUTO,
            fixed_profit=20.0,
        ),
    )


def test_results_text_uses_the_local_day() -> None:
    # 22:00 on the 18th in Sao Paulo is already the 19th in UTC.
    created_at = "2026-10-19T01:00:00.000Z"
    data = transform_report_to_frontend(_record(created_at), tz_name="America/Sao_Paulo")
    assert default_tournament_label(created_at, "America/Sao_Paulo").startswith("18/10/2026")
    assert "RESULTADO FINAL - 18/10" in data["resultsText"]


def test_results_text_follows_the_configured_zone() -> None:
    data = transform_report_to_frontend(_record("2026-10-19T01:00:00.000Z"), tz_name="UTC")
    assert "RESULTADO FINAL - 19/10" in data["resultsText"]


def test_list_shape_omits_the_text() -> None:
    data = transform_report_to_frontend(_record("2026-10-19T01:00:00.000Z"), include_text=False)
    assert "resultsText" not in data
    assert data["results"] == []
