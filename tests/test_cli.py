import json
from datetime import date

from payouts.cli import main
from payouts.models import MatchResult, PrizeRules
from payouts.ranking import rank_results
from payouts.render import rank_marker, render_results_text


def test_rank_command_writes_json(tmp_path) -> None:
    results = tmp_path / "results.json"
    results.write_text(json.dumps([
        [{"playerNames": ["Ana"], "kills": 5, "placement": 1}],
        [{"playerNames": ["Bia"], "kills": 8, "placement": 1}, {"playerNames": ["X"], "kills": 1, "placement": None}],
    ]))
    out = tmp_path / "out.json"

    main(["rank", "--input", str(results), "--slots", "12", "--output", str(out)])

    data = json.loads(out.read_text())
    assert [r["id"] for r in data["results"]] == ["Bia-1", "Ana-0"]
    assert [r["rank"] for r in data["results"]] == [1, 2]
    assert data["adjustedPrizes"]["killPrize"] == 0.5


def test_sum_command(tmp_path, capsys) -> None:
    text = tmp_path / "pix.txt"
    text.write_text("6,50\n0,50\n153.364.624-46\n0,50", encoding="utf-8")
    main(["sum", "--input", str(text)])
    assert "Total: R$ 7,50 (3 values)" in capsys.readouterr().out


def test_results_text() -> None:
    table = PrizeRules(placement_prizes={1: 25.0}, kill_prize=0.5)
    ranked = rank_results([[MatchResult(["Ana", "Bia"], kills=4, placement=1), MatchResult(["Caio"], kills=1, placement=3)]], table)
    text = render_results_text(ranked, table, today=date(2026, 10, 19))

    assert text.startswith("🏆 *RESULTADO FINAL - 19/10*")
    assert "🥇 *Ana + Bia*" in text
    assert "☠️ Kills: 4 × R$ 0,50 = R$ 2,00" in text
    assert "💵 Posição: R$ 25,00" in text
    assert "💰 *Total: R$ 27,00*" in text
    # No placement prize line for an unpaid position.
    assert text.count("💵") == 1
    assert rank_marker(11) == "#️⃣ 11º LUGAR"
