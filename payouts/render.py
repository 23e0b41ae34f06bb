from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from .models import PrizeRules, RankedResult
from .money import format_brl

_RANK_MARKERS: Dict[int, str] = {
    1: "🥇",
    2: "🥈",
    3: "🥉",
    4: "4️⃣",
    5: "5️⃣",
    6: "6️⃣",
    7: "7️⃣",
    8: "8️⃣",
    9: "9️⃣",
    10: "🔟",
}


def rank_marker(rank: int) -> str:
    return _RANK_MARKERS.get(rank, f"#️⃣ {rank}º LUGAR")


def render_results_text(
    results: List[RankedResult],
    prize_table: PrizeRules,
    today: Optional[date] = None,
) -> str:
    """Shareable final-results message for a ranked run."""
    today = today or date.today()
    lines: List[str] = [f"🏆 *RESULTADO FINAL - {today.strftime('%d/%m')}*", ""]

    for idx, result in enumerate(results):
        names = " + ".join(result.match_result.player_names or []) or "N/A"
        kills = result.match_result.kills or 0
        earnings = result.earnings

        lines.append(f"{rank_marker(idx + 1)} *{names}*")
        lines.append(
            f"☠️ Kills: {kills} × {format_brl(prize_table.kill_prize)} = {format_brl(earnings.kill_prize)}"
        )
        if earnings.placement_prize > 0:
            lines.append(f"💵 Posição: {format_brl(earnings.placement_prize)}")
        lines.append(f"💰 *Total: {format_brl(earnings.total)}*")
        lines.append("")

    lines.append("🔥 *Parabéns aos vencedores!*")
    return "\n".join(lines)


def render_prize_table(prize_table: PrizeRules) -> str:
    lines = ["Prize table"]
    for rank in sorted(prize_table.placement_prizes):
        lines.append(f"  #{rank}: {format_brl(prize_table.placement_prizes[rank])}")
    lines.append(f"  per kill: {format_brl(prize_table.kill_prize)}")
    return "\n".join(lines)
