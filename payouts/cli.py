from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .config import DEFAULT_ENTRY_FEE, DEFAULT_FIXED_PROFIT, FULL_LOBBY_SLOTS
from .models import AdjustmentMode, MatchResult, PrizeRules
from .money import format_brl, sum_values
from .prizes import adjust_prizes, effective_prizes
from .ranking import rank_results
from .render import render_prize_table, render_results_text


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write(path: Optional[str], text: str) -> None:
    if path:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        print(text)


def _load_batches(data: Any) -> List[List[MatchResult]]:
    """Accept either one flat list of results or a list of per-screenshot batches."""
    if not isinstance(data, list):
        raise SystemExit("input must be a JSON array of results or of result batches")
    if data and all(isinstance(item, list) for item in data):
        return [[MatchResult.from_dict(r) for r in batch if isinstance(r, dict)] for batch in data]
    return [[MatchResult.from_dict(r) for r in data if isinstance(r, dict)]]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tournament prize calculator")
    sub = parser.add_subparsers(dest="command", required=True)

    rank = sub.add_parser("rank", help="Rank match results and compute earnings")
    rank.add_argument("--input", required=True, help="JSON file with extracted match results")
    rank.add_argument("--rules", default=None, help="JSON file with prize rules (placementPrizes, killPrize)")
    rank.add_argument("--slots", type=int, default=FULL_LOBBY_SLOTS, help="Slots sold")
    rank.add_argument("--entry-fee", type=float, default=DEFAULT_ENTRY_FEE, help="Entry fee per slot")
    rank.add_argument(
        "--mode", choices=[m.value for m in AdjustmentMode], default=AdjustmentMode.AUTO.value
    )
    rank.add_argument("--fixed-profit", type=float, default=DEFAULT_FIXED_PROFIT)
    rank.add_argument("--output", default=None, help="Write output to this path")
    rank.add_argument("--output-format", choices=["json", "text"], default="json")

    total = sub.add_parser("sum", help="Sum monetary values found in a text file")
    total.add_argument("--input", required=True, help="Text file to scan")

    parser.add_argument("--debug", action="store_true", help="Print debug logs")
    return parser.parse_args(argv)


def _rank(args: argparse.Namespace) -> None:
    rules = PrizeRules.from_dict(_read_json(args.rules)) if args.rules else PrizeRules.default()
    adjusted = adjust_prizes(
        rules,
        slots_sold=args.slots,
        entry_fee=args.entry_fee,
        mode=AdjustmentMode(args.mode),
        fixed_profit=args.fixed_profit,
    )
    table = effective_prizes(rules, adjusted)
    ranked = rank_results(_load_batches(_read_json(args.input)), table)

    if args.output_format == "text":
        _write(args.output, render_prize_table(table) + "\n\n" + render_results_text(ranked, table))
        return

    out: Dict[str, Any] = {
        "adjustedPrizes": adjusted.to_dict() if adjusted is not None else None,
        "results": [dict(r.to_dict(), rank=idx + 1) for idx, r in enumerate(ranked)],
    }
    _write(args.output, json.dumps(out, indent=2, ensure_ascii=False))


def _sum(args: argparse.Namespace) -> None:
    with open(args.input, "r", encoding="utf-8") as f:
        summary = sum_values(f.read())
    for value in summary.values:
        print(format_brl(value))
    print(f"Total: {format_brl(summary.total)} ({len(summary.values)} values)")


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    if args.command == "rank":
        _rank(args)
    elif args.command == "sum":
        _sum(args)


if __name__ == "__main__":
    main()
