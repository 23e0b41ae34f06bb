"""Transform stored reports and dashboards to the frontend format."""

from datetime import date, datetime, timezone
from typing import Any, Dict, List
from zoneinfo import ZoneInfo

from payouts.config import DEFAULT_REPORT_TIMEZONE
from payouts.kpis import Dashboard
from payouts.models import AnalysisRecord
from payouts.ranking import display_rank
from payouts.render import render_results_text


def _report_day(created_at: str, tz_name: str) -> date:
    """Local calendar day of a report, matching its default tournament label."""
    try:
        dt = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    except ValueError:
        return date.today()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(ZoneInfo(tz_name)).date()


def transform_report_to_frontend(
    record: AnalysisRecord,
    include_text: bool = True,
    tz_name: str = DEFAULT_REPORT_TIMEZONE,
) -> Dict[str, Any]:
    """Serialize a report with display ranks and the prize table it was paid with.

    Args:
        record: Stored analysis record
        include_text: Add the shareable results message
        tz_name: Zone whose calendar day heads the results message

    Returns:
        The camelCase record plus ``results`` (entries with ``rank``) and
        ``prizeTable``
    """
    data = record.to_dict()
    prize_table = record.config.prize_table
    data["results"] = [
        {"rank": display_rank(idx), **entry.to_dict()} for idx, entry in enumerate(record.entries)
    ]
    data["prizeTable"] = prize_table.to_dict()
    if include_text:
        data["resultsText"] = render_results_text(
            record.entries, prize_table, today=_report_day(record.created_at, tz_name)
        )
    return data


def transform_reports_to_frontend(records: List[AnalysisRecord]) -> List[Dict[str, Any]]:
    return [transform_report_to_frontend(r, include_text=False) for r in records]


def transform_dashboard_to_frontend(dashboard: Dashboard) -> Dict[str, Any]:
    return {
        "kpis": dashboard.kpis.to_dict(),
        "leaderboards": dashboard.leaderboards.to_dict(),
        "rows": [row.to_dict() for row in dashboard.rows],
        "tournaments": dashboard.tournaments,
        "reportCount": len(dashboard.records),
    }
