"""REST API routes for stored reports and the dashboard."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from payouts.models import ReportFilters

from ..transformers.report_transformer import (
    transform_dashboard_to_frontend,
    transform_report_to_frontend,
    transform_reports_to_frontend,
)
from ...application.use_cases.reports import ReportsUseCase
from ...dependencies import get_reports_use_case

router = APIRouter(prefix="/api", tags=["reports"])


class RenameRequest(BaseModel):
    tournament: Optional[str] = Field(default=None, description="New label; empty resets to the default")


@router.get("/reports")
def list_reports(use_case: ReportsUseCase = Depends(get_reports_use_case)):
    """All reports, most recent first."""
    return transform_reports_to_frontend(use_case.list_reports())


# Declared before /reports/{record_id} so "backup" is not taken for an id.
@router.get("/reports/backup")
def backup_reports(use_case: ReportsUseCase = Depends(get_reports_use_case)):
    """Every report as stored, for download as a JSON backup."""
    return use_case.backup()


@router.get("/reports/{record_id}")
def get_report(record_id: str, use_case: ReportsUseCase = Depends(get_reports_use_case)):
    return transform_report_to_frontend(use_case.get_report(record_id), tz_name=use_case.report_timezone)


@router.patch("/reports/{record_id}")
def rename_report(
    record_id: str,
    request: RenameRequest,
    use_case: ReportsUseCase = Depends(get_reports_use_case),
):
    """Change the tournament label of one report."""
    return transform_report_to_frontend(
        use_case.rename(record_id, request.tournament), tz_name=use_case.report_timezone
    )


@router.delete("/reports/{record_id}")
def delete_report(record_id: str, use_case: ReportsUseCase = Depends(get_reports_use_case)):
    use_case.delete(record_id)
    return {"deleted": 1}


@router.delete("/reports")
def clear_reports(use_case: ReportsUseCase = Depends(get_reports_use_case)):
    return {"deleted": use_case.clear()}


@router.get("/dashboard")
def get_dashboard(
    date_from: Optional[str] = Query(None, alias="dateFrom", description="YYYY-MM-DD, inclusive"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="YYYY-MM-DD, inclusive"),
    tournament: Optional[str] = Query(None),
    player_name: Optional[str] = Query(None, alias="playerName"),
    use_case: ReportsUseCase = Depends(get_reports_use_case),
):
    """KPIs, leaderboards and per-report rows over the filtered reports.

    Args:
        date_from: Earliest creation day
        date_to: Latest creation day
        tournament: Exact tournament label
        player_name: Accent- and case-insensitive substring of a player name

    Returns:
        Dashboard in frontend format
    """
    filters = ReportFilters(
        date_from=date_from or None,
        date_to=date_to or None,
        tournament=tournament or None,
        player_name=player_name or None,
    )
    return transform_dashboard_to_frontend(use_case.dashboard(filters))
