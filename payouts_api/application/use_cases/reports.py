"""Use cases over persisted reports: listing, dashboard, maintenance."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from payouts.config import DEFAULT_REPORT_TIMEZONE
from payouts.errors import NotFoundError
from payouts.kpis import Dashboard, build_dashboard
from payouts.models import AnalysisRecord, ReportFilters
from payouts.tournament import normalize_tournament

from ..ports.report_store import ReportStorePort

logger = logging.getLogger(__name__)


@dataclass
class ReportsUseCase:
    report_store: ReportStorePort
    report_timezone: str = DEFAULT_REPORT_TIMEZONE

    def list_reports(self) -> List[AnalysisRecord]:
        """All reports, most recent first, with legacy tournament labels normalized."""
        return [normalize_tournament(r, self.report_timezone) for r in self.report_store.list()]

    def get_report(self, record_id: str) -> AnalysisRecord:
        record = self.report_store.get(record_id)
        if record is None:
            raise NotFoundError(f"Report {record_id} not found.")
        return normalize_tournament(record, self.report_timezone)

    def dashboard(self, filters: ReportFilters) -> Dashboard:
        return build_dashboard(self.list_reports(), filters)

    def rename(self, record_id: str, tournament: Optional[str]) -> AnalysisRecord:
        current = self.report_store.get(record_id)
        if current is None:
            raise NotFoundError(f"Report {record_id} not found.")
        updated = current.with_tournament(tournament or None)
        self.report_store.upsert(updated)
        return normalize_tournament(updated, self.report_timezone)

    def delete(self, record_id: str) -> None:
        self.report_store.remove(record_id)
        logger.info("Deleted report %s", record_id)

    def clear(self) -> int:
        records = self.report_store.list()
        for record in records:
            self.report_store.remove(record.id)
        logger.info("Cleared %d reports", len(records))
        return len(records)

    def backup(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.list_reports()]
