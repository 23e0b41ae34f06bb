"""In-process report and settings stores."""

import copy
import threading
from typing import Any, Dict, List, Optional

from payouts.models import AnalysisRecord, AppSettings

from ...application.ports.report_store import ReportStorePort
from ...application.ports.settings_store import SettingsStorePort


class InMemoryReportStore(ReportStorePort):
    """Report store kept in process memory, used without a configured database."""

    def __init__(self, records: Optional[List[AnalysisRecord]] = None):
        self._lock = threading.Lock()
        self._rows: Dict[str, Dict[str, Any]] = {}
        for record in records or []:
            self.upsert(record)

    def upsert(self, record: AnalysisRecord) -> None:
        # Rows are kept serialized so reads never share state with callers.
        with self._lock:
            self._rows[record.id] = record.to_dict()

    def remove(self, record_id: str) -> None:
        with self._lock:
            self._rows.pop(record_id, None)

    def list(self) -> List[AnalysisRecord]:
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._rows.values()]
        rows.sort(key=lambda r: r.get("createdAt") or "", reverse=True)
        return [AnalysisRecord.from_dict(r) for r in rows]


class InMemorySettingsStore(SettingsStorePort):
    def __init__(self, initial: Optional[AppSettings] = None):
        self._lock = threading.Lock()
        self._row: Dict[str, Any] = (initial or AppSettings()).to_dict()

    def get(self) -> AppSettings:
        with self._lock:
            return AppSettings.from_dict(copy.deepcopy(self._row))

    def save(self, patch: Dict[str, Any]) -> None:
        with self._lock:
            for key in AppSettings.FIELDS:
                if key in patch:
                    self._row[key] = copy.deepcopy(patch[key])
