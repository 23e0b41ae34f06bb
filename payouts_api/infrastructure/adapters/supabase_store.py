"""Adapters persisting reports and settings in a hosted Postgres via PostgREST."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from payouts.config import SupabaseConfig
from payouts.errors import NotConfiguredError, StoreError
from payouts.models import AnalysisRecord, AppSettings

from ...application.ports.report_store import ReportStorePort
from ...application.ports.settings_store import SettingsStorePort

logger = logging.getLogger(__name__)

REPORTS_TABLE = "reports"
SETTINGS_TABLE = "settings"
SETTINGS_ID = "global"

# camelCase settings keys -> snake_case columns
_SETTINGS_COLUMNS = {
    "entryFee": "entry_fee",
    "adjustmentMode": "adjustment_mode",
    "fixedProfit": "fixed_profit",
    "prizeRules": "prize_rules",
}


@dataclass
class PostgrestClient:
    """Minimal row CRUD over the PostgREST endpoint of a Supabase project."""

    url: str
    key: str
    timeout_s: int = 15

    def __post_init__(self) -> None:
        if not self.url or not self.key:
            raise NotConfiguredError("SUPABASE_URL and SUPABASE_KEY must both be set.")
        self.session = requests.Session()
        self.session.headers.update(
            {
                "apikey": self.key,
                "authorization": f"Bearer {self.key}",
                "content-type": "application/json",
                "accept": "application/json",
            }
        )

    @classmethod
    def from_config(cls, config: SupabaseConfig) -> "PostgrestClient":
        return cls(url=config.url, key=config.key, timeout_s=config.timeout_s)

    def _table_url(self, table: str) -> str:
        return f"{self.url}/rest/v1/{table}"

    def _request(self, method: str, table: str, **kwargs: Any) -> requests.Response:
        try:
            resp = self.session.request(method, self._table_url(table), timeout=self.timeout_s, **kwargs)
        except requests.RequestException as exc:
            raise StoreError(f"Store unreachable: {exc}") from exc
        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = body.get("message") if isinstance(body, dict) else None
            raise StoreError(message or f"Store returned HTTP {resp.status_code} for {table}")
        return resp

    def select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        resp = self._request("GET", table, params=params)
        try:
            rows = resp.json()
        except ValueError as exc:
            raise StoreError(f"Invalid JSON from {table}") from exc
        if not isinstance(rows, list):
            raise StoreError(f"Unexpected response shape from {table}")
        return rows

    def upsert(self, table: str, row: Dict[str, Any], on_conflict: str = "id") -> None:
        self._request(
            "POST",
            table,
            params={"on_conflict": on_conflict},
            json=row,
            headers={"prefer": "resolution=merge-duplicates,return=minimal"},
        )

    def delete(self, table: str, params: Dict[str, str]) -> None:
        self._request("DELETE", table, params=params)


def record_to_row(record: AnalysisRecord) -> Dict[str, Any]:
    data = record.to_dict()
    created = datetime.fromisoformat(record.created_at.replace("Z", "+00:00"))
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return {
        "id": record.id,
        "created_at": created.astimezone(timezone.utc).isoformat(),
        "tournament": record.tournament,
        "mode": record.mode,
        "entries": data["entries"],
        "config": data["config"],
    }


def row_to_record(row: Dict[str, Any]) -> AnalysisRecord:
    return AnalysisRecord.from_dict(
        {
            "id": row.get("id"),
            "createdAt": row.get("created_at"),
            "tournament": row.get("tournament"),
            "mode": row.get("mode"),
            "entries": row.get("entries") or [],
            "config": row.get("config") or {},
        }
    )


def row_to_settings(row: Optional[Dict[str, Any]]) -> AppSettings:
    if not row:
        return AppSettings()
    return AppSettings.from_dict({key: row.get(col) for key, col in _SETTINGS_COLUMNS.items()})


class SupabaseReportStore(ReportStorePort):
    def __init__(self, client: PostgrestClient):
        self._client = client

    def upsert(self, record: AnalysisRecord) -> None:
        self._client.upsert(REPORTS_TABLE, record_to_row(record))
        logger.info("Upserted report %s", record.id)

    def remove(self, record_id: str) -> None:
        self._client.delete(REPORTS_TABLE, {"id": f"eq.{record_id}"})

    def list(self) -> List[AnalysisRecord]:
        rows = self._client.select(REPORTS_TABLE, {"select": "*", "order": "created_at.desc"})
        return [row_to_record(r) for r in rows]

    def get(self, record_id: str) -> Optional[AnalysisRecord]:
        rows = self._client.select(REPORTS_TABLE, {"select": "*", "id": f"eq.{record_id}"})
        return row_to_record(rows[0]) if rows else None


class SupabaseSettingsStore(SettingsStorePort):
    def __init__(self, client: PostgrestClient):
        self._client = client

    def get(self) -> AppSettings:
        rows = self._client.select(SETTINGS_TABLE, {"select": "*", "id": f"eq.{SETTINGS_ID}"})
        return row_to_settings(rows[0] if rows else None)

    def save(self, patch: Dict[str, Any]) -> None:
        row: Dict[str, Any] = {"id": SETTINGS_ID}
        for key, column in _SETTINGS_COLUMNS.items():
            if key in patch:
                row[column] = patch[key]
        self._client.upsert(SETTINGS_TABLE, row)
