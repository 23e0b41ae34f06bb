"""Port (interface) for the persistent report store."""

from abc import ABC, abstractmethod
from typing import List, Optional

from payouts.models import AnalysisRecord


class ReportStorePort(ABC):
    """Row-oriented CRUD over persisted analysis reports."""

    @abstractmethod
    def upsert(self, record: AnalysisRecord) -> None:
        """Insert the record, or replace the stored one with the same id."""
        ...

    @abstractmethod
    def remove(self, record_id: str) -> None:
        """Delete one record. Removing an unknown id is not an error."""
        ...

    @abstractmethod
    def list(self) -> List[AnalysisRecord]:
        """Return every record, most recent first."""
        ...

    def get(self, record_id: str) -> Optional[AnalysisRecord]:
        return next((r for r in self.list() if r.id == record_id), None)
