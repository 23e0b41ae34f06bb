"""Application ports (interfaces)."""

from .match_extraction import MatchExtractionPort
from .progress import ProgressCallbackPort
from .report_store import ReportStorePort
from .settings_store import SettingsStorePort

__all__ = [
    "MatchExtractionPort",
    "ProgressCallbackPort",
    "ReportStorePort",
    "SettingsStorePort",
]
