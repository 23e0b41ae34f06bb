"""Application use cases."""

from .reports import ReportsUseCase
from .run_analysis import (
    RunAnalysisRequest,
    RunAnalysisResult,
    RunAnalysisUseCase,
)
from .settings import SettingsPoller, SettingsService

__all__ = [
    "ReportsUseCase",
    "RunAnalysisRequest",
    "RunAnalysisResult",
    "RunAnalysisUseCase",
    "SettingsPoller",
    "SettingsService",
]
