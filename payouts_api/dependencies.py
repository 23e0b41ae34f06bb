"""Process-wide adapter and use case wiring for the API layer.

Adapters and services are cached so that all requests share one store, one settings
cache and one inference client (and with it one request window). Tests swap
them out through ``app.dependency_overrides``.
"""

import logging
from functools import lru_cache

from fastapi import Depends

from payouts.config import ServiceConfig, service_config_from_env, supabase_config_from_env

from .application.ports.match_extraction import MatchExtractionPort
from .application.ports.report_store import ReportStorePort
from .application.ports.settings_store import SettingsStorePort
from .application.use_cases.reports import ReportsUseCase
from .application.use_cases.run_analysis import RunAnalysisUseCase
from .application.use_cases.settings import SettingsService
from .infrastructure.adapters.gemini_extraction_adapter import GeminiExtractionAdapter
from .infrastructure.adapters.memory_store import InMemoryReportStore, InMemorySettingsStore
from .infrastructure.adapters.supabase_store import (
    PostgrestClient,
    SupabaseReportStore,
    SupabaseSettingsStore,
)

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_service_config() -> ServiceConfig:
    return service_config_from_env()


@lru_cache(maxsize=1)
def _postgrest_client() -> PostgrestClient:
    return PostgrestClient.from_config(supabase_config_from_env())


@lru_cache(maxsize=1)
def get_report_store() -> ReportStorePort:
    if supabase_config_from_env().enabled:
        return SupabaseReportStore(_postgrest_client())
    logger.warning("SUPABASE_URL/SUPABASE_KEY not set; reports are kept in memory only")
    return InMemoryReportStore()


@lru_cache(maxsize=1)
def get_settings_store() -> SettingsStorePort:
    if supabase_config_from_env().enabled:
        return SupabaseSettingsStore(_postgrest_client())
    return InMemorySettingsStore()


@lru_cache(maxsize=1)
def get_settings_service() -> SettingsService:
    return SettingsService(get_settings_store())


@lru_cache(maxsize=1)
def get_extraction() -> MatchExtractionPort:
    return GeminiExtractionAdapter()


def get_reports_use_case(
    report_store: ReportStorePort = Depends(get_report_store),
    config: ServiceConfig = Depends(get_service_config),
) -> ReportsUseCase:
    return ReportsUseCase(report_store=report_store, report_timezone=config.report_timezone)


def get_run_analysis_use_case(
    extraction: MatchExtractionPort = Depends(get_extraction),
    report_store: ReportStorePort = Depends(get_report_store),
    settings: SettingsService = Depends(get_settings_service),
    config: ServiceConfig = Depends(get_service_config),
) -> RunAnalysisUseCase:
    return RunAnalysisUseCase(
        extraction=extraction,
        report_store=report_store,
        settings=settings,
        report_timezone=config.report_timezone,
    )
