"""Infrastructure adapters."""

from .gemini_extraction_adapter import GeminiExtractionAdapter
from .memory_store import InMemoryReportStore, InMemorySettingsStore
from .supabase_store import PostgrestClient, SupabaseReportStore, SupabaseSettingsStore

__all__ = [
    "GeminiExtractionAdapter",
    "InMemoryReportStore",
    "InMemorySettingsStore",
    "PostgrestClient",
    "SupabaseReportStore",
    "SupabaseSettingsStore",
]
