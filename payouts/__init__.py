"""Prize computation and report aggregation package."""

__all__ = [
    "config",
    "errors",
    "models",
    "money",
    "prizes",
    "earnings",
    "ranking",
    "normalize",
    "tournament",
    "kpis",
    "retry",
    "task_queue",
    "extraction",
    "gemini_client",
    "render",
]
