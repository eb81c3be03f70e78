"""Common utilities for Echo Tales services."""

__all__ = [
    "settings",
    "setup_otel",
    "setup_logging",
    "setup_metrics",
    "run_migrations",
]
