"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_extraction_service,
    get_job_service,
    get_session_factory,
    get_settings_dependency,
    get_snapshot_service,
)

__all__ = [
    "get_extraction_service",
    "get_job_service",
    "get_session_factory",
    "get_settings_dependency",
    "get_snapshot_service",
]
