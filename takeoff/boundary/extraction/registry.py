"""
Adapter registry.

Maps each file type to the adapter that extracts it. The job processor
receives a registry instead of constructing adapters, so tests register
fakes per type.

Dependencies: takeoff.boundary.extraction, takeoff.configs
System role: Extraction adapter selection
"""

import logging

from takeoff.boundary.db.models.file_model import FileType
from takeoff.boundary.extraction.base import ExtractionAdapter
from takeoff.boundary.extraction.gemini_adapters import (
    BoqSheetAdapter,
    DrawingAdapter,
    ScheduleAdapter,
)
from takeoff.configs.llm import LLMSettings

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """FileType -> ExtractionAdapter lookup."""

    def __init__(self, adapters: dict[FileType, ExtractionAdapter] | None = None) -> None:
        self._adapters: dict[FileType, ExtractionAdapter] = dict(adapters or {})

    def register(self, file_type: FileType, adapter: ExtractionAdapter) -> None:
        self._adapters[file_type] = adapter

    def get(self, file_type: FileType) -> ExtractionAdapter:
        """
        Return the adapter for a file type.

        Raises:
            KeyError: If no adapter is registered for the type
        """
        try:
            return self._adapters[file_type]
        except KeyError:
            raise KeyError(f"No extraction adapter registered for file type '{file_type.value}'")

    def __contains__(self, file_type: FileType) -> bool:
        return file_type in self._adapters


def build_default_registry(settings: LLMSettings) -> AdapterRegistry:
    """
    Build the production registry of Gemini adapters.

    Args:
        settings: LLM configuration

    Returns:
        AdapterRegistry with BOQ, schedule, and drawing adapters
    """
    options = {
        "model_id": settings.model_id,
        "temperature": settings.temperature,
        "max_retries": settings.max_retries,
    }
    logger.info(
        f"{__name__}:build_default_registry - Creating Gemini adapters",
        extra={"model_id": settings.model_id},
    )
    return AdapterRegistry(
        {
            FileType.BOQ: BoqSheetAdapter(**options),
            FileType.SCHEDULE: ScheduleAdapter(**options),
            FileType.DRAWING: DrawingAdapter(**options),
        }
    )
