"""
Extraction boundary: adapter contract, Gemini adapters, and sheet reading.

Exports:
  - ExtractionRequest, ExtractedItem, ExtractionResult, ExtractionAdapter
  - AdapterRegistry, build_default_registry
  - SheetReader, SheetRows
"""

from takeoff.boundary.extraction.base import (
    ExtractedItem,
    ExtractionAdapter,
    ExtractionRequest,
    ExtractionResult,
)
from takeoff.boundary.extraction.registry import AdapterRegistry, build_default_registry
from takeoff.boundary.extraction.sheet_reader import SheetReader, SheetRows

__all__ = [
    "ExtractedItem",
    "ExtractionAdapter",
    "ExtractionRequest",
    "ExtractionResult",
    "AdapterRegistry",
    "build_default_registry",
    "SheetReader",
    "SheetRows",
]
