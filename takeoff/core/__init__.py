"""
Core business logic module.

Contains the extraction pipeline (chunking, status derivation, dependency
gate, job processing) and the exception hierarchy.
"""

from takeoff.core.exceptions import (
    TakeoffException,
    ProjectNotFoundError,
    ProjectFileNotFoundError,
    JobNotFoundError,
    RetryNotAllowedError,
    UnsupportedFileTypeError,
    ExtractionError,
    DependencyNotSatisfiedError,
)

__all__ = [
    "TakeoffException",
    "ProjectNotFoundError",
    "ProjectFileNotFoundError",
    "JobNotFoundError",
    "RetryNotAllowedError",
    "UnsupportedFileTypeError",
    "ExtractionError",
    "DependencyNotSatisfiedError",
]
