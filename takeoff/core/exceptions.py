"""
Exception hierarchy for the takeoff extraction service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging. Errors
raised while a job runs carry an error kind recorded on the job.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any

ERROR_KIND_STRUCTURAL = "structural"
ERROR_KIND_ADAPTER = "adapter"
ERROR_KIND_DEPENDENCY = "dependency"


class TakeoffException(Exception):
    """Base exception for all takeoff application errors."""

    kind: str = ERROR_KIND_STRUCTURAL

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ProjectNotFoundError(TakeoffException):
    """Raised when a project cannot be found."""

    def __init__(self, project_id: Any, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["project_id"] = str(project_id)
        super().__init__(f"Project not found: {project_id}", details)


class ProjectFileNotFoundError(TakeoffException):
    """Raised when a file cannot be found in a project."""

    def __init__(
        self,
        file_id: Any,
        project_id: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["file_id"] = str(file_id)
        if project_id is not None:
            details["project_id"] = str(project_id)
        super().__init__(f"File not found: {file_id}", details)


class JobNotFoundError(TakeoffException):
    """Raised when an extraction job cannot be found."""

    def __init__(self, job_id: Any, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["job_id"] = str(job_id)
        super().__init__(f"Job not found: {job_id}", details)


class RetryNotAllowedError(TakeoffException):
    """Raised when a retry is requested for a file that has not failed."""

    def __init__(
        self,
        file_id: Any,
        status: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize retry not allowed error.

        Args:
            file_id: ID of the file
            status: Current file status
            details: Additional context
        """
        details = details or {}
        details["file_id"] = str(file_id)
        details["status"] = status
        super().__init__(
            f"Retry is only allowed for failed files (file {file_id} is {status})",
            details,
        )


class UnsupportedFileTypeError(TakeoffException):
    """Raised when a file cannot be read by any sheet or document reader."""

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_name:
            details["file_name"] = file_name
        super().__init__(message, details)


class ExtractionError(TakeoffException):
    """Raised when an extraction adapter fails."""

    kind = ERROR_KIND_ADAPTER

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize extraction error.

        Args:
            message: Error message
            file_name: Name of the file being extracted
            details: Additional context
        """
        details = details or {}
        if file_name:
            details["file_name"] = file_name
        super().__init__(message, details)


class DependencyNotSatisfiedError(TakeoffException):
    """Raised when drawings run before the project's schedules are ready."""

    kind = ERROR_KIND_DEPENDENCY

    def __init__(
        self,
        message: str,
        project_id: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if project_id is not None:
            details["project_id"] = str(project_id)
        super().__init__(message, details)


def error_kind(exc: BaseException) -> str:
    """
    Classify an exception for the job error record.

    Domain exceptions carry their own kind. Adapter calls wrap foreign
    exceptions in ExtractionError, so anything else is structural.
    """
    if isinstance(exc, TakeoffException):
        return exc.kind
    return ERROR_KIND_STRUCTURAL
