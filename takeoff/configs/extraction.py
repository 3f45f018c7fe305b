"""
Extraction pipeline configuration settings.

Worker pool sizing, scheduler tick, and spreadsheet chunking thresholds.

Dependencies: pydantic, pydantic_settings
System role: Tunables for the asynchronous extraction job pipeline
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from takeoff.configs.base import BaseSettings


class ExtractionSettings(BaseSettings):
    """Extraction job pipeline configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EXTRACTION_",
        case_sensitive=False,
        extra="ignore",
    )

    max_concurrency: int = Field(
        default=12,
        ge=1,
        description="Maximum number of jobs processed at the same time",
    )
    poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Scheduler tick interval",
    )
    max_rows_per_chunk: int = Field(
        default=350,
        ge=1,
        description="Row threshold after which a worksheet is split into chunks",
    )
    min_blank_run: int = Field(
        default=1,
        ge=1,
        description="Consecutive blank rows required for a safe chunk boundary",
    )
    max_parallel_chunks: int = Field(
        default=4,
        ge=1,
        description="Chunks of one file submitted to the adapter concurrently",
    )
    stale_job_timeout_seconds: int = Field(
        default=0,
        ge=0,
        description="Requeue processing jobs older than this on worker start (0 disables)",
    )
    schedule_code_limit: int = Field(
        default=300,
        ge=1,
        description="Maximum schedule codes passed to drawing extraction",
    )
    worker_enabled: bool = Field(
        default=True,
        description="Run the extraction scheduler inside the API process",
    )
    stream_interval_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Interval between project stream updates",
    )
