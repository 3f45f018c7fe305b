"""
LLM configuration settings.

Model selection for the extraction adapters.

Dependencies: pydantic, pydantic_settings
System role: LLM client configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from takeoff.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """Google Gemini configuration used by the extraction adapters."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    model_id: str = Field(default="gemini-2.5-flash", description="Gemini model identifier")
    temperature: float = Field(default=0.0, description="Sampling temperature")
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts per extraction call before the unit is marked failed",
    )
