"""
Generative API configuration settings.

Settings for the Perplexity chat completions endpoint, retry policy
and the offline development key.

Dependencies: pydantic_settings
System role: Generative response client configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GenerativeSettings(BaseSettings):
    """Perplexity (OpenAI-compatible) completion API configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PERPLEXITY_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Perplexity API key",
    )
    base_url: str = Field(
        default="https://api.perplexity.ai",
        description="Base URL of the chat completions API",
    )
    model: str = Field(
        default="sonar-pro",
        description="Completion model identifier",
    )
    request_timeout: float = Field(
        default=20.0,
        description="Per-attempt HTTP timeout in seconds",
    )
    max_attempts: int = Field(
        default=3,
        description="Total attempts per generate call",
    )
    retry_base_delay: float = Field(
        default=1.0,
        description="Linear backoff base in seconds (delay = base * attempt)",
    )
    offline_api_key: str = Field(
        default="dummy-key-for-local-dev",
        description="API key value that switches the client to canned local replies",
    )
