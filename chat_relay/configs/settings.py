"""
Aggregated relay settings.

Combines the per-concern settings and reports which required variables
are missing before a worker starts handling events.

Dependencies: All config modules
System role: Central configuration for Lambda workers and the local gateway
"""

from functools import lru_cache

from pydantic import Field

from chat_relay.configs.base import BaseSettings
from chat_relay.configs.generative import GenerativeSettings
from chat_relay.configs.session_store import SessionStoreSettings
from chat_relay.configs.transport import TransportSettings


class Settings(BaseSettings):
    """Settings for one relay worker."""

    session_store: SessionStoreSettings = Field(default_factory=SessionStoreSettings)
    generative: GenerativeSettings = Field(default_factory=GenerativeSettings)
    transport: TransportSettings = Field(default_factory=TransportSettings)

    def missing_required(self) -> list[str]:
        """
        List required settings that are not configured.

        Returns:
            list[str]: Environment variable names that must be set
        """
        missing = []
        if not self.generative.api_key:
            missing.append("PERPLEXITY_API_KEY")
        if self.session_store.backend == "dynamodb" and not self.session_store.table_name:
            missing.append("DYNAMODB_TABLE_NAME")
        return missing


@lru_cache
def get_settings() -> Settings:
    """
    Settings of this worker, read from the environment on first use.

    Returns:
        Settings: Application settings instance

    Usage:
        from chat_relay.configs import get_settings
        settings = get_settings()
    """
    return Settings()
