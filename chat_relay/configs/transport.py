"""
Transport and tenant configuration settings.

Settings for the WebSocket management endpoint and tenant resolution.

Dependencies: pydantic_settings
System role: Connection/tenant configuration
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TransportSettings(BaseSettings):
    """WebSocket gateway and tenant registry settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    websocket_api_endpoint: str | None = Field(
        default=None,
        validation_alias=AliasChoices("WEBSOCKET_API_ENDPOINT"),
        description="Management endpoint override (defaults to https://<domain>/<stage>)",
    )
    default_company: str = Field(
        default="vanguard",
        validation_alias=AliasChoices("DEFAULT_COMPANY"),
        description="Tenant used when a connection does not name a valid one",
    )
    tenants_registry_file: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TENANTS_REGISTRY_FILE"),
        description="Optional JSON file with additional tenant configurations",
    )
