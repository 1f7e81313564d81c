"""
Session store configuration settings.

Manages DynamoDB table parameters and session lifetime for the
connection -> session records.

Dependencies: pydantic, pydantic_settings
System role: Session persistence configuration
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionStoreSettings(BaseSettings):
    """DynamoDB session table configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SESSION_STORE_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    backend: str = Field(
        default="dynamodb",
        description="Storage backend: 'dynamodb' or 'memory' (local development only)",
    )
    table_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SESSION_STORE_TABLE_NAME", "DYNAMODB_TABLE_NAME"),
        description="DynamoDB table holding session rows",
    )
    region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("SESSION_STORE_REGION", "AWS_REGION"),
        description="AWS region of the session table",
    )
    endpoint_url: str | None = Field(
        default=None,
        description="Override DynamoDB endpoint (DynamoDB Local)",
    )
    max_attempts: int = Field(
        default=3,
        description="botocore retry attempts for DynamoDB calls",
    )
    ttl_seconds: int = Field(
        default=3600,
        description="Session lifetime after last activity (default 1 hour)",
    )
    sweep_interval_seconds: int = Field(
        default=3600,
        description="Interval between expiry sweeps in the local server",
    )
    max_history: int = Field(
        default=8,
        description="Number of exchanges retained per session",
    )
