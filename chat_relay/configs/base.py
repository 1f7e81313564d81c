"""
Shared relay settings.

Runtime environment and logging options common to the Lambda workers and
the local gateway. NODE_ENV is accepted as an alias for the environment
name so existing deployment templates keep working.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Environment and logging settings inherited by the relay settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
        description="Deployment stage (development, staging, production)",
    )
    debug: bool = Field(
        default=False,
        description="Verbose local diagnostics",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level, case-insensitive",
    )
    log_format: str = Field(
        default="text",
        description="'text' for local runs, 'json' for Lambda/CloudWatch",
    )
    service_name: str = Field(
        default="chat-relay",
        description="Service name stamped on structured log records",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("log_format")
    @classmethod
    def normalize_log_format(cls, value: str) -> str:
        return value.strip().lower()
