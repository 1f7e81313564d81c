"""
Relay configuration.

One pydantic-settings class per concern (session store, generative API,
transport), read from the Lambda environment or a local .env file.
"""

from chat_relay.configs.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
