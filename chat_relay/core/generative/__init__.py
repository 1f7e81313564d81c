"""Generative response client: prompt assembly, completion calls, fallbacks."""

from chat_relay.core.generative.response_client import ResponseClient
from chat_relay.core.generative.response_fallbacks import (
    fallback_response,
    local_development_response,
)
from chat_relay.core.generative.response_prompt import build_messages, build_system_prompt

__all__ = [
    "ResponseClient",
    "build_messages",
    "build_system_prompt",
    "fallback_response",
    "local_development_response",
]
