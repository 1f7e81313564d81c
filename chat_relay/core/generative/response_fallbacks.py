"""
Deterministic replies used when no completion is available.

Dependencies: chat_relay.models.tenant
System role: Fallback and offline reply templates
"""

import zlib

from chat_relay.models.tenant import TenantConfiguration

LOCAL_DEVELOPMENT_LABEL = "[Local development]"

_LOCAL_TEMPLATES = (
    "Hello! This is a local development response for {name}. I'm here to help with "
    "your questions about {name} products and services.",
    'Thanks for your message: "{message}". In a real deployment, I would provide '
    "detailed information about {name}'s products and services.",
    "This is a development environment for the {name} chatbot. Connect a live API key "
    "to get answers about {topics}.",
    "Welcome to the {name} assistant! I'm currently running in development mode, so "
    "this reply was generated locally.",
)


def fallback_response(config: TenantConfiguration) -> str:
    """
    Tenant-branded apology pointing at the primary public URL.

    Args:
        config: Tenant configuration snapshot

    Returns:
        str: Fallback reply
    """
    url = config.primary_url or "our website"
    return (
        "I apologize, but I'm experiencing technical difficulties right now. "
        f"For immediate assistance, please visit our official website at {url} "
        "or contact our support team directly. "
        f"I'll be back online shortly to help with your {config.name} questions."
    )


def local_development_response(user_text: str, config: TenantConfiguration) -> str:
    """
    Canned reply for offline mode, labeled as such.

    The template is picked from the message content so the same message
    always yields the same reply.

    Args:
        user_text: Sanitized user message
        config: Tenant configuration snapshot

    Returns:
        str: Placeholder reply
    """
    template = _LOCAL_TEMPLATES[zlib.crc32(user_text.encode("utf-8")) % len(_LOCAL_TEMPLATES)]
    topics = ", ".join(config.supported_topics).lower() or "general questions"
    body = template.format(name=config.name, message=user_text, topics=topics)
    return f"{LOCAL_DEVELOPMENT_LABEL} {body}"
