"""
Prompt assembly for tenant-framed chat completions.

System prompt built from the tenant configuration, followed by the most
recent exchanges and the new user turn.

Dependencies: langchain_core
System role: Prompt template management for the response client
"""

from collections.abc import Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from chat_relay.models.session import Exchange
from chat_relay.models.tenant import TenantConfiguration

PROMPT_HISTORY_EXCHANGES = 3

SYSTEM_PROMPT_TEMPLATE = """You are a knowledgeable assistant for {name}.

COMPANY CONTEXT:
- Company: {name}
- Description: {description}
- Industry: {industry}
- Brand Message: {brand_message}

INFORMATION SOURCES:
Use only publicly available information from these official sources:
{urls}

STRATEGIC PRIORITIES:
When relevant to user questions, incorporate information about these strategic priorities:
{strategic_priorities}

SUPPORTED TOPICS:
Focus on these areas:
{supported_topics}

RESPONSE STYLE: {response_style}

GUIDELINES:
- Provide accurate, helpful information based on official company sources
- When discussing strategic priorities, explain how they benefit customers
- If asked about priorities specifically, provide detailed explanations with examples
- Stay within your knowledge domain and refer to official sources when appropriate
- Be concise but comprehensive
- Maintain a {response_style} tone throughout responses
- If you cannot find specific information, acknowledge limitations and suggest official resources

Remember: Always prioritize accuracy over completeness and cite official company sources when available."""


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def build_system_prompt(config: TenantConfiguration) -> str:
    """
    Render the framing instruction for a tenant.

    Args:
        config: Tenant configuration snapshot

    Returns:
        str: System prompt text
    """
    return SYSTEM_PROMPT_TEMPLATE.format(
        name=config.name,
        description=config.description,
        industry=config.industry,
        brand_message=config.brand_message,
        urls=_bullets(config.urls),
        strategic_priorities=_bullets(config.strategic_priorities),
        supported_topics=_bullets(config.supported_topics),
        response_style=config.response_style,
    )


def build_messages(
    user_text: str,
    history: Sequence[Exchange],
    config: TenantConfiguration,
) -> list[BaseMessage]:
    """
    Assemble role-tagged turns for one completion request.

    Args:
        user_text: New user message
        history: Session exchanges, oldest first
        config: Tenant configuration snapshot

    Returns:
        list[BaseMessage]: System turn, last three exchanges, new user turn
    """
    messages: list[BaseMessage] = [SystemMessage(content=build_system_prompt(config))]
    for exchange in list(history)[-PROMPT_HISTORY_EXCHANGES:]:
        messages.append(HumanMessage(content=exchange.user))
        messages.append(AIMessage(content=exchange.assistant))
    messages.append(HumanMessage(content=user_text))
    return messages
