"""
Tenant configuration model.

Static per-company bundle used to frame prompts and brand replies.

Dependencies: pydantic
System role: Tenant configuration contract
"""

from pydantic import BaseModel, ConfigDict, Field


class TenantConfiguration(BaseModel):
    """
    Prompt framing and generation parameters for one tenant.

    Attributes:
        name: Display name pushed to clients as companyName
        description: One-line company description
        urls: Canonical public sources, the first one is the primary URL
        strategic_priorities: Talking points woven into answers
        brand_message: Brand tagline
        industry: Industry label
        supported_topics: Topics the assistant focuses on
        response_style: Tone descriptor
        max_response_tokens: Completion length limit
        temperature: Sampling temperature
        is_default: True for the generic bundle served to unknown tenants
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    description: str = ""
    urls: list[str] = Field(default_factory=list)
    strategic_priorities: list[str] = Field(
        default_factory=list, validation_alias="strategicPriorities"
    )
    brand_message: str = Field(default="", validation_alias="brandMessage")
    industry: str = ""
    supported_topics: list[str] = Field(default_factory=list, validation_alias="supportedTopics")
    response_style: str = Field(min_length=1, validation_alias="responseStyle")
    max_response_tokens: int = Field(default=600, gt=0, validation_alias="maxResponseTokens")
    temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    is_default: bool = False

    @property
    def primary_url(self) -> str | None:
        """First canonical source URL, if any."""
        return self.urls[0] if self.urls else None
