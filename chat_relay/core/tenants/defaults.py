"""
Built-in tenant configurations.

The generic bundle is served for any identifier that is not registered.
"""

from chat_relay.models.tenant import TenantConfiguration

GENERIC_TENANT = TenantConfiguration(
    name="Assistant",
    description="AI-powered information assistant",
    urls=[],
    strategic_priorities=[
        "Providing accurate information",
        "Delivering helpful responses",
        "Maintaining professional service",
    ],
    brand_message="Here to help with your questions",
    industry="Technology",
    supported_topics=["General inquiries", "Information lookup"],
    response_style="helpful, professional, informative",
    max_response_tokens=600,
    temperature=0.4,
    is_default=True,
)

BUILTIN_TENANTS: dict[str, TenantConfiguration] = {
    "vanguard": TenantConfiguration(
        name="Vanguard",
        description=(
            "Leading investment management company offering mutual funds, ETFs, "
            "and financial advisory services"
        ),
        urls=[
            "https://investor.vanguard.com",
            "https://corporate.vanguard.com",
            "https://about.vanguard.com",
        ],
        strategic_priorities=[
            "Low-cost investing philosophy",
            "Long-term wealth building strategies",
            "Investor-owned structure benefits",
            "Comprehensive retirement planning",
        ],
        brand_message=(
            "Taking a long-term approach and keeping costs low. Taking a stand for "
            "investors and giving them the best chance for investment success."
        ),
        industry="Financial Services",
        supported_topics=[
            "Investment products and services",
            "Account management",
            "Fees and expenses",
            "Retirement planning",
            "Company history and philosophy",
        ],
        response_style="friendly, professional, educational, conservative",
        max_response_tokens=800,
        temperature=0.3,
    ),
}
