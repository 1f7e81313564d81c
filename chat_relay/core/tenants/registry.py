"""
Tenant configuration registry.

Maps sanitized tenant identifiers to configuration bundles. Resolution is
total: unknown identifiers get the generic bundle.

Dependencies: pydantic, chat_relay.core.tenants.defaults
System role: Tenant Configuration Resolver
"""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from chat_relay.core.exceptions import ConfigurationError
from chat_relay.core.tenants.defaults import BUILTIN_TENANTS, GENERIC_TENANT
from chat_relay.models.tenant import TenantConfiguration

logger = logging.getLogger(__name__)

_TENANT_FILE_ADAPTER = TypeAdapter(dict[str, TenantConfiguration])


def load_tenant_file(path: str | Path) -> dict[str, TenantConfiguration]:
    """
    Load tenant configurations from a JSON file.

    The file maps tenant identifiers to bundles using either snake_case
    or camelCase keys (`maxResponseTokens`, `strategicPriorities`, ...).

    Args:
        path: JSON file path

    Returns:
        dict[str, TenantConfiguration]: Tenants keyed by lower-cased identifier

    Raises:
        ConfigurationError: File missing, not JSON, or failing validation
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        tenants = _TENANT_FILE_ADAPTER.validate_python(raw)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read tenant registry file: {e}", details={"path": str(path)}
        ) from e
    except PydanticValidationError as e:
        raise ConfigurationError(
            "Invalid tenant registry file",
            details={"path": str(path), "errors": e.error_count()},
        ) from e

    logger.info(
        "%s:load_tenant_file - Loaded %d tenants", __name__, len(tenants), extra={"path": str(path)}
    )
    return {tenant_id.lower(): config for tenant_id, config in tenants.items()}


class TenantRegistry:
    """Read-only lookup of tenant configurations."""

    def __init__(
        self,
        tenants: dict[str, TenantConfiguration] | None = None,
        fallback: TenantConfiguration = GENERIC_TENANT,
    ) -> None:
        """
        Initialize registry.

        Args:
            tenants: Tenant bundles keyed by identifier (defaults to built-ins)
            fallback: Bundle returned for unknown identifiers
        """
        self._tenants = dict(BUILTIN_TENANTS if tenants is None else tenants)
        self._fallback = fallback

    @classmethod
    def from_file(cls, path: str | Path) -> "TenantRegistry":
        """Build a registry of built-in tenants extended by a JSON file."""
        return cls({**BUILTIN_TENANTS, **load_tenant_file(path)})

    def __contains__(self, tenant_id: str) -> bool:
        return tenant_id in self._tenants

    def resolve(self, tenant_id: str) -> TenantConfiguration:
        """
        Resolve a tenant identifier to its configuration.

        Args:
            tenant_id: Sanitized tenant identifier

        Returns:
            TenantConfiguration: Registered bundle or the generic default
        """
        config = self._tenants.get(tenant_id)
        if config is None:
            logger.info(
                "%s:resolve - Unknown tenant, using generic configuration",
                __name__,
                extra={"company_id": tenant_id},
            )
            return self._fallback
        return config
