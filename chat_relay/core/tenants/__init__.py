"""Tenant configuration registry."""

from chat_relay.core.tenants.defaults import BUILTIN_TENANTS, GENERIC_TENANT
from chat_relay.core.tenants.registry import TenantRegistry, load_tenant_file

__all__ = ["BUILTIN_TENANTS", "GENERIC_TENANT", "TenantRegistry", "load_tenant_file"]
