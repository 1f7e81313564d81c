"""Core domain logic: validation, tenants, generative client, Lambda entry points."""
