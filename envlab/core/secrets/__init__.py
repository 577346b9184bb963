"""Secrets Catalog.

Provides per-environment secret values:
- One value per environment for every secret
- Masking of non-public values
- Category filtering
"""

from envlab.core.secrets.catalog import (
    PREDEFINED_SECRETS,
    EnvironmentSecret,
    SecretCatalog,
    SecretCategory,
    SecretView,
    default_catalog,
    mask_value,
)

__all__ = [
    "PREDEFINED_SECRETS",
    "EnvironmentSecret",
    "SecretCatalog",
    "SecretCategory",
    "SecretView",
    "default_catalog",
    "mask_value",
]
