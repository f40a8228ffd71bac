"""Provider configuration and adapters."""

from recovery_intel.providers.adapter import ProviderAdapter, build_adapters, build_client
from recovery_intel.providers.registry import (
    DEFAULT_PROVIDERS,
    ProviderConfig,
    ProviderModels,
    ProviderRegistry,
)

__all__ = [
    "DEFAULT_PROVIDERS",
    "ProviderAdapter",
    "ProviderConfig",
    "ProviderModels",
    "ProviderRegistry",
    "build_adapters",
    "build_client",
]
