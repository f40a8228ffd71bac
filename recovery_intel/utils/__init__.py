"""Utility functions and helpers."""

from recovery_intel.utils.logging import setup_logging
from recovery_intel.utils.parsing import (
    contains_any,
    decode_provider_payload,
    extract_json_object,
)
from recovery_intel.utils.protocols import ProviderClientProtocol

__all__ = [
    "contains_any",
    "decode_provider_payload",
    "extract_json_object",
    "setup_logging",
    "ProviderClientProtocol",
]
