"""
Error taxonomy for the recovery intelligence engine.

- ProviderError: one provider failed (transport, auth, rate limit, ...).
  Recovered by excluding that provider from the batch.
- ParseError: a provider payload could not be decoded as structured data.
  Recovered inside the adapter by fallback extraction; never propagates.
- NoProviderAvailable: every provider in a batch failed. Surfaced to the caller.

Too little history for a trend is not an error; it is reported as the
``insufficient_data`` trend direction.
"""

from enum import Enum
from typing import Optional


class ProviderErrorKind(str, Enum):
    """Why a provider call failed."""

    NETWORK = "network"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    HTTP = "http"
    TIMEOUT = "timeout"
    MALFORMED_OUTPUT = "malformed_output"
    UNSUPPORTED = "unsupported"
    CONFIGURATION = "configuration"


class RecoveryIntelError(Exception):
    """Base class for all engine errors."""


class ProviderError(RecoveryIntelError):
    """A single provider call failed."""

    def __init__(
        self,
        provider: str,
        kind: ProviderErrorKind,
        message: str = "",
        status_code: Optional[int] = None,
    ):
        self.provider = provider
        self.kind = kind
        self.message = message
        self.status_code = status_code
        detail = f": {message}" if message else ""
        super().__init__(f"{provider} failed ({kind.value}){detail}")


class ParseError(RecoveryIntelError):
    """Provider content could not be decoded into a StructuredAnalysis."""


class NoProviderAvailable(RecoveryIntelError):
    """No provider produced a result, so no consensus can be formed."""

    def __init__(self, attempted: list[str], errors: Optional[list[ProviderError]] = None):
        self.attempted = attempted
        self.errors = errors or []
        if attempted:
            reasons = ", ".join(f"{e.provider}={e.kind.value}" for e in self.errors)
            message = f"All providers failed ({reasons or ', '.join(attempted)})"
        else:
            message = "No provider supports the requested modality"
        super().__init__(message)
