"""Provider backend clients."""

from recovery_intel.llm.client import (
    GeminiClient,
    HuggingFaceClient,
    MockProviderClient,
    OpenAICompatibleClient,
    build_user_message,
    split_data_url,
)

__all__ = [
    "GeminiClient",
    "HuggingFaceClient",
    "MockProviderClient",
    "OpenAICompatibleClient",
    "build_user_message",
    "split_data_url",
]
