"""
Shared Protocol definitions for type hints across the codebase.

These protocols define the interfaces expected from external collaborators
(provider backends), allowing for dependency injection and testing.
"""

from typing import Optional, Protocol

from recovery_intel.models.analysis import LLMResponse


class ProviderClientProtocol(Protocol):
    """
    Protocol for the outbound call function of one provider backend.

    Implementations raise ProviderError for transport, auth, rate-limit and
    envelope failures, and return the model's text otherwise.
    """

    async def generate(
        self,
        model: str,
        prompt: str,
        images: Optional[list[str]] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Send a prompt (and optional data-URL images) to the backend.

        Args:
            model: Model identifier for the backend
            prompt: Prompt text
            images: Optional list of image data URLs
            temperature: Sampling temperature
            max_tokens: Optional maximum tokens to generate

        Returns:
            LLMResponse with the raw model content
        """
        ...
