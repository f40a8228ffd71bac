"""
Provider backend clients.

Each client is the outbound call function of one provider: it sends a
prompt (plus optional images) and returns the raw model text as an
LLMResponse. Backend-specific failures are converted into ProviderError
so callers only ever handle one exception type.

- OpenAICompatibleClient: OpenAI, Groq and OpenRouter (OpenAI SDK, custom base URL)
- GeminiClient: Google Generative Language REST API (httpx)
- HuggingFaceClient: Hugging Face Inference API, text only (httpx)
- MockProviderClient: canned responses for tests
"""

import asyncio
import os
from typing import Optional

import httpx
import openai
from openai import AsyncOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from recovery_intel.errors import ProviderError, ProviderErrorKind
from recovery_intel.models.analysis import LLMResponse

DEFAULT_MAX_TOKENS = 1500


def build_user_message(prompt: str, images: Optional[list[str]] = None) -> dict:
    """
    Build a user message with text and optional image attachments.

    Args:
        prompt: Text content of the message
        images: Optional list of image URLs or data URLs

    Returns:
        Message dict compatible with OpenAI-style chat APIs
    """
    if not images:
        return {"role": "user", "content": prompt}

    content = [{"type": "text", "text": prompt}]
    for image in images:
        content.append({"type": "image_url", "image_url": {"url": image}})

    return {"role": "user", "content": content}


def split_data_url(image: str) -> tuple[str, str]:
    """
    Split a data URL into (mime_type, base64 data).

    Plain base64 strings are assumed to be JPEG.
    """
    if image.startswith("data:") and "," in image:
        header, data = image.split(",", 1)
        mime_type = header[5:].split(";")[0] or "image/jpeg"
        return mime_type, data
    return "image/jpeg", image


def _status_error(provider: str, response: httpx.Response) -> ProviderError:
    """Map an HTTP error status to a ProviderError."""
    status = response.status_code
    if status in (401, 403):
        kind = ProviderErrorKind.AUTH
    elif status == 429:
        kind = ProviderErrorKind.RATE_LIMIT
    else:
        kind = ProviderErrorKind.HTTP
    return ProviderError(provider, kind, response.reason_phrase or "", status_code=status)


class OpenAICompatibleClient:
    """
    Async client for OpenAI-compatible chat completion APIs.

    Uses the OpenAI SDK with the provider's base URL.
    """

    def __init__(
        self,
        provider_name: str,
        base_url: str,
        api_key: Optional[str] = None,
        api_key_env: Optional[str] = None,
        timeout: float = 60.0,
        default_headers: Optional[dict[str, str]] = None,
    ):
        """
        Initialize the client.

        Args:
            provider_name: Provider name used in error reports
            base_url: API base URL (e.g. https://api.groq.com/openai/v1)
            api_key: API key. If not provided, read from ``api_key_env``.
            api_key_env: Environment variable holding the API key
            timeout: HTTP timeout in seconds
            default_headers: Extra headers (e.g. OpenRouter attribution)
        """
        self.provider_name = provider_name
        self.api_key = api_key or (os.getenv(api_key_env) if api_key_env else None)
        if not self.api_key:
            raise ValueError(
                f"{provider_name} API key required. Set {api_key_env or 'the API key'} "
                "environment variable or pass api_key parameter."
            )

        self.client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=base_url,
            timeout=timeout,
            default_headers=default_headers,
        )

    @retry(
        retry=retry_if_exception_type((openai.RateLimitError, openai.APIConnectionError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _create(self, **kwargs):
        return await self.client.chat.completions.create(**kwargs)

    async def generate(
        self,
        model: str,
        prompt: str,
        images: Optional[list[str]] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """
        Generate a completion from the specified model.

        Args:
            model: Model identifier (e.g., "gpt-4o")
            prompt: Prompt text
            images: Optional image data URLs attached to the user message
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with content and token usage
        """
        kwargs = {
            "model": model,
            "messages": [build_user_message(prompt, images)],
            "temperature": temperature,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
        }

        try:
            response = await self._create(**kwargs)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.AUTH, str(e), e.status_code) from e
        except openai.RateLimitError as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.RATE_LIMIT, str(e), e.status_code) from e
        except openai.APITimeoutError as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.TIMEOUT, str(e)) from e
        except openai.APIConnectionError as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.NETWORK, str(e)) from e
        except openai.APIStatusError as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.HTTP, str(e), e.status_code) from e

        if not response.choices:
            raise ProviderError(
                self.provider_name,
                ProviderErrorKind.MALFORMED_OUTPUT,
                "Response contained no choices",
            )

        content = response.choices[0].message.content or ""
        finish_reason = response.choices[0].finish_reason or "stop"

        input_tokens = response.usage.prompt_tokens if response.usage else 0
        output_tokens = response.usage.completion_tokens if response.usage else 0

        return LLMResponse(
            content=content,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason=finish_reason,
        )


class GeminiClient:
    """
    Client for Google's Generative Language API (generateContent).

    Images are sent as inline base64 parts.
    """

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        provider_name: str = "Gemini",
        api_key: Optional[str] = None,
        api_key_env: Optional[str] = "GEMINI_API_KEY",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            provider_name: Provider name used in error reports
            api_key: API key. If not provided, read from ``api_key_env``.
            api_key_env: Environment variable holding the API key
            base_url: Override for the API base URL
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.provider_name = provider_name
        self.api_key = api_key or (os.getenv(api_key_env) if api_key_env else None)
        if not self.api_key:
            raise ValueError(
                f"{provider_name} API key required. Set {api_key_env or 'the API key'} "
                "environment variable or pass api_key parameter."
            )
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _build_body(
        self,
        prompt: str,
        images: Optional[list[str]],
        temperature: float,
        max_tokens: Optional[int],
    ) -> dict:
        parts: list[dict] = [{"text": prompt}]
        for image in images or []:
            mime_type, data = split_data_url(image)
            parts.append({"inline_data": {"mime_type": mime_type, "data": data}})

        return {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens or DEFAULT_MAX_TOKENS,
            },
        }

    async def generate(
        self,
        model: str,
        prompt: str,
        images: Optional[list[str]] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Call generateContent and return the first candidate's text."""
        body = self._build_body(prompt, images, temperature, max_tokens)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/models/{model}:generateContent",
                    params={"key": self.api_key},
                    json=body,
                )
        except httpx.TimeoutException as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.TIMEOUT, str(e)) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.NETWORK, str(e)) from e

        if response.is_error:
            raise _status_error(self.provider_name, response)

        try:
            data = response.json()
            content = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                self.provider_name,
                ProviderErrorKind.MALFORMED_OUTPUT,
                "Unexpected generateContent response shape",
            ) from e

        usage = data.get("usageMetadata") or {}

        return LLMResponse(
            content=content or "",
            model=model,
            input_tokens=usage.get("promptTokenCount", 0),
            output_tokens=usage.get("candidatesTokenCount", 0),
            finish_reason=str(data["candidates"][0].get("finishReason", "stop")).lower(),
        )


class HuggingFaceClient:
    """
    Client for the Hugging Face Inference API.

    Only text generation is supported.
    """

    BASE_URL = "https://api-inference.huggingface.co/models"

    def __init__(
        self,
        provider_name: str = "Hugging Face",
        api_key: Optional[str] = None,
        api_key_env: Optional[str] = "HUGGINGFACE_API_KEY",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.provider_name = provider_name
        self.api_key = api_key or (os.getenv(api_key_env) if api_key_env else None)
        if not self.api_key:
            raise ValueError(
                f"{provider_name} API key required. Set {api_key_env or 'the API key'} "
                "environment variable or pass api_key parameter."
            )
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def generate(
        self,
        model: str,
        prompt: str,
        images: Optional[list[str]] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Run text generation and return the generated text."""
        if images:
            raise ProviderError(
                self.provider_name,
                ProviderErrorKind.UNSUPPORTED,
                "Image inputs are not supported",
            )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/{model}",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"inputs": prompt},
                )
        except httpx.TimeoutException as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.TIMEOUT, str(e)) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.provider_name, ProviderErrorKind.NETWORK, str(e)) from e

        if response.is_error:
            raise _status_error(self.provider_name, response)

        try:
            content = response.json()[0]["generated_text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                self.provider_name,
                ProviderErrorKind.MALFORMED_OUTPUT,
                "Unexpected inference response shape",
            ) from e

        return LLMResponse(content=content or "", model=model)


class MockProviderClient:
    """
    Mock provider client for testing.

    Returns predefined responses without making actual API calls.
    """

    def __init__(
        self,
        responses: Optional[dict[str, str]] = None,
        failures: Optional[dict[str, Exception]] = None,
        delay: float = 0.0,
    ):
        """
        Initialize mock client.

        Args:
            responses: Optional dict mapping model names to response content.
                      If not provided, returns a generic response.
            failures: Optional dict mapping model names to exceptions to raise
            delay: Seconds to sleep before answering (simulates latency)
        """
        self.responses = responses or {}
        self.failures = failures or {}
        self.delay = delay
        self.calls: list[dict] = []

    async def generate(
        self,
        model: str,
        prompt: str,
        images: Optional[list[str]] = None,
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Return a mock response."""
        self.calls.append({
            "model": model,
            "prompt": prompt,
            "images": images or [],
            "temperature": temperature,
        })

        if self.delay:
            await asyncio.sleep(self.delay)

        if model in self.failures:
            raise self.failures[model]

        content = self.responses.get(model, f"Mock response from {model}")

        return LLMResponse(
            content=content,
            model=model,
            input_tokens=len(prompt) // 4,
            output_tokens=len(content) // 4,
        )
