"""
Provider adapter.

Wraps one provider backend behind ``invoke(request) -> ProviderResult``.
Transport-level failures surface as ProviderError; content that cannot be
decoded as structured JSON goes through fallback extraction and comes back
with a discounted confidence instead of failing.
"""

import logging
import time
from datetime import datetime
from typing import Optional

import httpx

from recovery_intel.analysis.fallback import FallbackExtractor
from recovery_intel.errors import ParseError, ProviderError, ProviderErrorKind
from recovery_intel.llm.client import GeminiClient, HuggingFaceClient, OpenAICompatibleClient
from recovery_intel.models.analysis import AnalysisRequest, ProviderResult
from recovery_intel.models.enums import Modality, ProviderKind
from recovery_intel.providers.prompts import build_analysis_prompt
from recovery_intel.providers.registry import ProviderConfig
from recovery_intel.utils.parsing import decode_provider_payload
from recovery_intel.utils.protocols import ProviderClientProtocol

logger = logging.getLogger(__name__)

# Confidence multiplier applied when the analysis came from fallback extraction
FALLBACK_DISCOUNT = {
    Modality.TEXT: 0.7,
    Modality.IMAGE: 0.7,
    Modality.MULTIMODAL: 0.8,
}


def build_client(config: ProviderConfig, timeout: float = 60.0) -> ProviderClientProtocol:
    """
    Create the backend client for a provider configuration.

    Raises:
        ProviderError: CONFIGURATION if the provider's API key is not configured
    """
    try:
        if config.kind == ProviderKind.GEMINI:
            return GeminiClient(
                provider_name=config.display_name,
                api_key_env=config.api_key_env,
                base_url=config.base_url,
                timeout=timeout,
            )
        if config.kind == ProviderKind.HUGGINGFACE:
            return HuggingFaceClient(
                provider_name=config.display_name,
                api_key_env=config.api_key_env,
                base_url=config.base_url,
                timeout=timeout,
            )
        return OpenAICompatibleClient(
            provider_name=config.display_name,
            base_url=config.base_url,
            api_key_env=config.api_key_env,
            timeout=timeout,
        )
    except ValueError as e:
        raise ProviderError(config.display_name, ProviderErrorKind.CONFIGURATION, str(e)) from e


class ProviderAdapter:
    """
    Uniform interface over one analysis provider.

    Holds no per-call state, so one adapter can serve concurrent requests.
    """

    def __init__(
        self,
        config: ProviderConfig,
        client: ProviderClientProtocol,
        extractor: Optional[FallbackExtractor] = None,
    ):
        """
        Args:
            config: Static provider configuration
            client: Outbound call function for the backend
            extractor: Fallback extractor for unparsable content
        """
        self.config = config
        self.client = client
        self.extractor = extractor or FallbackExtractor()

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def display_name(self) -> str:
        return self.config.display_name

    async def invoke(self, request: AnalysisRequest) -> ProviderResult:
        """
        Analyze a request with this provider.

        Args:
            request: The analysis request

        Returns:
            ProviderResult; confidence is the provider reliability, discounted
            when the content had to be mined from free text

        Raises:
            ProviderError: transport, auth, rate-limit, unsupported modality
                or malformed response envelope
        """
        modality = request.modality
        model = self.config.models.for_modality(modality)
        if model is None or not self.config.supports(modality):
            raise ProviderError(
                self.display_name,
                ProviderErrorKind.UNSUPPORTED,
                f"{modality.value} analysis not supported",
            )

        prompt = build_analysis_prompt(request)
        images = request.images if modality != Modality.TEXT else None

        start = time.perf_counter()
        try:
            response = await self.client.generate(
                model=model,
                prompt=prompt,
                images=images,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except ProviderError:
            raise
        except httpx.HTTPError as e:
            raise ProviderError(self.display_name, ProviderErrorKind.NETWORK, str(e)) from e
        processing_time_ms = int((time.perf_counter() - start) * 1000)

        content = response.content
        try:
            analysis, image_analysis, text_analysis = decode_provider_payload(content, modality)
            confidence = self.config.reliability
            structured = True
        except ParseError as e:
            logger.info(f"{self.display_name} returned unstructured content ({e}), using fallback extraction")
            analysis = self.extractor.extract(content)
            image_analysis = None
            text_analysis = None
            confidence = self.config.reliability * FALLBACK_DISCOUNT[modality]
            structured = False

        return ProviderResult(
            provider=self.display_name,
            confidence=confidence,
            analysis=analysis,
            image_analysis=image_analysis,
            text_analysis=text_analysis,
            structured=structured,
            raw_content=content,
            processing_time_ms=processing_time_ms,
            timestamp=datetime.now(),
        )


def build_adapters(
    configs: list[ProviderConfig],
    timeout: float = 60.0,
) -> dict[str, ProviderAdapter]:
    """
    Build adapters for every provider whose API key is available.

    Providers without credentials are skipped with a warning.
    """
    adapters = {}
    for config in configs:
        try:
            client = build_client(config, timeout=timeout)
        except ProviderError as e:
            logger.warning(f"Skipping provider {config.name}: {e.message}")
            continue
        adapters[config.name] = ProviderAdapter(config, client)
    return adapters
