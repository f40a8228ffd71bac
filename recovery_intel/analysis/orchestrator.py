"""
Analysis orchestrator.

Fans a request out to every selected provider adapter concurrently, waits
for all of them to settle, drops the failures and synthesizes a consensus
from the successes. The batch only fails when no provider succeeds.
"""

import asyncio
import logging
from typing import Any, Optional, Union

from recovery_intel.analysis.progress import ProgressTracker
from recovery_intel.analysis.synthesizer import ConsensusSynthesizer
from recovery_intel.errors import NoProviderAvailable, ProviderError, ProviderErrorKind
from recovery_intel.models.analysis import AnalysisRequest, ConsensusResult, ProviderResult
from recovery_intel.models.enums import Modality
from recovery_intel.providers.adapter import ProviderAdapter
from recovery_intel.providers.registry import ProviderRegistry
from recovery_intel.storage.history import BoundedHistoryStore

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT = 45.0


class AnalysisOrchestrator:
    """
    Runs one analysis request across several providers and merges the results.

    Configuration (registry, adapters, timeout) is passed in explicitly;
    nothing is read from process-wide state.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        adapters: dict[str, ProviderAdapter],
        synthesizer: Optional[ConsensusSynthesizer] = None,
        provider_timeout: Optional[float] = DEFAULT_PROVIDER_TIMEOUT,
        analysis_history_window: int = 100,
        progress_tracker: Optional[ProgressTracker] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            registry: Provider configurations and default selections
            adapters: Adapter per provider name (providers without one are skipped)
            synthesizer: Consensus synthesizer
            provider_timeout: Seconds allowed per provider call; None waits indefinitely
            analysis_history_window: Provider results (and image consensus
                results) kept per subject
            progress_tracker: Healing progress tracker for image analyses
        """
        self.registry = registry
        self.adapters = adapters
        self.synthesizer = synthesizer or ConsensusSynthesizer()
        self.provider_timeout = provider_timeout
        self.analysis_history: BoundedHistoryStore[ProviderResult] = BoundedHistoryStore(
            analysis_history_window
        )
        self.image_consensus_history: BoundedHistoryStore[ConsensusResult] = BoundedHistoryStore(
            analysis_history_window
        )
        self.progress_tracker = progress_tracker or ProgressTracker()

    def select_adapters(
        self,
        modality: Modality,
        provider_subset: Optional[list[str]] = None,
    ) -> list[ProviderAdapter]:
        """Ordered adapters able to handle the modality."""
        selected = []
        for config in self.registry.select(modality, provider_subset):
            adapter = self.adapters.get(config.name)
            if adapter is None:
                logger.debug(f"No adapter configured for provider {config.name}")
                continue
            selected.append(adapter)
        return selected

    async def analyze(
        self,
        modality: Union[Modality, str],
        content: Union[str, dict[str, Any]],
        context: Optional[dict[str, Any]] = None,
        provider_subset: Optional[list[str]] = None,
    ) -> ConsensusResult:
        """
        Analyze content with several providers and return their consensus.

        Args:
            modality: text, image or multimodal
            content: Text, or a dict with "text" and/or "images" (data URLs)
            context: Optional context (subject_id, domain hints)
            provider_subset: Ordered provider names; defaults to the
                registry's selection for the modality

        Returns:
            ConsensusResult synthesized from every successful provider

        Raises:
            NoProviderAvailable: if no provider produced a result
        """
        request = self._build_request(Modality(modality), content, context or {})
        return await self.run(request, provider_subset)

    async def analyze_text(self, text: str, context: Optional[dict] = None, **kwargs) -> ConsensusResult:
        return await self.analyze(Modality.TEXT, text, context, **kwargs)

    async def analyze_image(self, image: str, context: Optional[dict] = None, **kwargs) -> ConsensusResult:
        return await self.analyze(Modality.IMAGE, {"images": [image]}, context, **kwargs)

    async def analyze_multimodal(
        self,
        text: str,
        images: list[str],
        context: Optional[dict] = None,
        **kwargs,
    ) -> ConsensusResult:
        return await self.analyze(Modality.MULTIMODAL, {"text": text, "images": images}, context, **kwargs)

    async def run(
        self,
        request: AnalysisRequest,
        provider_subset: Optional[list[str]] = None,
    ) -> ConsensusResult:
        """Execute a prepared request (see ``analyze``)."""
        adapters = self.select_adapters(request.modality, provider_subset)
        if not adapters:
            raise NoProviderAvailable([])

        logger.info(
            f"Analyzing {request.modality.value} request {request.request_id} with "
            f"{[a.name for a in adapters]}"
        )

        # Cancelling this coroutine cancels every pending provider call
        outcomes = await asyncio.gather(
            *(self._invoke(adapter, request) for adapter in adapters)
        )

        results = [o for o in outcomes if isinstance(o, ProviderResult)]
        errors = [o for o in outcomes if isinstance(o, ProviderError)]

        if not results:
            raise NoProviderAvailable([a.name for a in adapters], errors)

        consensus = self.synthesizer.synthesize(results, request_id=request.request_id)
        await self._record(request, consensus)
        return consensus

    async def _invoke(
        self,
        adapter: ProviderAdapter,
        request: AnalysisRequest,
    ) -> Union[ProviderResult, ProviderError]:
        """Run one adapter, turning any failure into a ProviderError value."""
        try:
            if self.provider_timeout is None:
                return await adapter.invoke(request)
            return await asyncio.wait_for(adapter.invoke(request), timeout=self.provider_timeout)
        except ProviderError as e:
            logger.warning(f"Provider {adapter.name} failed: {e}")
            return e
        except asyncio.TimeoutError:
            logger.warning(f"Provider {adapter.name} timed out after {self.provider_timeout}s")
            return ProviderError(
                adapter.display_name,
                ProviderErrorKind.TIMEOUT,
                f"No response within {self.provider_timeout}s",
            )
        except Exception as e:
            logger.exception(f"Provider {adapter.name} raised an unexpected error")
            return ProviderError(adapter.display_name, ProviderErrorKind.MALFORMED_OUTPUT, str(e))

    async def _record(self, request: AnalysisRequest, consensus: ConsensusResult) -> None:
        """Store results in the subject's history and track healing progress."""
        subject_id = request.subject_id
        if subject_id is None:
            return

        await self.analysis_history.extend(subject_id, consensus.individual_results)

        if request.modality != Modality.TEXT:
            earlier = self.image_consensus_history.snapshot(subject_id)
            await self.image_consensus_history.append(subject_id, consensus)
            await self.progress_tracker.track(subject_id, consensus, earlier)

    def get_analysis_history(self, subject_id: str) -> list[ProviderResult]:
        return list(self.analysis_history.snapshot(subject_id))

    def get_progress_history(self, subject_id: str):
        return self.progress_tracker.get_history(subject_id)

    @staticmethod
    def _build_request(
        modality: Modality,
        content: Union[str, dict[str, Any]],
        context: dict[str, Any],
    ) -> AnalysisRequest:
        if isinstance(content, str):
            return AnalysisRequest(modality=modality, text=content, context=context)
        return AnalysisRequest(
            modality=modality,
            text=content.get("text", ""),
            images=list(content.get("images", [])),
            context=context,
        )
