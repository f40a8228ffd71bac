"""Tests for AnalysisOrchestrator."""

import asyncio
import json

import pytest

from recovery_intel.analysis.orchestrator import AnalysisOrchestrator
from recovery_intel.errors import NoProviderAvailable, ProviderError, ProviderErrorKind
from recovery_intel.models.enums import Modality, RiskTier, TrendDirection

IMAGE = "data:image/png;base64,iVBORw0KGgo="


def image_payload(healing: float, wound: str = "good", infection: bool = False) -> str:
    return json.dumps({
        "medicalFindings": ["incision"],
        "riskAssessment": "low",
        "recommendations": ["Keep wound clean"],
        "healingProgress": healing,
        "woundHealing": wound,
        "infectionSigns": infection,
    })


class TestAnalysisOrchestrator:
    """Tests for fan-out, fan-in and failure handling."""

    @pytest.mark.asyncio
    async def test_all_providers_contribute(self, make_orchestrator, json_payload):
        orchestrator, clients = make_orchestrator(responses={
            "alpha": json_payload(risk="low"),
            "beta": json_payload(risk="medium"),
            "gamma": json_payload(risk="medium"),
        })

        consensus = await orchestrator.analyze_text("My knee is swollen")

        assert [r.provider for r in consensus.individual_results] == ["Alpha", "Beta", "Gamma"]
        assert consensus.analysis.risk_assessment == RiskTier.MEDIUM
        assert all(len(c.calls) == 1 for c in clients.values())

    @pytest.mark.asyncio
    async def test_failed_providers_are_dropped(self, make_orchestrator, json_payload):
        orchestrator, _ = make_orchestrator(
            responses={"alpha": json_payload(risk="high"), "gamma": json_payload(risk="high")},
            failures={"beta": ProviderError("Beta", ProviderErrorKind.RATE_LIMIT, "slow down")},
        )

        consensus = await orchestrator.analyze_text("Pain after surgery")

        assert [r.provider for r in consensus.individual_results] == ["Alpha", "Gamma"]
        assert consensus.analysis.risk_assessment == RiskTier.HIGH

    @pytest.mark.asyncio
    async def test_unexpected_exceptions_are_contained(self, make_orchestrator, json_payload):
        orchestrator, _ = make_orchestrator(
            responses={"alpha": json_payload()},
            failures={"beta": RuntimeError("boom"), "gamma": KeyError("missing")},
        )

        consensus = await orchestrator.analyze_text("Feeling fine")

        assert len(consensus.individual_results) == 1

    @pytest.mark.asyncio
    async def test_all_failures_raise_no_provider_available(self, make_orchestrator):
        orchestrator, _ = make_orchestrator(failures={
            "alpha": ProviderError("Alpha", ProviderErrorKind.AUTH),
            "beta": ProviderError("Beta", ProviderErrorKind.NETWORK),
            "gamma": ProviderError("Gamma", ProviderErrorKind.HTTP, status_code=500),
        })

        with pytest.raises(NoProviderAvailable) as exc_info:
            await orchestrator.analyze_text("Is this infected?")

        assert exc_info.value.attempted == ["alpha", "beta", "gamma"]
        assert {e.kind for e in exc_info.value.errors} == {
            ProviderErrorKind.AUTH, ProviderErrorKind.NETWORK, ProviderErrorKind.HTTP,
        }

    @pytest.mark.asyncio
    async def test_no_capable_provider_raises(self, make_orchestrator):
        orchestrator, _ = make_orchestrator()

        with pytest.raises(NoProviderAvailable, match="No provider supports"):
            await orchestrator.analyze_multimodal("look", [IMAGE], provider_subset=["gamma"])

    @pytest.mark.asyncio
    async def test_unstructured_answers_still_count(self, make_orchestrator):
        orchestrator, _ = make_orchestrator()

        consensus = await orchestrator.analyze_text("Some pain")

        assert len(consensus.individual_results) == 3
        assert all(not r.structured for r in consensus.individual_results)

    @pytest.mark.asyncio
    async def test_timeout_drops_slow_provider(self, make_orchestrator, json_payload):
        orchestrator, _ = make_orchestrator(
            responses={"alpha": json_payload(), "beta": json_payload(), "gamma": json_payload()},
            delays={"gamma": 1.0},
            provider_timeout=0.05,
        )

        consensus = await orchestrator.analyze_text("Quick check")

        assert [r.provider for r in consensus.individual_results] == ["Alpha", "Beta"]

    @pytest.mark.asyncio
    async def test_all_timeouts_reported_as_timeout(self, make_orchestrator):
        orchestrator, _ = make_orchestrator(
            delays={"alpha": 1.0, "beta": 1.0, "gamma": 1.0},
            provider_timeout=0.05,
        )

        with pytest.raises(NoProviderAvailable) as exc_info:
            await orchestrator.analyze_text("Anyone there?")

        assert all(e.kind == ProviderErrorKind.TIMEOUT for e in exc_info.value.errors)

    @pytest.mark.asyncio
    async def test_no_timeout_waits_for_everyone(self, make_orchestrator, json_payload):
        orchestrator, _ = make_orchestrator(
            responses={"alpha": json_payload(), "beta": json_payload()},
            delays={"beta": 0.1},
            provider_timeout=None,
        )

        consensus = await orchestrator.analyze_text("Patience", provider_subset=["alpha", "beta"])

        assert len(consensus.individual_results) == 2

    @pytest.mark.asyncio
    async def test_calls_run_concurrently(self, make_orchestrator, json_payload):
        orchestrator, _ = make_orchestrator(
            responses={"alpha": json_payload(), "beta": json_payload(), "gamma": json_payload()},
            delays={"alpha": 0.2, "beta": 0.2, "gamma": 0.2},
        )

        loop = asyncio.get_running_loop()
        start = loop.time()
        await orchestrator.analyze_text("Parallel")

        assert loop.time() - start < 0.5

    @pytest.mark.asyncio
    async def test_cancellation_cancels_pending_calls(self, make_orchestrator):
        orchestrator, _ = make_orchestrator(
            delays={"alpha": 5.0, "beta": 5.0, "gamma": 5.0},
            provider_timeout=None,
        )

        task = asyncio.create_task(orchestrator.analyze_text("Never mind", context={"subject_id": "p1"}))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert orchestrator.get_analysis_history("p1") == []

    @pytest.mark.asyncio
    async def test_image_requests_skip_text_only_providers(self, make_orchestrator, json_payload):
        orchestrator, clients = make_orchestrator(responses={
            "alpha": json_payload(), "beta": json_payload(), "gamma": json_payload(),
        })

        consensus = await orchestrator.analyze_image(IMAGE)

        assert [r.provider for r in consensus.individual_results] == ["Alpha", "Beta"]
        assert clients["gamma"].calls == []
        assert clients["alpha"].calls[0]["images"] == [IMAGE]
        assert clients["alpha"].calls[0]["model"] == "alpha-vision"

    @pytest.mark.asyncio
    async def test_provider_subset_order_and_filtering(self, make_orchestrator, json_payload):
        orchestrator, _ = make_orchestrator(responses={
            "alpha": json_payload(), "beta": json_payload(), "gamma": json_payload(),
        })

        consensus = await orchestrator.analyze(
            Modality.TEXT, "Order check", provider_subset=["gamma", "unknown", "alpha", "gamma"]
        )

        assert [r.provider for r in consensus.individual_results] == ["Gamma", "Alpha"]

    @pytest.mark.asyncio
    async def test_missing_adapter_is_skipped(self, registry, make_orchestrator, json_payload):
        full, _ = make_orchestrator(responses={"alpha": json_payload()})
        orchestrator = AnalysisOrchestrator(registry, {"alpha": full.adapters["alpha"]})

        consensus = await orchestrator.analyze_text("Only alpha has a key")

        assert [r.provider for r in consensus.individual_results] == ["Alpha"]

    @pytest.mark.asyncio
    async def test_invalid_request_rejected(self, make_orchestrator):
        orchestrator, _ = make_orchestrator()

        with pytest.raises(ValueError):
            await orchestrator.analyze(Modality.IMAGE, {"text": "no image"})


class TestAnalysisHistory:
    """Tests for per-subject analysis and progress history."""

    @pytest.mark.asyncio
    async def test_results_recorded_per_subject(self, make_orchestrator, json_payload):
        orchestrator, _ = make_orchestrator(responses={"alpha": json_payload(), "beta": json_payload()})

        await orchestrator.analyze_text("Day 1", {"subject_id": "p1"}, provider_subset=["alpha", "beta"])
        await orchestrator.analyze_text("Day 1", {"patientId": "p2"}, provider_subset=["alpha"])
        await orchestrator.analyze_text("No subject", provider_subset=["alpha"])

        assert len(orchestrator.get_analysis_history("p1")) == 2
        assert len(orchestrator.get_analysis_history("p2")) == 1
        assert orchestrator.get_analysis_history("nobody") == []

    @pytest.mark.asyncio
    async def test_history_is_bounded(self, registry, make_orchestrator, json_payload):
        full, _ = make_orchestrator(responses={"alpha": json_payload()})
        orchestrator = AnalysisOrchestrator(registry, full.adapters, analysis_history_window=3)

        for day in range(5):
            await orchestrator.analyze_text(f"Day {day}", {"subject_id": "p1"}, provider_subset=["alpha"])

        assert len(orchestrator.get_analysis_history("p1")) == 3

    @pytest.mark.asyncio
    async def test_progress_tracked_between_image_analyses(self, make_orchestrator):
        orchestrator, clients = make_orchestrator(responses={"alpha": image_payload(40)})
        context = {"subject_id": "p1"}

        first = await orchestrator.analyze_image(IMAGE, context, provider_subset=["alpha"])
        assert first.image_analysis.healing_progress == 40
        assert orchestrator.get_progress_history("p1") == []

        clients["alpha"].responses["alpha-vision"] = image_payload(60, infection=True)
        await orchestrator.analyze_image(IMAGE, context, provider_subset=["alpha"])

        history = orchestrator.get_progress_history("p1")
        assert len(history) == 1
        metrics = history[0].progress_metrics
        assert metrics.healing_rate == 20
        assert metrics.trend_direction == TrendDirection.IMPROVING
        assert "Infection signs detected" in metrics.key_changes
        assert "Signs of infection" in metrics.risk_factors
        assert metrics.time_to_healing == 2

    @pytest.mark.asyncio
    async def test_progress_compares_consensus_with_previous_consensus(self, make_orchestrator):
        orchestrator, clients = make_orchestrator(responses={
            "alpha": image_payload(40),
            "beta": image_payload(60),
        })
        context = {"subject_id": "p1"}
        subset = ["alpha", "beta"]

        first = await orchestrator.analyze_image(IMAGE, context, provider_subset=subset)
        assert first.analysis.healing_progress == 50

        clients["alpha"].responses["alpha-vision"] = image_payload(50)
        clients["beta"].responses["beta-vision"] = image_payload(50)
        second = await orchestrator.analyze_image(IMAGE, context, provider_subset=subset)

        comparison = orchestrator.get_progress_history("p1")[0]
        assert comparison.progress_metrics.healing_rate == 0
        assert comparison.progress_metrics.trend_direction == TrendDirection.STABLE
        assert comparison.previous_request_id == first.request_id
        assert comparison.request_id == second.request_id

    @pytest.mark.asyncio
    async def test_text_analyses_do_not_track_progress(self, make_orchestrator, json_payload):
        orchestrator, _ = make_orchestrator(responses={"alpha": json_payload()})

        for _ in range(2):
            await orchestrator.analyze_text("Text only", {"subject_id": "p1"}, provider_subset=["alpha"])

        assert orchestrator.get_progress_history("p1") == []
