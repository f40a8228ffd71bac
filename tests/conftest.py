"""
Pytest configuration and shared fixtures for the test suite.
"""

import json
from datetime import datetime, timedelta

import pytest

from recovery_intel.analysis.orchestrator import AnalysisOrchestrator
from recovery_intel.llm.client import MockProviderClient
from recovery_intel.models.analysis import (
    ImageAnalysis,
    ProviderResult,
    StructuredAnalysis,
)
from recovery_intel.models.enums import Capability, Modality, RiskTier
from recovery_intel.models.health import (
    BloodPressure,
    EnvironmentalFactors,
    HealthMetricSample,
    VitalSigns,
)
from recovery_intel.providers.adapter import ProviderAdapter
from recovery_intel.providers.registry import ProviderConfig, ProviderModels, ProviderRegistry


# ============================================================================
# Provider Results
# ============================================================================

@pytest.fixture
def make_result():
    """Factory for provider results with the fields consensus cares about."""
    def _create(
        provider: str = "Alpha",
        risk: RiskTier = RiskTier.LOW,
        urgent_care: bool = False,
        follow_up: bool = False,
        confidence: float = 0.9,
        recommendations: list[str] = None,
        findings: list[str] = None,
        healing_progress: float = None,
        image_analysis: ImageAnalysis = None,
        processing_time_ms: int = 100,
    ) -> ProviderResult:
        return ProviderResult(
            provider=provider,
            confidence=confidence,
            analysis=StructuredAnalysis(
                medical_findings=findings or [],
                risk_assessment=risk,
                recommendations=recommendations or [],
                follow_up_required=follow_up,
                urgent_care=urgent_care,
                healing_progress=healing_progress,
            ),
            image_analysis=image_analysis,
            processing_time_ms=processing_time_ms,
        )
    return _create


@pytest.fixture
def json_payload():
    """Factory for a provider's structured JSON answer."""
    def _create(
        risk: str = "low",
        urgent_care: bool = False,
        recommendations: list[str] = None,
        **extra,
    ) -> str:
        payload = {
            "medicalFindings": ["mild swelling"],
            "riskAssessment": risk,
            "recommendations": recommendations or ["Keep wound clean"],
            "followUpRequired": False,
            "urgentCare": urgent_care,
        }
        payload.update(extra)
        return json.dumps(payload)
    return _create


# ============================================================================
# Providers
# ============================================================================

@pytest.fixture
def provider_configs():
    """Three test providers with different capabilities and reliabilities."""
    return [
        ProviderConfig(
            name="alpha",
            display_name="Alpha",
            models=ProviderModels(text="alpha-text", vision="alpha-vision", multimodal="alpha-mm"),
            capabilities=frozenset({Capability.TEXT, Capability.VISION, Capability.MULTIMODAL}),
            reliability=0.9,
        ),
        ProviderConfig(
            name="beta",
            display_name="Beta",
            models=ProviderModels(text="beta-text", vision="beta-vision"),
            capabilities=frozenset({Capability.TEXT, Capability.VISION}),
            reliability=0.8,
        ),
        ProviderConfig(
            name="gamma",
            display_name="Gamma",
            models=ProviderModels(text="gamma-text"),
            capabilities=frozenset({Capability.TEXT}),
            reliability=0.7,
        ),
    ]


@pytest.fixture
def registry(provider_configs):
    return ProviderRegistry(
        provider_configs,
        default_selection={
            Modality.TEXT: ["alpha", "beta", "gamma"],
            Modality.IMAGE: ["alpha", "beta", "gamma"],
            Modality.MULTIMODAL: ["alpha", "beta"],
        },
    )


@pytest.fixture
def make_orchestrator(registry):
    """
    Factory for an orchestrator over mock clients.

    ``responses`` and ``failures`` are keyed by provider name and apply to
    every model of that provider.
    """
    def _create(
        responses: dict[str, str] = None,
        failures: dict[str, Exception] = None,
        delays: dict[str, float] = None,
        provider_timeout: float = 5.0,
    ) -> tuple[AnalysisOrchestrator, dict[str, MockProviderClient]]:
        responses = responses or {}
        failures = failures or {}
        delays = delays or {}

        clients = {}
        adapters = {}
        for config in registry:
            models = [m for m in (config.models.text, config.models.vision, config.models.multimodal) if m]
            client = MockProviderClient(
                responses={m: responses[config.name] for m in models if config.name in responses},
                failures={m: failures[config.name] for m in models if config.name in failures},
                delay=delays.get(config.name, 0.0),
            )
            clients[config.name] = client
            adapters[config.name] = ProviderAdapter(config, client)

        orchestrator = AnalysisOrchestrator(
            registry=registry,
            adapters=adapters,
            provider_timeout=provider_timeout,
        )
        return orchestrator, clients
    return _create


# ============================================================================
# Health Metrics
# ============================================================================

@pytest.fixture
def make_sample():
    """Factory for health metric samples with healthy defaults."""
    def _create(
        pain_level: float = 2,
        mobility_score: float = 70,
        medication_adherence: float = 100,
        exercise_compliance: float = 80,
        sleep_quality: float = 80,
        stress_level: float = 2,
        systolic: float = None,
        diastolic: float = None,
        heart_rate: float = None,
        temperature: float = None,
        weather: str = None,
        humidity: float = None,
        timestamp: datetime = None,
    ) -> HealthMetricSample:
        blood_pressure = None
        if systolic is not None and diastolic is not None:
            blood_pressure = BloodPressure(systolic=systolic, diastolic=diastolic)
        return HealthMetricSample(
            timestamp=timestamp or datetime(2024, 3, 1, 9, 0),
            pain_level=pain_level,
            mobility_score=mobility_score,
            medication_adherence=medication_adherence,
            exercise_compliance=exercise_compliance,
            sleep_quality=sleep_quality,
            stress_level=stress_level,
            vital_signs=VitalSigns(
                blood_pressure=blood_pressure,
                heart_rate=heart_rate,
                temperature=temperature,
            ),
            environmental_factors=EnvironmentalFactors(weather=weather, humidity=humidity),
        )
    return _create


@pytest.fixture
def daily_samples(make_sample):
    """Factory for one sample per day with the given pain levels."""
    def _create(pain_levels: list[float], start: datetime = datetime(2024, 3, 1, 9, 0), **kwargs):
        return [
            make_sample(pain_level=pain, timestamp=start + timedelta(days=i), **kwargs)
            for i, pain in enumerate(pain_levels)
        ]
    return _create
