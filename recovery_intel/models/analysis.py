"""
Data models for multi-provider analysis and consensus.

Provider payloads arrive as camelCase JSON; every model accepts both the
camelCase wire names and the snake_case attribute names, and serializes
back to camelCase with ``model_dump(by_alias=True)``.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from recovery_intel.models.enums import Modality, RiskTier, Sentiment, WoundHealing


# Synonyms providers use for the risk tiers
_RISK_SYNONYMS = {
    "moderate": "medium",
    "severe": "critical",
    "emergency": "critical",
    "minimal": "low",
    "none": "low",
}


class WireModel(BaseModel):
    """Base for models exchanged with providers and API clients."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PainAssessment(WireModel):
    """Provider estimate of the patient's pain."""

    estimated_level: float = Field(..., ge=0, le=10, description="Pain level (1-10)")
    type: Optional[str] = Field(default=None, description="acute, chronic, neuropathic")
    location: list[str] = Field(default_factory=list)


class SymptomScore(WireModel):
    """Severity of a single symptom."""

    symptom: str
    severity: float = Field(..., ge=0, le=10)


class SymptomSeverity(WireModel):
    """Overall and per-symptom severity."""

    overall: float = Field(..., ge=0, le=10)
    individual: list[SymptomScore] = Field(default_factory=list)


class StructuredAnalysis(WireModel):
    """The common result shape every provider output is normalized into."""

    medical_findings: list[str] = Field(default_factory=list)
    risk_assessment: RiskTier = Field(..., description="Overall risk tier")
    recommendations: list[str] = Field(default_factory=list)
    follow_up_required: bool = False
    urgent_care: bool = False
    healing_progress: Optional[float] = Field(default=None, ge=0, le=100)
    infection_risk: Optional[float] = Field(default=None, ge=0, le=100)
    pain_assessment: Optional[PainAssessment] = None
    symptom_severity: Optional[SymptomSeverity] = None
    reasoning: Optional[str] = None

    @field_validator("risk_assessment", mode="before")
    @classmethod
    def _normalize_risk(cls, value: Any) -> Any:
        if isinstance(value, str):
            key = value.strip().lower()
            return _RISK_SYNONYMS.get(key, key)
        return value

    @field_validator("medical_findings", "recommendations", mode="before")
    @classmethod
    def _coerce_string_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value


class ImageAnalysis(WireModel):
    """Wound-image specific assessment from vision providers."""

    wound_healing: Optional[WoundHealing] = None
    infection_signs: bool = False
    healing_progress: Optional[float] = Field(default=None, ge=0, le=100)
    visual_changes: list[str] = Field(default_factory=list)

    @field_validator("wound_healing", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class TextAnalysis(WireModel):
    """Linguistic and emotional reading of the patient's description."""

    sentiment: Optional[Sentiment] = None
    emotional_state: Optional[str] = None
    comprehension_level: Optional[float] = Field(default=None, ge=0, le=1)
    linguistic_markers: list[str] = Field(default_factory=list)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class AnalysisRequest(WireModel):
    """A single request to analyze patient content."""

    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    modality: Modality
    text: str = ""
    images: list[str] = Field(
        default_factory=list,
        description="Images as data URLs (data:image/jpeg;base64,...)",
    )
    context: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_content(self) -> "AnalysisRequest":
        if self.modality in (Modality.TEXT, Modality.MULTIMODAL) and not self.text.strip():
            raise ValueError(f"{self.modality.value} analysis requires text content")
        if self.modality in (Modality.IMAGE, Modality.MULTIMODAL) and not self.images:
            raise ValueError(f"{self.modality.value} analysis requires at least one image")
        return self

    @property
    def subject_id(self) -> Optional[str]:
        """Subject the request is about, if the context names one."""
        value = self.context.get("subject_id") or self.context.get("patientId")
        return str(value) if value else None


class LLMResponse(BaseModel):
    """Response from a provider API call."""

    content: str = Field(..., description="Response content")
    model: str = Field(..., description="Model that generated the response")
    input_tokens: int = Field(default=0)
    output_tokens: int = Field(default=0)
    finish_reason: str = Field(default="stop")


class ProviderResult(WireModel):
    """One provider's normalized analysis of a request."""

    provider: str = Field(..., description="Provider that produced the result")
    confidence: float = Field(..., ge=0.0, le=1.0)
    analysis: StructuredAnalysis
    image_analysis: Optional[ImageAnalysis] = None
    text_analysis: Optional[TextAnalysis] = None
    structured: bool = Field(
        default=True,
        description="False when the analysis came from free-text fallback extraction",
    )
    raw_content: str = Field(default="", exclude=True)
    processing_time_ms: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=datetime.now)


class ConsensusMetrics(WireModel):
    """How much the contributing providers agreed."""

    agreement_level: float = Field(..., ge=0.0, le=1.0)
    signal_agreement: dict[str, float] = Field(
        default_factory=dict,
        description="Plurality agreement per compared signal (risk_tier, urgent_care)",
    )
    conflicting_findings: list[str] = Field(default_factory=list)
    reliability_score: float = Field(..., ge=0.0, le=1.0)
    recommendation_strength: float = Field(..., ge=0.0, le=1.0)


class ConsensusResult(WireModel):
    """The single judgment synthesized from all successful providers."""

    provider: str = "Consensus"
    request_id: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    analysis: StructuredAnalysis
    image_analysis: Optional[ImageAnalysis] = None
    text_analysis: Optional[TextAnalysis] = None
    consensus_metrics: ConsensusMetrics
    individual_results: list[ProviderResult] = Field(default_factory=list)
    processing_time_ms: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=datetime.now)
