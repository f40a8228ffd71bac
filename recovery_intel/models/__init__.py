"""Data models for the recovery intelligence engine."""

from recovery_intel.models.analysis import (
    AnalysisRequest,
    ConsensusMetrics,
    ConsensusResult,
    ImageAnalysis,
    LLMResponse,
    PainAssessment,
    ProviderResult,
    StructuredAnalysis,
    SymptomScore,
    SymptomSeverity,
    TextAnalysis,
)
from recovery_intel.models.enums import (
    AlertType,
    Capability,
    Modality,
    PredictionSeverity,
    ProviderKind,
    RiskTier,
    Sentiment,
    TrendDirection,
    WoundHealing,
)
from recovery_intel.models.health import (
    BloodPressure,
    EnvironmentalFactors,
    HealthAlert,
    HealthMetricSample,
    HealthScore,
    PredictionPoint,
    RiskFactor,
    RiskModel,
    RiskPrediction,
    ScoreBreakdown,
    ScoreTrend,
    SeverityBands,
    TrendPoint,
    TrendSeries,
    VitalSigns,
)
from recovery_intel.models.progress import ProgressComparison, ProgressMetrics

__all__ = [
    "AlertType",
    "AnalysisRequest",
    "BloodPressure",
    "Capability",
    "ConsensusMetrics",
    "ConsensusResult",
    "EnvironmentalFactors",
    "HealthAlert",
    "HealthMetricSample",
    "HealthScore",
    "ImageAnalysis",
    "LLMResponse",
    "Modality",
    "PainAssessment",
    "PredictionPoint",
    "PredictionSeverity",
    "ProgressComparison",
    "ProgressMetrics",
    "ProviderKind",
    "ProviderResult",
    "RiskFactor",
    "RiskModel",
    "RiskPrediction",
    "RiskTier",
    "ScoreBreakdown",
    "ScoreTrend",
    "Sentiment",
    "SeverityBands",
    "StructuredAnalysis",
    "SymptomScore",
    "SymptomSeverity",
    "TextAnalysis",
    "TrendDirection",
    "TrendPoint",
    "TrendSeries",
    "VitalSigns",
    "WoundHealing",
]
