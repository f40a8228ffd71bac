"""
Data models for health metric tracking, trends and risk prediction.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from recovery_intel.models.enums import (
    AlertType,
    PredictionSeverity,
    RiskTier,
    TrendDirection,
)


class HealthModel(BaseModel):
    """Base for health models (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BloodPressure(HealthModel):
    systolic: float = Field(..., gt=0)
    diastolic: float = Field(..., gt=0)


class VitalSigns(HealthModel):
    """Optional vitals; a missing field contributes nothing to any score."""

    blood_pressure: Optional[BloodPressure] = None
    heart_rate: Optional[float] = Field(default=None, gt=0)
    temperature: Optional[float] = Field(default=None, gt=0, description="Degrees Fahrenheit")
    oxygen_saturation: Optional[float] = Field(default=None, ge=0, le=100)


class EnvironmentalFactors(HealthModel):
    weather: Optional[str] = None
    air_quality: Optional[float] = None
    pollen_count: Optional[float] = None
    humidity: Optional[float] = Field(default=None, ge=0, le=100)


class HealthMetricSample(HealthModel):
    """One timestamped snapshot of a subject's health metrics."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    pain_level: float = Field(..., ge=0, le=10)
    mobility_score: float = Field(..., ge=0, le=100)
    medication_adherence: float = Field(..., ge=0, le=100)
    exercise_compliance: float = Field(..., ge=0, le=100)
    sleep_quality: float = Field(..., ge=0, le=100)
    stress_level: float = Field(..., ge=0, le=10)
    vital_signs: VitalSigns = Field(default_factory=VitalSigns)
    environmental_factors: EnvironmentalFactors = Field(default_factory=EnvironmentalFactors)


class TrendPoint(HealthModel):
    date: datetime
    value: float


class PredictionPoint(HealthModel):
    date: datetime
    predicted_value: float
    confidence: float = Field(..., ge=0.0, le=1.0)


class TrendSeries(HealthModel):
    """A metric's history, its direction and a short forward projection."""

    metric: str = Field(..., description="Metric attribute name, e.g. pain_level")
    label: str = Field(..., description="Display name, e.g. Pain Level")
    values: list[TrendPoint] = Field(default_factory=list)
    trend: TrendDirection
    slope: Optional[float] = None
    prediction: list[PredictionPoint] = Field(default_factory=list)


class RiskFactor(HealthModel):
    """One weighted term of a risk model."""

    signal: str = Field(..., description="Name of the normalized signal function")
    label: str = Field(..., description="Human readable factor name")
    weight: float = Field(..., ge=0.0, le=1.0)


class SeverityBands(HealthModel):
    """Percentage thresholds above which a prediction is medium/high."""

    medium: float
    high: float

    def classify(self, risk_percentage: float) -> PredictionSeverity:
        if risk_percentage > self.high:
            return PredictionSeverity.HIGH
        if risk_percentage > self.medium:
            return PredictionSeverity.MEDIUM
        return PredictionSeverity.LOW


class RiskModel(HealthModel):
    """Static weighted-factor model for one condition."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    condition: str
    factors: list[RiskFactor]
    baseline_risk: float = Field(..., ge=0.0, le=1.0)
    cap_percentage: float = Field(default=100.0, ge=0.0, le=100.0)
    reporting_threshold: float = Field(
        default=0.0,
        ge=0.0,
        description="Only predictions with a higher percentage are reported",
    )
    severity_bands: SeverityBands
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    timeframe: str = "next 24 hours"
    recommendations: list[str] = Field(default_factory=list)


class RiskPrediction(HealthModel):
    condition: str
    risk_percentage: int = Field(..., ge=0, le=100)
    confidence: float = Field(..., ge=0.0, le=1.0)
    factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    timeframe: str
    severity: PredictionSeverity


class HealthAlert(HealthModel):
    id: str
    severity: RiskTier
    type: AlertType
    message: str
    action_required: bool = True
    timestamp: datetime = Field(default_factory=datetime.now)
    resolved: bool = False


class ScoreBreakdown(HealthModel):
    physical: int = Field(..., ge=0, le=100)
    mental: int = Field(..., ge=0, le=100)
    compliance: int = Field(..., ge=0, le=100)
    recovery: int = Field(..., ge=0, le=100)


class ScoreTrend(HealthModel):
    direction: TrendDirection
    change_percent: int = 0
    timeframe: str


class HealthScore(HealthModel):
    overall: int = Field(..., ge=0, le=100)
    breakdown: ScoreBreakdown
    trends: ScoreTrend
    recommendations: list[str] = Field(default_factory=list)
    alerts: list[HealthAlert] = Field(default_factory=list)
