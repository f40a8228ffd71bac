"""
Condition risk prediction from weighted factor models.

A RiskModel is a baseline plus a weighted sum of normalized signals:

    risk = baseline + sum(weight_i * signal_i),   signal_i in [0, 1]

Signals are plain functions of the current sample and the subject's
history, looked up by name in SIGNALS. Missing optional vitals produce a
zero signal rather than an error.
"""

import logging
from typing import Callable, Optional, Sequence

from recovery_intel.models.health import (
    HealthMetricSample,
    RiskFactor,
    RiskModel,
    RiskPrediction,
    SeverityBands,
)

logger = logging.getLogger(__name__)

SignalFn = Callable[[HealthMetricSample, Sequence[HealthMetricSample]], float]

ELEVATED_BP = (140, 90)
HIGH_BP = (160, 100)
FEVER_F = 100.4
SEVERE_PAIN = 7


def _bp_above(sample: HealthMetricSample, limits: tuple[float, float]) -> bool:
    bp = sample.vital_signs.blood_pressure
    if bp is None:
        return False
    return bp.systolic > limits[0] or bp.diastolic > limits[1]


def weather_pressure(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    env = sample.environmental_factors
    humid = env.humidity is not None and env.humidity > 80
    stormy = (env.weather or "").lower() == "stormy"
    return 1.0 if stormy or humid else 0.0


def stress_level(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    return sample.stress_level / 10


def poor_sleep(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    return (100 - sample.sleep_quality) / 100


def pain_history(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    """Recurring severe pain: more than two severe episodes on record."""
    episodes = sum(1 for h in history if h.pain_level > SEVERE_PAIN)
    return 1.0 if episodes > 2 else 0.0


def blood_pressure(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    if _bp_above(sample, HIGH_BP):
        return 1.0
    if _bp_above(sample, ELEVATED_BP):
        return 0.5
    return 0.0


def missed_medication(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    return (100 - sample.medication_adherence) / 100


def abnormal_heart_rate(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    heart_rate = sample.vital_signs.heart_rate
    if heart_rate is None:
        return 0.0
    return 1.0 if heart_rate > 100 or heart_rate < 60 else 0.0


def fever(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    temperature = sample.vital_signs.temperature
    return 1.0 if temperature is not None and temperature > FEVER_F else 0.0


def severe_pain(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> float:
    return 1.0 if sample.pain_level > SEVERE_PAIN else 0.0


SIGNALS: dict[str, SignalFn] = {
    "weather_pressure": weather_pressure,
    "stress_level": stress_level,
    "poor_sleep": poor_sleep,
    "pain_history": pain_history,
    "blood_pressure": blood_pressure,
    "missed_medication": missed_medication,
    "abnormal_heart_rate": abnormal_heart_rate,
    "fever": fever,
    "severe_pain": severe_pain,
}


DEFAULT_RISK_MODELS = [
    RiskModel(
        condition="Migraine",
        factors=[
            RiskFactor(signal="weather_pressure", label="Weather patterns", weight=0.3),
            RiskFactor(signal="stress_level", label="Stress level", weight=0.25),
            RiskFactor(signal="poor_sleep", label="Sleep quality", weight=0.25),
            RiskFactor(signal="pain_history", label="Recurring severe pain", weight=0.2),
        ],
        baseline_risk=0.15,
        cap_percentage=85,
        reporting_threshold=10,
        severity_bands=SeverityBands(medium=15, high=30),
        confidence=0.85,
        timeframe="next 24 hours",
        recommendations=[
            "Stay hydrated and avoid known triggers",
            "Practice stress reduction techniques",
            "Ensure adequate sleep tonight",
        ],
    ),
    RiskModel(
        condition="Hypertension Crisis",
        factors=[
            RiskFactor(signal="blood_pressure", label="Blood pressure readings", weight=0.4),
            RiskFactor(signal="missed_medication", label="Medication adherence", weight=0.3),
            RiskFactor(signal="abnormal_heart_rate", label="Heart rate", weight=0.2),
            RiskFactor(signal="stress_level", label="Stress level", weight=0.1),
        ],
        baseline_risk=0.05,
        cap_percentage=90,
        reporting_threshold=5,
        severity_bands=SeverityBands(medium=10, high=25),
        confidence=0.9,
        timeframe="next 48 hours",
        recommendations=[
            "Take prescribed blood pressure medication as directed",
            "Reduce sodium intake",
            "Monitor blood pressure regularly",
            "Contact healthcare provider if readings remain high",
        ],
    ),
    RiskModel(
        condition="Post-Surgical Infection",
        factors=[
            RiskFactor(signal="fever", label="Temperature elevation", weight=0.4),
            RiskFactor(signal="severe_pain", label="Pain level", weight=0.3),
            RiskFactor(signal="missed_medication", label="Antibiotic adherence", weight=0.3),
        ],
        baseline_risk=0.12,
        cap_percentage=80,
        reporting_threshold=8,
        severity_bands=SeverityBands(medium=10, high=20),
        confidence=0.8,
        timeframe="next 72 hours",
        recommendations=[
            "Monitor temperature regularly",
            "Keep incision site clean and dry",
            "Take antibiotics as prescribed",
            "Contact surgeon if symptoms worsen",
        ],
    ),
]


class RiskEngine:
    """Evaluates a set of risk models against a subject's metrics."""

    def __init__(
        self,
        models: Optional[Sequence[RiskModel]] = None,
        signals: Optional[dict[str, SignalFn]] = None,
    ):
        self.models = list(models) if models is not None else list(DEFAULT_RISK_MODELS)
        self.signals = signals or SIGNALS

        for model in self.models:
            unknown = [f.signal for f in model.factors if f.signal not in self.signals]
            if unknown:
                raise ValueError(f"Risk model {model.condition} uses unknown signals: {unknown}")

    def evaluate(
        self,
        model: RiskModel,
        sample: HealthMetricSample,
        history: Sequence[HealthMetricSample] = (),
    ) -> RiskPrediction:
        """Score one model; the result is produced even below the reporting threshold."""
        risk = model.baseline_risk
        contributing = []
        for factor in model.factors:
            signal = max(0.0, min(1.0, self.signals[factor.signal](sample, history)))
            if signal > 0:
                contributing.append(factor.label)
            risk += factor.weight * signal

        risk_percentage = max(0.0, min(model.cap_percentage, risk * 100))

        return RiskPrediction(
            condition=model.condition,
            risk_percentage=round(risk_percentage),
            confidence=model.confidence,
            factors=contributing,
            recommendations=list(model.recommendations),
            timeframe=model.timeframe,
            severity=model.severity_bands.classify(risk_percentage),
        )

    def predict(
        self,
        sample: HealthMetricSample,
        history: Sequence[HealthMetricSample] = (),
    ) -> list[RiskPrediction]:
        """
        Evaluate every model and keep those above their reporting threshold.

        Returns:
            Predictions sorted by risk percentage, highest first
        """
        predictions = []
        for model in self.models:
            prediction = self.evaluate(model, sample, history)
            if prediction.risk_percentage > model.reporting_threshold:
                predictions.append(prediction)
            else:
                logger.debug(
                    f"{model.condition} risk {prediction.risk_percentage}% "
                    f"below threshold {model.reporting_threshold}%"
                )

        return sorted(predictions, key=lambda p: p.risk_percentage, reverse=True)
