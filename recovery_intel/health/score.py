"""
Health score, score trend and alerts.

The overall score blends four 0-100 sub-scores:

    physical 30% | mental 20% | compliance 25% | recovery 25%

Physical, mental and compliance come from the current sample alone;
recovery compares the last 7 recorded samples with the 7 before them.
"""

import uuid
from datetime import datetime
from typing import Sequence

from recovery_intel.models.enums import AlertType, RiskTier, TrendDirection
from recovery_intel.models.health import (
    HealthAlert,
    HealthMetricSample,
    ScoreBreakdown,
    ScoreTrend,
)

SCORE_WEIGHTS = {
    "physical": 0.3,
    "mental": 0.2,
    "compliance": 0.25,
    "recovery": 0.25,
}

DEFAULT_RECOVERY_SCORE = 70
RECOVERY_WINDOW = 7

# Score trend: last 3 samples vs the 3 before, needs a week of history
TREND_MIN_SAMPLES = 7
TREND_WINDOW = 3
TREND_BAND_PERCENT = 5

GENERIC_RECOMMENDATION = "Consult your healthcare provider for personalized advice."


def _clamp_score(value: float) -> int:
    return max(0, min(100, round(value)))


def _comfort(sample: HealthMetricSample) -> float:
    """Pain mapped onto a 0-100 scale where higher is better."""
    return 100 - sample.pain_level * 10


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def physical_score(sample: HealthMetricSample) -> int:
    score = 100 - sample.pain_level * 8
    score = score * 0.7 + sample.mobility_score * 0.3

    bp = sample.vital_signs.blood_pressure
    if bp is not None:
        if bp.systolic > 140 or bp.diastolic > 90:
            score -= 15
        if bp.systolic > 160 or bp.diastolic > 100:
            score -= 25

    heart_rate = sample.vital_signs.heart_rate
    if heart_rate is not None and (heart_rate > 100 or heart_rate < 60):
        score -= 10

    return _clamp_score(score)


def mental_score(sample: HealthMetricSample) -> int:
    score = (100 - sample.stress_level * 10) * 0.6 + sample.sleep_quality * 0.4
    return _clamp_score(score)


def compliance_score(sample: HealthMetricSample) -> int:
    return _clamp_score(sample.medication_adherence * 0.6 + sample.exercise_compliance * 0.4)


def recovery_score(history: Sequence[HealthMetricSample]) -> int:
    """
    70 plus the percentage change in comfort between the last 7 samples and
    the 7 before them. New subjects without an earlier window get 70.
    """
    recent = history[-RECOVERY_WINDOW:]
    older = history[-2 * RECOVERY_WINDOW:-RECOVERY_WINDOW]
    if not recent or not older:
        return DEFAULT_RECOVERY_SCORE

    older_avg = _mean([_comfort(s) for s in older])
    if older_avg == 0:
        return DEFAULT_RECOVERY_SCORE

    recent_avg = _mean([_comfort(s) for s in recent])
    improvement = (recent_avg - older_avg) / older_avg * 100
    return _clamp_score(DEFAULT_RECOVERY_SCORE + improvement)


def score_breakdown(sample: HealthMetricSample, history: Sequence[HealthMetricSample]) -> ScoreBreakdown:
    return ScoreBreakdown(
        physical=physical_score(sample),
        mental=mental_score(sample),
        compliance=compliance_score(sample),
        recovery=recovery_score(history),
    )


def overall_score(breakdown: ScoreBreakdown) -> int:
    return _clamp_score(sum(getattr(breakdown, name) * w for name, w in SCORE_WEIGHTS.items()))


def score_trend(history: Sequence[HealthMetricSample]) -> ScoreTrend:
    """Compare comfort over the last 3 samples with the 3 before them."""
    if len(history) < TREND_MIN_SAMPLES:
        return ScoreTrend(
            direction=TrendDirection.STABLE,
            change_percent=0,
            timeframe="insufficient data",
        )

    recent_avg = _mean([_comfort(s) for s in history[-TREND_WINDOW:]])
    previous_avg = _mean([_comfort(s) for s in history[-2 * TREND_WINDOW:-TREND_WINDOW]])

    if previous_avg == 0:
        change = 100.0 if recent_avg > 0 else 0.0
    else:
        change = (recent_avg - previous_avg) / previous_avg * 100

    if change > TREND_BAND_PERCENT:
        direction = TrendDirection.IMPROVING
    elif change < -TREND_BAND_PERCENT:
        direction = TrendDirection.DECLINING
    else:
        direction = TrendDirection.STABLE

    return ScoreTrend(direction=direction, change_percent=round(change), timeframe="last 7 days")


def _alert(kind: str, severity: RiskTier, alert_type: AlertType, message: str) -> HealthAlert:
    return HealthAlert(
        id=f"{kind}-{uuid.uuid4().hex[:8]}",
        severity=severity,
        type=alert_type,
        message=message,
        timestamp=datetime.now(),
    )


def health_alerts(sample: HealthMetricSample) -> list[HealthAlert]:
    """Alerts raised by the current sample's vitals, pain and adherence."""
    alerts = []

    bp = sample.vital_signs.blood_pressure
    if bp is not None:
        if bp.systolic > 180 or bp.diastolic > 110:
            alerts.append(_alert(
                "bp-critical", RiskTier.CRITICAL, AlertType.VITAL,
                "Blood pressure is critically high. Seek immediate medical attention.",
            ))
        elif bp.systolic > 160 or bp.diastolic > 100:
            alerts.append(_alert(
                "bp-high", RiskTier.HIGH, AlertType.VITAL,
                "Blood pressure is elevated. Contact your healthcare provider.",
            ))

    if sample.pain_level >= 8:
        alerts.append(_alert(
            "pain-high", RiskTier.HIGH, AlertType.SYMPTOM,
            "Severe pain detected. Consider contacting your healthcare provider.",
        ))

    if sample.medication_adherence < 60:
        alerts.append(_alert(
            "med-adherence", RiskTier.MEDIUM, AlertType.MEDICATION,
            "Medication adherence is low. This may affect your recovery.",
        ))

    temperature = sample.vital_signs.temperature
    if temperature is not None and temperature > 101.5:
        alerts.append(_alert(
            "temp-high", RiskTier.HIGH, AlertType.VITAL,
            "High fever detected. Contact your healthcare provider immediately.",
        ))

    return alerts


def rule_based_recommendations(sample: HealthMetricSample, breakdown: ScoreBreakdown) -> list[str]:
    """Recommendations used when no analysis provider is reachable."""
    recommendations = []
    if sample.pain_level >= 7:
        recommendations.append("Discuss pain management options with your healthcare provider")
    if sample.medication_adherence < 80:
        recommendations.append("Take your medication on schedule")
    if sample.exercise_compliance < 60:
        recommendations.append("Complete your prescribed recovery exercises")
    if sample.sleep_quality < 60:
        recommendations.append("Aim for a consistent sleep schedule")
    if sample.stress_level >= 7:
        recommendations.append("Practice stress reduction techniques")
    if breakdown.physical < 50 and sample.vital_signs.blood_pressure is not None:
        recommendations.append("Monitor blood pressure regularly")
    return recommendations or [GENERIC_RECOMMENDATION]


def recommendation_prompt(
    sample: HealthMetricSample,
    overall: int,
    history: Sequence[HealthMetricSample],
) -> str:
    """Text request for provider-generated recommendations."""
    recent = [s.model_dump(mode="json", by_alias=True) for s in history[-RECOVERY_WINDOW:]]
    return (
        "Given the patient's current health metrics and recent history, provide 3-5 "
        "concise, actionable recommendations to improve their overall health score.\n"
        f"Current metrics: {sample.model_dump_json(by_alias=True)}\n"
        f"Overall health score: {overall}\n"
        f"Recent history (last 7 samples): {recent}"
    )
