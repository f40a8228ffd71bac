"""
Metric trend computation and short-range prediction.

Each tracked metric is fitted with an ordinary least-squares line over the
sample index (the sample's position in the history stands in for time, so
irregular sampling intervals are not corrected for). The fitted slope
gives the trend direction and the line is extrapolated day by day for the
prediction, with confidence decaying as the horizon grows.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Sequence

import numpy as np

from recovery_intel.models.enums import TrendDirection
from recovery_intel.models.health import (
    HealthMetricSample,
    PredictionPoint,
    TrendPoint,
    TrendSeries,
)

logger = logging.getLogger(__name__)

# Slopes within +/- this band are "stable"
SLOPE_THRESHOLD = 0.1

# Fewer samples than this yields the insufficient-data sentinel
MIN_SAMPLES = 3

DEFAULT_HORIZON_DAYS = 7

MAX_CONFIDENCE = 0.9
CONFIDENCE_DECAY = 0.1
MIN_CONFIDENCE = 0.3


@dataclass(frozen=True)
class MetricSpec:
    """How a sample attribute is trended."""

    name: str
    label: str
    lower_is_better: bool = False
    min_value: float = 0.0
    max_value: float = 100.0

    def clamp(self, value: float) -> float:
        return max(self.min_value, min(self.max_value, value))


TRACKED_METRICS = [
    MetricSpec("pain_level", "Pain Level", lower_is_better=True, max_value=10.0),
    MetricSpec("mobility_score", "Mobility Score"),
    MetricSpec("medication_adherence", "Medication Adherence"),
    MetricSpec("exercise_compliance", "Exercise Compliance"),
    MetricSpec("sleep_quality", "Sleep Quality"),
    MetricSpec("stress_level", "Stress Level", lower_is_better=True, max_value=10.0),
]

METRICS_BY_NAME = {spec.name: spec for spec in TRACKED_METRICS}


def fit_line(values: Sequence[float]) -> tuple[float, float]:
    """
    Least-squares line through (index, value) points.

    Returns:
        (slope, intercept)
    """
    x = np.arange(len(values), dtype=float)
    slope, intercept = np.polyfit(x, np.asarray(values, dtype=float), 1)
    return float(slope), float(intercept)


def classify_slope(slope: float, lower_is_better: bool = False) -> TrendDirection:
    """Map a slope to a direction; the sign flips for lower-is-better metrics."""
    if lower_is_better:
        slope = -slope
    if slope > SLOPE_THRESHOLD:
        return TrendDirection.IMPROVING
    if slope < -SLOPE_THRESHOLD:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def prediction_confidence(day: int) -> float:
    """Confidence for the ``day``-th predicted day (1-based)."""
    return round(max(MIN_CONFIDENCE, MAX_CONFIDENCE - CONFIDENCE_DECAY * (day - 1)), 2)


def predict_values(
    samples: Sequence[HealthMetricSample],
    spec: MetricSpec,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    fit: Optional[tuple[float, float]] = None,
) -> list[PredictionPoint]:
    """
    Extrapolate a metric for the next ``horizon_days`` days.

    Args:
        samples: Ordered history, oldest first
        spec: Metric to predict
        horizon_days: Number of days to predict
        fit: Precomputed (slope, intercept), if available

    Returns:
        One PredictionPoint per day, values clamped to the metric range;
        empty when there are fewer than MIN_SAMPLES samples
    """
    if len(samples) < MIN_SAMPLES:
        return []

    slope, intercept = fit or fit_line([getattr(s, spec.name) for s in samples])
    n = len(samples)
    last_timestamp = samples[-1].timestamp

    return [
        PredictionPoint(
            date=last_timestamp + timedelta(days=day),
            predicted_value=spec.clamp(slope * (n + day - 1) + intercept),
            confidence=prediction_confidence(day),
        )
        for day in range(1, horizon_days + 1)
    ]


def compute_trend(
    samples: Sequence[HealthMetricSample],
    spec: MetricSpec,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> TrendSeries:
    """
    Build the TrendSeries for one metric.

    With fewer than MIN_SAMPLES samples the series carries the observed
    values, the ``insufficient_data`` direction and no prediction.
    """
    values = [TrendPoint(date=s.timestamp, value=getattr(s, spec.name)) for s in samples]

    if len(samples) < MIN_SAMPLES:
        return TrendSeries(
            metric=spec.name,
            label=spec.label,
            values=values,
            trend=TrendDirection.INSUFFICIENT_DATA,
        )

    slope, intercept = fit_line([point.value for point in values])

    return TrendSeries(
        metric=spec.name,
        label=spec.label,
        values=values,
        trend=classify_slope(slope, spec.lower_is_better),
        slope=slope,
        prediction=predict_values(samples, spec, horizon_days, fit=(slope, intercept)),
    )


def compute_trends(
    samples: Sequence[HealthMetricSample],
    metrics: Sequence[MetricSpec] = TRACKED_METRICS,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[TrendSeries]:
    """Trend every requested metric over the same samples."""
    if len(samples) < MIN_SAMPLES:
        logger.debug(f"Only {len(samples)} samples, trends need {MIN_SAMPLES}")
    return [compute_trend(samples, spec, horizon_days) for spec in metrics]
