"""
Health intelligence service.

Keeps each subject's bounded metric history and answers trend, risk and
health-score queries over it.
"""

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from recovery_intel.errors import NoProviderAvailable
from recovery_intel.health.risk import RiskEngine
from recovery_intel.health.score import (
    health_alerts,
    overall_score,
    recommendation_prompt,
    rule_based_recommendations,
    score_breakdown,
    score_trend,
)
from recovery_intel.health.trends import DEFAULT_HORIZON_DAYS, TRACKED_METRICS, MetricSpec, compute_trends
from recovery_intel.models.health import (
    HealthMetricSample,
    HealthScore,
    RiskModel,
    RiskPrediction,
    TrendSeries,
)
from recovery_intel.storage.history import BoundedHistoryStore

if TYPE_CHECKING:
    from recovery_intel.analysis.orchestrator import AnalysisOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_WINDOW = 90


class HealthIntelligenceService:
    """
    Temporal trend and risk engine for subject health metrics.

    Histories are per subject and bounded (oldest samples evicted first);
    writes for one subject are serialized, reads work on snapshots.
    """

    def __init__(
        self,
        window: int = DEFAULT_HISTORY_WINDOW,
        risk_models: Optional[Sequence[RiskModel]] = None,
        orchestrator: Optional["AnalysisOrchestrator"] = None,
        metrics: Sequence[MetricSpec] = TRACKED_METRICS,
    ):
        """
        Initialize the service.

        Args:
            window: Samples kept per subject
            risk_models: Risk models to evaluate (defaults to the built-in set)
            orchestrator: Used for provider-generated recommendations; rule-based
                recommendations are used without one
            metrics: Metrics reported by get_trends
        """
        self.history: BoundedHistoryStore[HealthMetricSample] = BoundedHistoryStore(window)
        self.risk_engine = RiskEngine(risk_models)
        self.orchestrator = orchestrator
        self.metrics = list(metrics)

    async def record_metric_sample(self, subject_id: str, sample: HealthMetricSample) -> None:
        """Append a sample to the subject's history."""
        await self.history.append(subject_id, sample)
        logger.debug(f"Recorded metrics for {subject_id} ({self.history.size(subject_id)} samples)")

    def get_history(self, subject_id: str) -> list[HealthMetricSample]:
        return list(self.history.snapshot(subject_id))

    def get_trends(
        self,
        subject_id: str,
        window_days: int = 30,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ) -> list[TrendSeries]:
        """
        Trend every tracked metric over the subject's most recent samples.

        Args:
            subject_id: Subject to analyze
            window_days: Number of most recent samples considered (one per day)
            horizon_days: Days to predict ahead

        Returns:
            One TrendSeries per tracked metric; each is the insufficient-data
            sentinel when fewer than three samples are available
        """
        samples = self.history.latest(subject_id, window_days)
        return compute_trends(samples, self.metrics, horizon_days)

    async def predict_risks(
        self,
        subject_id: str,
        current_sample: HealthMetricSample,
    ) -> list[RiskPrediction]:
        """Reportable condition risks for the current sample, highest first."""
        history = self.history.snapshot(subject_id)
        predictions = self.risk_engine.predict(current_sample, history)
        logger.info(
            f"Risk predictions for {subject_id}: "
            f"{[(p.condition, p.risk_percentage) for p in predictions]}"
        )
        return predictions

    async def compute_health_score(
        self,
        subject_id: str,
        current_sample: HealthMetricSample,
    ) -> HealthScore:
        """
        Overall health score with breakdown, trend, recommendations and alerts.

        Args:
            subject_id: Subject to score
            current_sample: The latest observation (not necessarily recorded yet)

        Returns:
            HealthScore
        """
        history = self.history.snapshot(subject_id)
        breakdown = score_breakdown(current_sample, history)
        overall = overall_score(breakdown)

        return HealthScore(
            overall=overall,
            breakdown=breakdown,
            trends=score_trend(history),
            recommendations=await self._recommendations(current_sample, breakdown, overall, history),
            alerts=health_alerts(current_sample),
        )

    async def _recommendations(self, sample, breakdown, overall, history) -> list[str]:
        if self.orchestrator is None:
            return rule_based_recommendations(sample, breakdown)

        try:
            consensus = await self.orchestrator.analyze_text(
                recommendation_prompt(sample, overall, history)
            )
        except NoProviderAvailable as e:
            logger.warning(f"Falling back to rule-based recommendations: {e}")
            return rule_based_recommendations(sample, breakdown)

        return consensus.analysis.recommendations or rule_based_recommendations(sample, breakdown)
