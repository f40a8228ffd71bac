"""
Wound healing progress tracking.

Compares each new image consensus for a subject with the subject's previous
image consensus and keeps a bounded history of the comparisons.
"""

import logging
from typing import Optional, Sequence

from recovery_intel.models.analysis import ConsensusResult
from recovery_intel.models.enums import RiskTier, TrendDirection
from recovery_intel.models.progress import ProgressComparison, ProgressMetrics
from recovery_intel.storage.history import BoundedHistoryStore

logger = logging.getLogger(__name__)

# Healing-progress change (points) beyond which the trend is not "stable"
STABLE_BAND = 5


def estimate_time_to_healing(current_progress: float, healing_rate: float) -> Optional[int]:
    """
    Estimate days until fully healed at the current rate.

    Returns None when not improving, nearly healed, or the estimate is
    outside (0, 365) days.
    """
    if healing_rate <= 0 or current_progress >= 95:
        return None

    estimated_days = round((100 - current_progress) / healing_rate)
    return estimated_days if 0 < estimated_days < 365 else None


def compare_progress(
    subject_id: str,
    current: ConsensusResult,
    previous: ConsensusResult,
) -> ProgressComparison:
    """
    Build a progress comparison between two image consensus results.

    Args:
        subject_id: Subject being tracked
        current: The new image consensus
        previous: The subject's previous image consensus

    Returns:
        ProgressComparison
    """
    current_healing = current.analysis.healing_progress or 0
    previous_healing = previous.analysis.healing_progress or 0
    healing_rate = current_healing - previous_healing

    if healing_rate > STABLE_BAND:
        direction = TrendDirection.IMPROVING
    elif healing_rate < -STABLE_BAND:
        direction = TrendDirection.DECLINING
    else:
        direction = TrendDirection.STABLE

    key_changes = []
    now, before = current.image_analysis, previous.image_analysis
    if now and before:
        if now.infection_signs != before.infection_signs:
            key_changes.append(
                "Infection signs detected" if now.infection_signs else "Infection signs resolved"
            )
        if now.wound_healing and before.wound_healing and now.wound_healing != before.wound_healing:
            key_changes.append(
                f"Healing status changed from {before.wound_healing.value} to {now.wound_healing.value}"
            )

    risk_factors = []
    if current.analysis.risk_assessment >= RiskTier.HIGH:
        risk_factors.append("High risk assessment")
    if now and now.infection_signs:
        risk_factors.append("Signs of infection")

    return ProgressComparison(
        subject_id=subject_id,
        request_id=current.request_id,
        previous_request_id=previous.request_id,
        progress_metrics=ProgressMetrics(
            healing_rate=max(-100, min(100, healing_rate)),
            trend_direction=direction,
            key_changes=key_changes,
            time_to_healing=estimate_time_to_healing(current_healing, healing_rate),
            risk_factors=risk_factors,
        ),
    )


class ProgressTracker:
    """Keeps the last N progress comparisons per subject."""

    def __init__(self, window: int = 30):
        self.history: BoundedHistoryStore[ProgressComparison] = BoundedHistoryStore(window)

    async def track(
        self,
        subject_id: str,
        current: ConsensusResult,
        earlier: Sequence[ConsensusResult],
    ) -> Optional[ProgressComparison]:
        """
        Record a comparison against the previous image consensus.

        Args:
            subject_id: Subject being tracked
            current: The new image consensus
            earlier: The subject's image consensus history before this request

        Returns:
            The recorded comparison, or None if there is nothing to compare with
        """
        previous_images = [c for c in earlier if c.image_analysis]
        if not previous_images:
            return None

        comparison = compare_progress(subject_id, current, previous_images[-1])
        await self.history.append(subject_id, comparison)

        logger.info(
            f"Healing progress for {subject_id}: "
            f"{comparison.progress_metrics.trend_direction.value} "
            f"({comparison.progress_metrics.healing_rate:+.0f})"
        )
        return comparison

    def get_history(self, subject_id: str) -> list[ProgressComparison]:
        return list(self.history.snapshot(subject_id))
