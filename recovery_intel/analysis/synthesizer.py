"""
Consensus synthesis across provider results.

Merges N independent ProviderResults into one ConsensusResult:

- findings, pain locations, visual changes, markers: ordered union
- risk tier: mean ordinal score mapped back to the nearest tier
- recommendations: confidence-weighted votes, top 5
- urgent care / follow-up / infection signs: strict majority
- numeric sub-scores: mean over the results that report them
- categorical labels (pain type, wound healing, sentiment, emotional
  state): plurality, first-seen wins ties
- agreement: mean plurality fraction over risk tier and urgent care
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Hashable, Iterable, Optional, Sequence, TypeVar

from recovery_intel.models.analysis import (
    ConsensusMetrics,
    ConsensusResult,
    ImageAnalysis,
    PainAssessment,
    ProviderResult,
    StructuredAnalysis,
    SymptomScore,
    SymptomSeverity,
    TextAnalysis,
)
from recovery_intel.models.enums import RiskTier

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)

MAX_RECOMMENDATIONS = 5


def most_common(values: Sequence[T]) -> Optional[T]:
    """Plurality value; ties go to the value seen first."""
    counts: dict = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1

    best = None
    best_count = 0
    for value, count in counts.items():
        if count > best_count:
            best, best_count = value, count
    return best


def ordered_union(groups: Iterable[Iterable[T]]) -> list[T]:
    """Union of several lists, keeping first-appearance order."""
    seen = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return list(seen)


def _mean(values: Sequence[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def _majority(flags: Sequence[bool]) -> bool:
    return sum(1 for f in flags if f) > len(flags) / 2


class ConsensusSynthesizer:
    """
    Synthesizes provider results into a single consensus judgment.
    """

    def __init__(self, max_recommendations: int = MAX_RECOMMENDATIONS):
        self.max_recommendations = max_recommendations

    def synthesize(
        self,
        results: Sequence[ProviderResult],
        request_id: Optional[str] = None,
    ) -> ConsensusResult:
        """
        Merge provider results into a ConsensusResult.

        Args:
            results: One or more provider results
            request_id: Optional id of the originating request

        Returns:
            Immutable ConsensusResult carrying every contributing result

        Raises:
            ValueError: if results is empty
        """
        if not results:
            raise ValueError("No analysis results provided")

        results = list(results)
        if len(results) == 1:
            return self._single(results[0], request_id)

        analysis = StructuredAnalysis(
            medical_findings=ordered_union(r.analysis.medical_findings for r in results),
            risk_assessment=self.consensus_risk([r.analysis.risk_assessment for r in results]),
            recommendations=self.weighted_recommendations(results),
            follow_up_required=_majority([r.analysis.follow_up_required for r in results]),
            urgent_care=_majority([r.analysis.urgent_care for r in results]),
            healing_progress=_mean([
                r.analysis.healing_progress for r in results
                if r.analysis.healing_progress is not None
            ]),
            infection_risk=_mean([
                r.analysis.infection_risk for r in results
                if r.analysis.infection_risk is not None
            ]),
            pain_assessment=self._consensus_pain(results),
            symptom_severity=self._consensus_symptoms(results),
        )

        signal_agreement = self.signal_agreement(results)
        agreement_level = sum(signal_agreement.values()) / len(signal_agreement)
        avg_confidence = sum(r.confidence for r in results) / len(results)

        metrics = ConsensusMetrics(
            agreement_level=agreement_level,
            signal_agreement=signal_agreement,
            conflicting_findings=self.identify_conflicts(results),
            reliability_score=(avg_confidence + agreement_level) / 2,
            recommendation_strength=avg_confidence,
        )

        image_results = [r.image_analysis for r in results if r.image_analysis]
        text_results = [r.text_analysis for r in results if r.text_analysis]

        consensus = ConsensusResult(
            request_id=request_id,
            confidence=avg_confidence,
            analysis=analysis,
            image_analysis=self._consensus_image(image_results) if image_results else None,
            text_analysis=self._consensus_text(text_results) if text_results else None,
            consensus_metrics=metrics,
            individual_results=results,
            processing_time_ms=max(r.processing_time_ms for r in results),
            timestamp=datetime.now(),
        )

        logger.info(
            f"Consensus from {len(results)} providers: risk={analysis.risk_assessment.value}, "
            f"agreement={agreement_level:.2f}, conflicts={len(metrics.conflicting_findings)}"
        )
        return consensus

    def _single(self, result: ProviderResult, request_id: Optional[str]) -> ConsensusResult:
        """A lone result passes through unchanged with full agreement."""
        return ConsensusResult(
            request_id=request_id,
            confidence=result.confidence,
            analysis=result.analysis,
            image_analysis=result.image_analysis,
            text_analysis=result.text_analysis,
            consensus_metrics=ConsensusMetrics(
                agreement_level=1.0,
                signal_agreement={"risk_tier": 1.0, "urgent_care": 1.0},
                conflicting_findings=[],
                reliability_score=result.confidence,
                recommendation_strength=result.confidence,
            ),
            individual_results=[result],
            processing_time_ms=result.processing_time_ms,
            timestamp=datetime.now(),
        )

    @staticmethod
    def consensus_risk(risks: Sequence[RiskTier]) -> RiskTier:
        """Average the ordinal scores and map back to the nearest tier."""
        avg_score = sum(RiskTier(r).score for r in risks) / len(risks)
        return RiskTier.from_score(avg_score)

    def weighted_recommendations(self, results: Sequence[ProviderResult]) -> list[str]:
        """
        Rank recommendations by summed provider confidence.

        Recommendations differing only in case or surrounding whitespace are
        merged; the first-seen spelling is kept.
        """
        weights: dict[str, float] = {}
        spellings: dict[str, str] = {}
        for result in results:
            keys = {}
            for rec in result.analysis.recommendations:
                key = rec.strip().casefold()
                if key:
                    keys.setdefault(key, rec.strip())
            for key, rec in keys.items():
                spellings.setdefault(key, rec)
                weights[key] = weights.get(key, 0.0) + result.confidence

        # sorted() is stable, so equal weights keep first-appearance order
        ranked = sorted(weights.items(), key=lambda item: item[1], reverse=True)
        return [spellings[key] for key, _ in ranked[:self.max_recommendations]]

    @staticmethod
    def signal_agreement(results: Sequence[ProviderResult]) -> dict[str, float]:
        """Fraction of results matching the plurality value, per signal."""
        if len(results) < 2:
            return {"risk_tier": 1.0, "urgent_care": 1.0}

        signals = {
            "risk_tier": [r.analysis.risk_assessment for r in results],
            "urgent_care": [r.analysis.urgent_care for r in results],
        }

        agreement = {}
        for name, values in signals.items():
            plurality = most_common(values)
            agreement[name] = sum(1 for v in values if v == plurality) / len(values)
        return agreement

    @staticmethod
    def identify_conflicts(results: Sequence[ProviderResult]) -> list[str]:
        conflicts = []

        tiers = ordered_union([[r.analysis.risk_assessment] for r in results])
        if len(tiers) >= 3:
            conflicts.append(f"Risk assessment varies: {', '.join(t.value for t in tiers)}")

        urgent_flags = {r.analysis.urgent_care for r in results}
        if len(urgent_flags) > 1:
            conflicts.append("Conflicting urgent care recommendations")

        return conflicts

    @staticmethod
    def _consensus_pain(results: Sequence[ProviderResult]) -> Optional[PainAssessment]:
        assessments = [r.analysis.pain_assessment for r in results if r.analysis.pain_assessment]
        if not assessments:
            return None

        return PainAssessment(
            estimated_level=_mean([a.estimated_level for a in assessments]),
            type=most_common([a.type for a in assessments if a.type]),
            location=ordered_union(a.location for a in assessments),
        )

    @staticmethod
    def _consensus_symptoms(results: Sequence[ProviderResult]) -> Optional[SymptomSeverity]:
        severities = [r.analysis.symptom_severity for r in results if r.analysis.symptom_severity]
        if not severities:
            return None

        per_symptom: dict[str, list[float]] = defaultdict(list)
        for severity in severities:
            for item in severity.individual:
                per_symptom[item.symptom].append(item.severity)

        return SymptomSeverity(
            overall=_mean([s.overall for s in severities]),
            individual=[
                SymptomScore(symptom=symptom, severity=_mean(scores))
                for symptom, scores in per_symptom.items()
            ],
        )

    @staticmethod
    def _consensus_image(analyses: Sequence[ImageAnalysis]) -> ImageAnalysis:
        return ImageAnalysis(
            wound_healing=most_common([a.wound_healing for a in analyses if a.wound_healing]),
            infection_signs=_majority([a.infection_signs for a in analyses]),
            healing_progress=_mean([
                a.healing_progress for a in analyses if a.healing_progress is not None
            ]),
            visual_changes=ordered_union(a.visual_changes for a in analyses),
        )

    @staticmethod
    def _consensus_text(analyses: Sequence[TextAnalysis]) -> TextAnalysis:
        return TextAnalysis(
            sentiment=most_common([a.sentiment for a in analyses if a.sentiment]),
            emotional_state=most_common([a.emotional_state for a in analyses if a.emotional_state]),
            comprehension_level=_mean([
                a.comprehension_level for a in analyses if a.comprehension_level is not None
            ]),
            linguistic_markers=ordered_union(a.linguistic_markers for a in analyses),
        )
