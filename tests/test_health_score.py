"""Tests for health score components, score trend and alerts."""

import pytest

from recovery_intel.health.score import (
    GENERIC_RECOMMENDATION,
    compliance_score,
    health_alerts,
    mental_score,
    overall_score,
    physical_score,
    recovery_score,
    rule_based_recommendations,
    score_breakdown,
    score_trend,
)
from recovery_intel.models.enums import AlertType, RiskTier, TrendDirection


class TestSubScores:
    """Tests for the four sub-scores."""

    def test_baseline_sample(self, make_sample):
        sample = make_sample(mobility_score=80)

        breakdown = score_breakdown(sample, [])

        assert breakdown.physical == 83
        assert breakdown.mental == 80
        assert breakdown.compliance == 92
        assert breakdown.recovery == 70
        assert overall_score(breakdown) == 81

    def test_blood_pressure_penalties(self, make_sample):
        assert physical_score(make_sample(mobility_score=80, systolic=145, diastolic=85)) == 68
        assert physical_score(make_sample(mobility_score=80, systolic=165, diastolic=85)) == 43

    def test_heart_rate_penalty(self, make_sample):
        assert physical_score(make_sample(mobility_score=80, heart_rate=50)) == 73
        assert physical_score(make_sample(mobility_score=80, heart_rate=72)) == 83

    def test_scores_clamped(self, make_sample):
        worst = make_sample(
            pain_level=10, mobility_score=0, sleep_quality=0, stress_level=10,
            medication_adherence=0, exercise_compliance=0, systolic=200, diastolic=120, heart_rate=130,
        )

        breakdown = score_breakdown(worst, [])

        assert breakdown.physical == 0
        assert breakdown.mental == 0
        assert breakdown.compliance == 0
        assert 0 <= overall_score(breakdown) <= 100

    def test_mental_and_compliance(self, make_sample):
        sample = make_sample(stress_level=5, sleep_quality=50, medication_adherence=50, exercise_compliance=100)

        assert mental_score(sample) == 50
        assert compliance_score(sample) == 70


class TestRecoveryScore:
    """Tests for the week-over-week recovery sub-score."""

    def test_default_without_previous_week(self, daily_samples):
        assert recovery_score(daily_samples([5] * 7)) == 70

    def test_improvement(self, daily_samples):
        assert recovery_score(daily_samples([5] * 7 + [4] * 7)) == 90

    def test_large_improvement_clamped(self, daily_samples):
        assert recovery_score(daily_samples([6] * 7 + [4] * 7)) == 100

    def test_decline(self, daily_samples):
        assert recovery_score(daily_samples([4] * 7 + [5] * 7)) == 53

    def test_zero_baseline_does_not_divide(self, daily_samples):
        assert recovery_score(daily_samples([10] * 7 + [5] * 7)) == 70


class TestScoreTrend:
    """Tests for the short-term score trend."""

    def test_insufficient_history(self, daily_samples):
        trend = score_trend(daily_samples([5] * 6))

        assert trend.direction == TrendDirection.STABLE
        assert trend.timeframe == "insufficient data"

    @pytest.mark.parametrize("pains,direction,change", [
        ([5, 5, 5, 5, 4, 4, 4], TrendDirection.IMPROVING, 20),
        ([4, 4, 4, 4, 5, 5, 5], TrendDirection.DECLINING, -17),
        ([5, 5, 5, 5, 5, 5, 5], TrendDirection.STABLE, 0),
    ])
    def test_direction(self, daily_samples, pains, direction, change):
        trend = score_trend(daily_samples(pains))

        assert trend.direction == direction
        assert trend.change_percent == change
        assert trend.timeframe == "last 7 days"


class TestHealthAlerts:
    """Tests for alert generation."""

    def test_no_alerts_for_healthy_sample(self, make_sample):
        assert health_alerts(make_sample(systolic=120, diastolic=80, temperature=98.6)) == []

    def test_critical_blood_pressure(self, make_sample):
        alerts = health_alerts(make_sample(systolic=185, diastolic=100))

        assert len(alerts) == 1
        assert alerts[0].severity == RiskTier.CRITICAL
        assert alerts[0].type == AlertType.VITAL
        assert alerts[0].id.startswith("bp-critical-")

    def test_high_blood_pressure(self, make_sample):
        alerts = health_alerts(make_sample(systolic=150, diastolic=105))

        assert [a.severity for a in alerts] == [RiskTier.HIGH]

    def test_symptom_medication_and_fever(self, make_sample):
        alerts = health_alerts(make_sample(pain_level=8, medication_adherence=50, temperature=102))

        assert [(a.type, a.severity) for a in alerts] == [
            (AlertType.SYMPTOM, RiskTier.HIGH),
            (AlertType.MEDICATION, RiskTier.MEDIUM),
            (AlertType.VITAL, RiskTier.HIGH),
        ]
        assert all(a.action_required and not a.resolved for a in alerts)


class TestRuleBasedRecommendations:
    """Tests for offline recommendations."""

    def test_generic_when_nothing_stands_out(self, make_sample):
        sample = make_sample()

        assert rule_based_recommendations(sample, score_breakdown(sample, [])) == [GENERIC_RECOMMENDATION]

    def test_targets_weak_areas(self, make_sample):
        sample = make_sample(pain_level=8, medication_adherence=50, stress_level=9)

        recs = rule_based_recommendations(sample, score_breakdown(sample, []))

        assert "Take your medication on schedule" in recs
        assert "Practice stress reduction techniques" in recs
        assert len(recs) == 3
