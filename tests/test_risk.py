"""Tests for the risk engine."""

import pytest

from recovery_intel.health.risk import SIGNALS, RiskEngine, blood_pressure
from recovery_intel.models.enums import PredictionSeverity
from recovery_intel.models.health import RiskFactor, RiskModel, SeverityBands


@pytest.fixture
def high_risk_sample(make_sample):
    return make_sample(
        pain_level=8,
        sleep_quality=30,
        stress_level=8,
        medication_adherence=40,
        systolic=170,
        diastolic=105,
        heart_rate=110,
        temperature=101,
        weather="Stormy",
    )


class TestSignals:
    """Tests for normalized factor signals."""

    @pytest.mark.parametrize("systolic,diastolic,expected", [
        (120, 80, 0.0),
        (145, 85, 0.5),
        (130, 95, 0.5),
        (165, 95, 1.0),
        (150, 105, 1.0),
    ])
    def test_blood_pressure_grades(self, make_sample, systolic, diastolic, expected):
        assert blood_pressure(make_sample(systolic=systolic, diastolic=diastolic), []) == expected

    def test_missing_vitals_contribute_nothing(self, make_sample):
        sample = make_sample()

        for name in ("blood_pressure", "abnormal_heart_rate", "fever", "weather_pressure"):
            assert SIGNALS[name](sample, []) == 0.0

    def test_humidity_counts_as_weather_pressure(self, make_sample):
        assert SIGNALS["weather_pressure"](make_sample(humidity=85), []) == 1.0
        assert SIGNALS["weather_pressure"](make_sample(humidity=60), []) == 0.0

    def test_pain_history_needs_three_severe_episodes(self, make_sample):
        severe = [make_sample(pain_level=9)] * 2
        sample = make_sample()

        assert SIGNALS["pain_history"](sample, severe) == 0.0
        assert SIGNALS["pain_history"](sample, severe + [make_sample(pain_level=8)]) == 1.0


class TestRiskEngine:
    """Tests for weighted factor risk prediction."""

    def test_healthy_subject(self, make_sample):
        predictions = RiskEngine().predict(make_sample())

        assert [(p.condition, p.risk_percentage) for p in predictions] == [
            ("Migraine", 25),
            ("Post-Surgical Infection", 12),
            ("Hypertension Crisis", 7),
        ]
        migraine, infection, hypertension = predictions
        assert migraine.severity == PredictionSeverity.MEDIUM
        assert migraine.factors == ["Stress level", "Sleep quality"]
        assert infection.factors == []
        assert hypertension.severity == PredictionSeverity.LOW
        assert hypertension.timeframe == "next 48 hours"

    def test_high_risk_subject_is_capped(self, make_sample, high_risk_sample):
        history = [make_sample(pain_level=9) for _ in range(3)]

        predictions = RiskEngine().predict(high_risk_sample, history)

        assert [(p.condition, p.risk_percentage) for p in predictions] == [
            ("Hypertension Crisis", 90),
            ("Migraine", 85),
            ("Post-Surgical Infection", 80),
        ]
        assert all(p.severity == PredictionSeverity.HIGH for p in predictions)
        assert predictions[0].factors == [
            "Blood pressure readings", "Medication adherence", "Heart rate", "Stress level",
        ]

    def test_sorted_descending(self, make_sample, high_risk_sample):
        predictions = RiskEngine().predict(high_risk_sample)

        percentages = [p.risk_percentage for p in predictions]
        assert percentages == sorted(percentages, reverse=True)

    def test_reporting_threshold(self, make_sample):
        model = RiskModel(
            condition="Low baseline",
            factors=[RiskFactor(signal="fever", label="Fever", weight=1.0)],
            baseline_risk=0.05,
            reporting_threshold=10,
            severity_bands=SeverityBands(medium=20, high=50),
        )
        engine = RiskEngine([model])

        assert engine.predict(make_sample()) == []
        assert engine.evaluate(model, make_sample()).risk_percentage == 5
        assert engine.predict(make_sample(temperature=102))[0].risk_percentage == 100

    def test_unknown_signal_rejected(self):
        model = RiskModel(
            condition="Broken",
            factors=[RiskFactor(signal="blood_sugar", label="Blood sugar", weight=1.0)],
            baseline_risk=0.1,
            severity_bands=SeverityBands(medium=10, high=20),
        )

        with pytest.raises(ValueError, match="unknown signals"):
            RiskEngine([model])

    def test_default_model_weights_sum_to_one(self):
        for model in RiskEngine().models:
            assert sum(f.weight for f in model.factors) == pytest.approx(1.0)
