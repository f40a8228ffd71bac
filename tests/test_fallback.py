"""Tests for FallbackExtractor."""

import pytest

from recovery_intel.analysis.fallback import DEFAULT_RECOMMENDATION, FallbackExtractor
from recovery_intel.models.enums import RiskTier


class TestFallbackExtractor:
    """Tests for keyword-based extraction."""

    @pytest.fixture
    def extractor(self):
        return FallbackExtractor()

    @pytest.mark.parametrize("text,tier", [
        ("This looks severe", RiskTier.CRITICAL),
        ("Emergency: go now", RiskTier.CRITICAL),
        ("The wound is concerning", RiskTier.HIGH),
        ("High risk of complications", RiskTier.HIGH),
        ("Moderate inflammation", RiskTier.MEDIUM),
        ("Proceed with caution", RiskTier.MEDIUM),
        ("Everything looks normal", RiskTier.LOW),
    ])
    def test_risk_levels(self, extractor, text, tier):
        assert extractor.extract_risk_level(text) == tier

    def test_most_severe_keyword_wins(self, extractor):
        assert extractor.extract_risk_level("moderate swelling but urgent fever") == RiskTier.HIGH

    def test_findings_and_recommendations(self, extractor):
        analysis = extractor.extract(
            "Mild Swelling and some discharge. Keep wound clean and apply ice twice a day."
        )

        assert analysis.medical_findings == ["swelling", "discharge"]
        assert analysis.recommendations == ["apply ice", "keep wound clean"]

    def test_urgent_and_follow_up(self, extractor):
        analysis = extractor.extract("Seek care immediately and schedule a follow-up visit.")

        assert analysis.urgent_care is True
        assert analysis.follow_up_required is True

    @pytest.mark.parametrize("text,expected", [
        ("The incision is 75% healed", 75.0),
        ("healing 40 % progress so far", 40.0),
        ("Roughly 150% healed", 100.0),
        ("No numbers here", None),
        ("Week 2 healing well", None),
        ("Day 14, progress is slow", None),
    ])
    def test_healing_progress(self, extractor, text, expected):
        assert extractor.extract_healing_progress(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "lorem ipsum", "{not json", "\x00\x01"])
    def test_never_raises_and_has_defaults(self, extractor, text):
        analysis = extractor.extract(text)

        assert analysis.risk_assessment == RiskTier.LOW
        assert analysis.recommendations == [DEFAULT_RECOMMENDATION]
        assert analysis.medical_findings == []
        assert analysis.urgent_care is False
