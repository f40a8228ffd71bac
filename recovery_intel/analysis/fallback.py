"""
Free-text fallback extraction.

When a provider answers in prose instead of the requested JSON, the
adapter hands the text to FallbackExtractor, which mines findings, a risk
tier, recommendations and flags from fixed keyword vocabularies. It always
returns a valid StructuredAnalysis; text with no recognizable terms yields
a low-risk analysis with a generic recommendation.
"""

import re
from typing import Optional

from recovery_intel.models.analysis import StructuredAnalysis
from recovery_intel.models.enums import RiskTier
from recovery_intel.utils.parsing import contains_any

MEDICAL_TERMS = [
    "pain", "swelling", "redness", "discharge", "fever", "infection",
    "healing", "inflammation", "bruising", "tenderness", "stiffness",
    "bleeding", "drainage", "warmth", "numbness", "tingling",
]

# Checked from most to least severe; first match wins
RISK_KEYWORDS = [
    (RiskTier.CRITICAL, ["critical", "emergency", "severe"]),
    (RiskTier.HIGH, ["high risk", "concerning", "urgent"]),
    (RiskTier.MEDIUM, ["moderate", "medium", "caution"]),
]

RECOMMENDATION_PHRASES = [
    "continue medication", "apply ice", "keep wound clean", "contact doctor",
    "monitor symptoms", "rest and elevate", "follow up", "take antibiotics",
    "change dressing", "avoid activity", "increase fluids", "pain management",
]

DEFAULT_RECOMMENDATION = "Follow your recovery plan"

URGENT_KEYWORDS = ["urgent", "emergency", "immediate", "call doctor", "seek care", "hospital"]

FOLLOW_UP_KEYWORDS = ["follow-up", "follow up"]

_HEALING_PATTERN = re.compile(r"(\d{1,3})\s*%\s*(?:healed|healing|progress)", re.IGNORECASE)


class FallbackExtractor:
    """Heuristic extraction of a StructuredAnalysis from free text."""

    def extract(self, content: str) -> StructuredAnalysis:
        """
        Build a structured analysis from free-form provider text.

        Args:
            content: Raw provider text (may be empty)

        Returns:
            StructuredAnalysis; never raises for any string input
        """
        content = content or ""

        return StructuredAnalysis(
            medical_findings=self.extract_findings(content),
            risk_assessment=self.extract_risk_level(content),
            recommendations=self.extract_recommendations(content),
            follow_up_required=contains_any(content, FOLLOW_UP_KEYWORDS),
            urgent_care=self.extract_urgent_care(content),
            healing_progress=self.extract_healing_progress(content),
            reasoning=content or None,
        )

    def extract_findings(self, content: str) -> list[str]:
        content_lower = content.lower()
        return [term for term in MEDICAL_TERMS if term in content_lower]

    def extract_risk_level(self, content: str) -> RiskTier:
        for tier, keywords in RISK_KEYWORDS:
            if contains_any(content, keywords):
                return tier
        return RiskTier.LOW

    def extract_recommendations(self, content: str) -> list[str]:
        content_lower = content.lower()
        recommendations = [rec for rec in RECOMMENDATION_PHRASES if rec in content_lower]
        return recommendations or [DEFAULT_RECOMMENDATION]

    def extract_urgent_care(self, content: str) -> bool:
        return contains_any(content, URGENT_KEYWORDS)

    def extract_healing_progress(self, content: str) -> Optional[float]:
        """Find a "NN% healed" style figure, clamped to 0-100."""
        match = _HEALING_PATTERN.search(content)
        if not match:
            return None
        return float(min(100, int(match.group(1))))
