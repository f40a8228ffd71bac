"""
Recovery Intelligence Engine - Enumerations

Centralized enum definitions shared by the analysis and health modules.
"""

from enum import Enum


class Modality(str, Enum):
    """Kind of content submitted for analysis."""

    TEXT = "text"
    IMAGE = "image"
    MULTIMODAL = "multimodal"


class Capability(str, Enum):
    """What a provider backend is able to analyze."""

    TEXT = "text"
    VISION = "vision"
    MULTIMODAL = "multimodal"


# Capability a provider needs for each request modality
MODALITY_CAPABILITY = {
    Modality.TEXT: Capability.TEXT,
    Modality.IMAGE: Capability.VISION,
    Modality.MULTIMODAL: Capability.MULTIMODAL,
}


class ProviderKind(str, Enum):
    """Wire protocol spoken by a provider backend."""

    OPENAI_COMPATIBLE = "openai_compatible"  # OpenAI, Groq, OpenRouter
    GEMINI = "gemini"
    HUGGINGFACE = "huggingface"


class RiskTier(str, Enum):
    """Ordered risk tiers (low < medium < high < critical)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def score(self) -> int:
        """Ordinal score used for averaging (low=1 ... critical=4)."""
        return _RISK_SCORES[self]

    @classmethod
    def from_score(cls, score: float) -> "RiskTier":
        """Map an averaged ordinal score back to the nearest tier."""
        if score >= 3.5:
            return cls.CRITICAL
        if score >= 2.5:
            return cls.HIGH
        if score >= 1.5:
            return cls.MEDIUM
        return cls.LOW

    def __lt__(self, other):
        if not isinstance(other, RiskTier):
            return NotImplemented
        return self.score < other.score

    def __le__(self, other):
        if not isinstance(other, RiskTier):
            return NotImplemented
        return self.score <= other.score

    def __gt__(self, other):
        if not isinstance(other, RiskTier):
            return NotImplemented
        return self.score > other.score

    def __ge__(self, other):
        if not isinstance(other, RiskTier):
            return NotImplemented
        return self.score >= other.score


_RISK_SCORES = {
    RiskTier.LOW: 1,
    RiskTier.MEDIUM: 2,
    RiskTier.HIGH: 3,
    RiskTier.CRITICAL: 4,
}


class WoundHealing(str, Enum):
    """Visual wound healing category reported by vision providers."""

    EXCELLENT = "excellent"
    GOOD = "good"
    CONCERNING = "concerning"
    POOR = "poor"


class Sentiment(str, Enum):
    """Sentiment of the patient's own description."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class TrendDirection(str, Enum):
    """Direction of a metric over time."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    INSUFFICIENT_DATA = "insufficient_data"  # Fewer samples than regression needs


class PredictionSeverity(str, Enum):
    """Severity band of a risk prediction."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertType(str, Enum):
    """Category of a health alert."""

    MEDICATION = "medication"
    SYMPTOM = "symptom"
    VITAL = "vital"
    APPOINTMENT = "appointment"
    EMERGENCY = "emergency"
