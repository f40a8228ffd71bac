"""
Temporal trend and risk engine.

- Trends: least-squares direction and decaying-confidence predictions
- Risk: weighted factor models per condition
- Score: weighted health score, score trend and alerts
"""

from recovery_intel.health.risk import DEFAULT_RISK_MODELS, RiskEngine
from recovery_intel.health.service import HealthIntelligenceService
from recovery_intel.health.trends import TRACKED_METRICS, MetricSpec, compute_trend, compute_trends

__all__ = [
    "DEFAULT_RISK_MODELS",
    "HealthIntelligenceService",
    "MetricSpec",
    "RiskEngine",
    "TRACKED_METRICS",
    "compute_trend",
    "compute_trends",
]
