"""
Models for wound-healing progress tracking across image analyses.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from recovery_intel.models.enums import TrendDirection


class ProgressMetrics(BaseModel):
    """Change between the latest consensus and the previous image analysis."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    healing_rate: float = Field(
        ...,
        ge=-100,
        le=100,
        description="Change in healing progress points (negative = worse)",
    )
    trend_direction: TrendDirection
    key_changes: list[str] = Field(default_factory=list)
    time_to_healing: Optional[int] = Field(default=None, description="Estimated days")
    risk_factors: list[str] = Field(default_factory=list)


class ProgressComparison(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subject_id: str
    request_id: Optional[str] = None
    previous_request_id: Optional[str] = None
    progress_metrics: ProgressMetrics
    timestamp: datetime = Field(default_factory=datetime.now)
