"""Analysis API schemas."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from recovery_intel.models.enums import Modality


class AnalysisRequestBody(BaseModel):
    """Request to analyze content with several providers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    modality: Modality
    text: str = ""
    images: list[str] = Field(default_factory=list, description="Base64 data URLs")
    context: dict[str, Any] = Field(default_factory=dict)
    providers: Optional[list[str]] = Field(
        default=None,
        description="Ordered provider names; defaults to the modality's selection",
    )
