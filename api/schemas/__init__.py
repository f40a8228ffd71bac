"""API schema modules."""

from api.schemas.analysis import AnalysisRequestBody

__all__ = ["AnalysisRequestBody"]
