"""Consensus analysis routes."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from api.schemas.analysis import AnalysisRequestBody
from recovery_intel.analysis.orchestrator import AnalysisOrchestrator
from recovery_intel.models.analysis import AnalysisRequest, ConsensusResult

router = APIRouter()


def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    return request.app.state.orchestrator


@router.post("/analysis", response_model=ConsensusResult, response_model_by_alias=True)
async def analyze(body: AnalysisRequestBody, request: Request) -> ConsensusResult:
    """
    Analyze text and/or images with several providers and return their consensus.

    Responds 503 when no provider produced a result.
    """
    try:
        analysis_request = AnalysisRequest(
            modality=body.modality,
            text=body.text,
            images=body.images,
            context=body.context,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    return await get_orchestrator(request).run(analysis_request, body.providers)
