"""Per-subject metric, trend, risk and history routes."""

from fastapi import APIRouter, Query, Request, Response

from recovery_intel.analysis.orchestrator import AnalysisOrchestrator
from recovery_intel.health.service import HealthIntelligenceService
from recovery_intel.models.analysis import ProviderResult
from recovery_intel.models.health import HealthMetricSample, HealthScore, RiskPrediction, TrendSeries
from recovery_intel.models.progress import ProgressComparison

router = APIRouter()


def get_service(request: Request) -> HealthIntelligenceService:
    return request.app.state.health_service


def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    return request.app.state.orchestrator


@router.post("/subjects/{subject_id}/metrics", status_code=204)
async def record_metrics(subject_id: str, sample: HealthMetricSample, request: Request) -> Response:
    """Append a metric sample to the subject's history."""
    await get_service(request).record_metric_sample(subject_id, sample)
    return Response(status_code=204)


@router.get("/subjects/{subject_id}/metrics", response_model=list[HealthMetricSample])
async def get_metrics(subject_id: str, request: Request) -> list[HealthMetricSample]:
    return get_service(request).get_history(subject_id)


@router.get("/subjects/{subject_id}/trends", response_model=list[TrendSeries])
async def get_trends(
    subject_id: str,
    request: Request,
    window_days: int = Query(default=30, ge=1, le=365),
    horizon_days: int = Query(default=7, ge=1, le=30),
) -> list[TrendSeries]:
    """Trend and prediction per tracked metric."""
    return get_service(request).get_trends(subject_id, window_days, horizon_days)


@router.post("/subjects/{subject_id}/risks", response_model=list[RiskPrediction])
async def predict_risks(subject_id: str, sample: HealthMetricSample, request: Request) -> list[RiskPrediction]:
    """Reportable condition risks for the current sample."""
    return await get_service(request).predict_risks(subject_id, sample)


@router.post("/subjects/{subject_id}/health-score", response_model=HealthScore)
async def health_score(subject_id: str, sample: HealthMetricSample, request: Request) -> HealthScore:
    return await get_service(request).compute_health_score(subject_id, sample)


@router.get("/subjects/{subject_id}/analyses", response_model=list[ProviderResult])
async def get_analyses(subject_id: str, request: Request) -> list[ProviderResult]:
    """Provider results recorded for the subject, oldest first."""
    return get_orchestrator(request).get_analysis_history(subject_id)


@router.get("/subjects/{subject_id}/progress", response_model=list[ProgressComparison])
async def get_progress(subject_id: str, request: Request) -> list[ProgressComparison]:
    """Healing progress comparisons between image analyses."""
    return get_orchestrator(request).get_progress_history(subject_id)
