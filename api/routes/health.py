"""Health check endpoints."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Basic health check."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    return {
        "status": "healthy",
        "service": "recovery-intel",
        "providers": sorted(orchestrator.adapters) if orchestrator else [],
    }


@router.get("/")
async def root():
    """API root."""
    return {
        "name": "Recovery Intelligence API",
        "version": "0.1.0",
        "docs": "/docs",
    }
