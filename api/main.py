"""
FastAPI backend for the Recovery Intelligence Engine.

Exposes consensus analysis and per-subject health metrics, trends, risk
predictions and health scores over REST.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import analysis, health, subjects
from recovery_intel.config import Settings, create_health_service, create_orchestrator
from recovery_intel.errors import NoProviderAvailable
from recovery_intel.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - build the engine on startup."""
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    # Tests may install their own engine before startup
    if not hasattr(app.state, "orchestrator"):
        app.state.orchestrator = create_orchestrator(settings)
    if not hasattr(app.state, "health_service"):
        app.state.health_service = create_health_service(settings, app.state.orchestrator)

    logger.info("Recovery Intelligence API starting")
    yield
    logger.info("Recovery Intelligence API shutting down")


app = FastAPI(
    title="Recovery Intelligence API",
    description="Multi-provider consensus analysis and temporal risk prediction",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NoProviderAvailable)
async def no_provider_handler(request: Request, exc: NoProviderAvailable) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "detail": str(exc),
            "attempted": exc.attempted,
            "errors": [
                {"provider": e.provider, "kind": e.kind.value, "message": e.message}
                for e in exc.errors
            ],
        },
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(analysis.router, prefix="/api", tags=["Analysis"])
app.include_router(subjects.router, prefix="/api", tags=["Subjects"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
