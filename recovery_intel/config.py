"""
Runtime configuration.

Settings come from environment variables (a ``.env`` file is loaded first
when present). Provider definitions come from the YAML file named by
PROVIDERS_CONFIG; API keys are read from each provider's ``api_key_env``.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from recovery_intel.analysis.orchestrator import DEFAULT_PROVIDER_TIMEOUT, AnalysisOrchestrator
from recovery_intel.analysis.progress import ProgressTracker
from recovery_intel.health.service import DEFAULT_HISTORY_WINDOW, HealthIntelligenceService
from recovery_intel.providers.adapter import build_adapters
from recovery_intel.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def parse_timeout(value: str) -> Optional[float]:
    """
    Parse a timeout in seconds; "none" or any value <= 0 disables it.

    Raises:
        ValueError: if the value is not a number
    """
    value = value.strip().lower()
    if value == "none":
        return None
    seconds = float(value)
    return seconds if seconds > 0 else None


class Settings(BaseModel):
    """Engine settings."""

    log_level: str = "INFO"
    log_file: Optional[str] = None
    provider_timeout_seconds: Optional[float] = Field(default=DEFAULT_PROVIDER_TIMEOUT, gt=0)
    metric_history_window: int = Field(default=DEFAULT_HISTORY_WINDOW, ge=1)
    analysis_history_window: int = Field(default=100, ge=1)
    progress_history_window: int = Field(default=30, ge=1)
    providers_config: str = "config/providers.yaml"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        Build settings from environment variables.

        PROVIDER_TIMEOUT_SECONDS accepts "none" (or any value <= 0) to disable the
        per-provider timeout.
        """
        if load_env_file:
            load_dotenv()

        values = {}
        env_map = {
            "log_level": "LOG_LEVEL",
            "log_file": "LOG_FILE",
            "metric_history_window": "METRIC_HISTORY_WINDOW",
            "analysis_history_window": "ANALYSIS_HISTORY_WINDOW",
            "progress_history_window": "PROGRESS_HISTORY_WINDOW",
            "providers_config": "PROVIDERS_CONFIG",
        }
        for field, env_var in env_map.items():
            value = os.getenv(env_var)
            if value:
                values[field] = value

        timeout = os.getenv("PROVIDER_TIMEOUT_SECONDS")
        if timeout:
            values["provider_timeout_seconds"] = parse_timeout(timeout)

        return cls(**values)


def create_orchestrator(
    settings: Settings,
    registry: Optional[ProviderRegistry] = None,
) -> AnalysisOrchestrator:
    """Build an orchestrator with adapters for every provider that has an API key."""
    registry = registry or ProviderRegistry.from_config(settings.providers_config)
    adapters = build_adapters(list(registry))
    if not adapters:
        logger.warning("No provider API keys configured; analysis requests will fail")
    else:
        logger.info(f"Configured providers: {list(adapters)}")

    return AnalysisOrchestrator(
        registry=registry,
        adapters=adapters,
        provider_timeout=settings.provider_timeout_seconds,
        analysis_history_window=settings.analysis_history_window,
        progress_tracker=ProgressTracker(window=settings.progress_history_window),
    )


def create_health_service(
    settings: Settings,
    orchestrator: Optional[AnalysisOrchestrator] = None,
) -> HealthIntelligenceService:
    return HealthIntelligenceService(
        window=settings.metric_history_window,
        orchestrator=orchestrator,
    )
