"""Tests for ProviderRegistry and runtime configuration."""

from pathlib import Path

import pytest
import yaml

from recovery_intel.analysis.orchestrator import DEFAULT_PROVIDER_TIMEOUT
from recovery_intel.config import Settings, create_health_service, create_orchestrator
from recovery_intel.models.enums import Capability, Modality
from recovery_intel.providers.registry import ProviderRegistry

BUNDLED_CONFIG = Path(__file__).parent.parent / "config" / "providers.yaml"


class TestProviderRegistry:
    """Tests for provider selection."""

    def test_default_registry(self):
        registry = ProviderRegistry.default()

        assert registry.names == ["groq", "openai", "gemini", "openrouter", "huggingface"]
        assert [p.name for p in registry.select(Modality.TEXT)] == ["openai", "groq", "openrouter"]
        assert [p.name for p in registry.select(Modality.IMAGE)] == ["openai", "gemini", "groq"]
        assert [p.name for p in registry.select(Modality.MULTIMODAL)] == ["openai", "gemini"]

    def test_text_only_providers_excluded_from_vision(self):
        registry = ProviderRegistry.default()

        selected = registry.select(Modality.IMAGE, ["huggingface", "openai"])

        assert [p.name for p in selected] == ["openai"]

    def test_duplicate_names_rejected(self, provider_configs):
        with pytest.raises(ValueError, match="Duplicate"):
            ProviderRegistry(provider_configs + provider_configs[:1])

    def test_get_unknown(self, registry):
        with pytest.raises(KeyError, match="Unknown provider"):
            registry.get("nope")
        assert "alpha" in registry
        assert len(registry) == 3

    def test_from_config_file(self, tmp_path):
        config_path = tmp_path / "providers.yaml"
        config_path.write_text(yaml.safe_dump({
            "providers": {
                "local": {
                    "display_name": "Local",
                    "base_url": "http://localhost:8080/v1",
                    "api_key_env": "LOCAL_KEY",
                    "models": {"text": "llama", "vision": "llava"},
                    "capabilities": ["text", "vision"],
                    "reliability": 0.6,
                },
            },
            "default_selection": {"text": ["local"], "image": ["local"]},
        }))

        registry = ProviderRegistry.from_config(config_path)
        local = registry.get("local")

        assert local.capabilities == frozenset({Capability.TEXT, Capability.VISION})
        assert [p.name for p in registry.select(Modality.IMAGE)] == ["local"]
        assert registry.select(Modality.MULTIMODAL) == []

    def test_missing_config_uses_defaults(self, tmp_path):
        registry = ProviderRegistry.from_config(tmp_path / "missing.yaml")

        assert len(registry) == 5

    def test_bundled_config_matches_defaults(self):
        registry = ProviderRegistry.from_config(BUNDLED_CONFIG)

        assert registry.names == ProviderRegistry.default().names
        assert registry.get("openai").reliability == 0.95


class TestSettings:
    """Tests for environment based settings."""

    def test_defaults(self, monkeypatch):
        for var in ("LOG_LEVEL", "PROVIDER_TIMEOUT_SECONDS", "METRIC_HISTORY_WINDOW"):
            monkeypatch.delenv(var, raising=False)

        settings = Settings.from_env(load_env_file=False)

        assert settings.provider_timeout_seconds == DEFAULT_PROVIDER_TIMEOUT
        assert settings.metric_history_window == 90

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("METRIC_HISTORY_WINDOW", "30")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings.from_env(load_env_file=False)

        assert settings.provider_timeout_seconds == 12.5
        assert settings.metric_history_window == 30
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["none", "None", "0", "0.0", "-5"])
    def test_timeout_can_be_disabled(self, monkeypatch, value):
        monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", value)

        assert Settings.from_env(load_env_file=False).provider_timeout_seconds is None

    def test_non_numeric_timeout_rejected(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", "soon")

        with pytest.raises(ValueError):
            Settings.from_env(load_env_file=False)

    def test_create_engine(self, monkeypatch, tmp_path):
        for var in ("GROQ_API_KEY", "GEMINI_API_KEY", "OPENROUTER_API_KEY", "HUGGINGFACE_API_KEY"):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        settings = Settings(
            providers_config=str(tmp_path / "missing.yaml"),
            provider_timeout_seconds=10,
            metric_history_window=14,
        )

        orchestrator = create_orchestrator(settings)
        service = create_health_service(settings, orchestrator)

        assert list(orchestrator.adapters) == ["openai"]
        assert orchestrator.provider_timeout == 10
        assert service.history.window == 14
        assert service.orchestrator is orchestrator
