"""
Provider configuration.

Providers are described by immutable ProviderConfig records collected in a
ProviderRegistry. The registry is an explicit object handed to the
orchestrator; it is loaded from YAML (``config/providers.yaml``) with a
built-in default set when the file is absent.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from recovery_intel.models.enums import MODALITY_CAPABILITY, Capability, Modality, ProviderKind

logger = logging.getLogger(__name__)


class ProviderModels(BaseModel):
    """Model identifier per capability."""

    model_config = ConfigDict(frozen=True)

    text: str
    vision: Optional[str] = None
    multimodal: Optional[str] = None

    def for_modality(self, modality: Modality) -> Optional[str]:
        capability = MODALITY_CAPABILITY[Modality(modality)]
        return getattr(self, capability.value)


class ProviderConfig(BaseModel):
    """Static description of one analysis provider."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Registry key, e.g. 'openai'")
    display_name: str = Field(..., description="Name reported in results, e.g. 'OpenAI'")
    kind: ProviderKind = ProviderKind.OPENAI_COMPATIBLE
    base_url: Optional[str] = None
    api_key_env: Optional[str] = None
    models: ProviderModels
    capabilities: frozenset[Capability] = frozenset({Capability.TEXT})
    reliability: float = Field(..., gt=0.0, le=1.0, description="Prior trust weight")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1500, gt=0)

    def supports(self, modality: Modality) -> bool:
        capability = MODALITY_CAPABILITY[Modality(modality)]
        return capability in self.capabilities and self.models.for_modality(modality) is not None


DEFAULT_PROVIDERS = [
    ProviderConfig(
        name="groq",
        display_name="Groq",
        base_url="https://api.groq.com/openai/v1",
        api_key_env="GROQ_API_KEY",
        models=ProviderModels(
            text="llama-3.1-70b-versatile",
            vision="llama-3.2-11b-vision-preview",
            multimodal="llama-3.2-90b-vision-preview",
        ),
        capabilities=frozenset({Capability.TEXT, Capability.VISION}),
        reliability=0.85,
    ),
    ProviderConfig(
        name="openai",
        display_name="OpenAI",
        base_url="https://api.openai.com/v1",
        api_key_env="OPENAI_API_KEY",
        models=ProviderModels(text="gpt-4o", vision="gpt-4o", multimodal="gpt-4o"),
        capabilities=frozenset({Capability.TEXT, Capability.VISION, Capability.MULTIMODAL}),
        reliability=0.95,
    ),
    ProviderConfig(
        name="gemini",
        display_name="Gemini",
        kind=ProviderKind.GEMINI,
        api_key_env="GEMINI_API_KEY",
        models=ProviderModels(
            text="gemini-1.5-pro",
            vision="gemini-1.5-pro",
            multimodal="gemini-1.5-pro",
        ),
        capabilities=frozenset({Capability.TEXT, Capability.VISION, Capability.MULTIMODAL}),
        reliability=0.90,
    ),
    ProviderConfig(
        name="openrouter",
        display_name="OpenRouter",
        base_url="https://openrouter.ai/api/v1",
        api_key_env="OPENROUTER_API_KEY",
        models=ProviderModels(
            text="anthropic/claude-3.5-sonnet",
            vision="anthropic/claude-3.5-sonnet",
            multimodal="anthropic/claude-3.5-sonnet",
        ),
        capabilities=frozenset({Capability.TEXT, Capability.VISION}),
        reliability=0.92,
    ),
    ProviderConfig(
        name="huggingface",
        display_name="Hugging Face",
        kind=ProviderKind.HUGGINGFACE,
        api_key_env="HUGGINGFACE_API_KEY",
        models=ProviderModels(text="microsoft/DialoGPT-large"),
        capabilities=frozenset({Capability.TEXT}),
        reliability=0.75,
    ),
]

# Default provider order per modality
DEFAULT_SELECTION = {
    Modality.TEXT: ["openai", "groq", "openrouter"],
    Modality.IMAGE: ["openai", "gemini", "groq"],
    Modality.MULTIMODAL: ["openai", "gemini"],
}


class ProviderRegistry:
    """
    Immutable-after-construction collection of provider configurations.
    """

    def __init__(
        self,
        providers: list[ProviderConfig],
        default_selection: Optional[dict[Modality, list[str]]] = None,
    ):
        names = [p.name for p in providers]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate provider names: {sorted(duplicates)}")

        self._providers = {p.name: p for p in providers}
        self._default_selection = {
            Modality(m): list(order)
            for m, order in (default_selection or DEFAULT_SELECTION).items()
        }

    @classmethod
    def default(cls) -> "ProviderRegistry":
        return cls(DEFAULT_PROVIDERS, DEFAULT_SELECTION)

    @classmethod
    def from_config(cls, config_path: Union[str, Path] = "config/providers.yaml") -> "ProviderRegistry":
        """
        Load the registry from a YAML file.

        Falls back to the built-in providers when the file does not exist.
        """
        try:
            with open(config_path) as f:
                config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.info(f"Provider config {config_path} not found, using defaults")
            return cls.default()

        providers = [
            ProviderConfig(name=name, **data)
            for name, data in (config.get("providers") or {}).items()
        ]
        selection = config.get("default_selection") or DEFAULT_SELECTION

        logger.info(f"Loaded {len(providers)} providers from {config_path}")
        return cls(providers, selection)

    def get(self, name: str) -> ProviderConfig:
        try:
            return self._providers[name]
        except KeyError:
            raise KeyError(f"Unknown provider: {name}") from None

    def __contains__(self, name: str) -> bool:
        return name in self._providers

    def __iter__(self):
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)

    @property
    def names(self) -> list[str]:
        return list(self._providers)

    def default_selection(self, modality: Modality) -> list[str]:
        return list(self._default_selection.get(Modality(modality), []))

    def select(
        self,
        modality: Modality,
        provider_subset: Optional[list[str]] = None,
    ) -> list[ProviderConfig]:
        """
        Resolve the ordered providers to use for a modality.

        Unknown names and providers lacking the needed capability are
        dropped (text-only providers never receive image requests).
        """
        names = provider_subset if provider_subset is not None else self.default_selection(modality)

        selected = []
        seen = set()
        for name in names:
            if name in seen:
                continue
            seen.add(name)
            if name not in self._providers:
                logger.warning(f"Ignoring unknown provider: {name}")
                continue
            provider = self._providers[name]
            if not provider.supports(modality):
                logger.debug(f"Provider {name} does not support {Modality(modality).value}")
                continue
            selected.append(provider)
        return selected
