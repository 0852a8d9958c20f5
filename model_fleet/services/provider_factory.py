from typing import Optional

from model_fleet.core.config import Settings, get_settings
from model_fleet.services.base_provider import BaseFleetProvider
from model_fleet.services.secret_source import SecretLookup, secret_source_from_settings

_providers: dict[str, BaseFleetProvider] = {}
# Keyed by the settings that shape a source, so its TTL cache outlives one pass
_secret_sources: dict[tuple[str, str, str, int], SecretLookup] = {}


def register_provider(name: str, provider: BaseFleetProvider) -> None:
    _providers[name.lower()] = provider


def get_provider(name: str = "aws") -> BaseFleetProvider:
    provider = _providers.get(name.lower())
    if not provider:
        raise ValueError(f"Provider {name} not found. Available: {list(_providers.keys())}")
    return provider


def reset_providers() -> None:
    _providers.clear()
    _secret_sources.clear()


def provider_for(settings: Optional[Settings] = None) -> BaseFleetProvider:
    """Return the configured provider, creating and registering it on first use."""
    settings = settings or get_settings()
    name = settings.provider
    if name.lower() not in _providers:
        if name == "memory":
            from model_fleet.services.memory_provider import MemoryFleetProvider

            register_provider(name, MemoryFleetProvider(region=settings.aws_region))
        else:
            from model_fleet.services.sagemaker import SageMakerProvider

            register_provider(name, SageMakerProvider.from_settings(settings))
    return get_provider(name)


def secret_source_for(settings: Optional[Settings] = None) -> SecretLookup:
    """Return the token source for these settings, reusing it across passes."""
    settings = settings or get_settings()
    key = (
        settings.provider,
        settings.huggingface_secret_arn,
        settings.aws_region,
        settings.secret_cache_ttl_seconds,
    )
    source = _secret_sources.get(key)
    if source is None:
        source = secret_source_from_settings(settings)
        _secret_sources[key] = source
    return source
