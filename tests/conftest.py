"""Pytest configuration and shared fixtures."""

import os
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

# Dry-run backend and readable logs for tests; never touch AWS
os.environ.setdefault("FLEET_PROVIDER", "memory")
os.environ.setdefault("LOG_FORMAT", "readable")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

from model_fleet.core.config import Settings, get_settings  # noqa: E402
from model_fleet.models.catalog import default_catalog  # noqa: E402
from model_fleet.models.entities import ResolvedEndpoint  # noqa: E402
from model_fleet.services.endpoint_naming import derive_name  # noqa: E402
from model_fleet.services.memory_provider import MemoryFleetProvider  # noqa: E402
from model_fleet.services.provider_factory import reset_providers  # noqa: E402

MISTRAL_V01 = "mistralai/Mistral-7B-Instruct-v0.1"
IDEFICS_9B = "HuggingFaceM4/idefics-9b-instruct"
FALCON_LITE = "amazon/FalconLite"


@pytest.fixture(autouse=True)
def _fresh_state() -> Iterator[None]:
    """Clear cached settings and registered providers around every test."""
    get_settings.cache_clear()
    reset_providers()
    yield
    get_settings.cache_clear()
    reset_providers()


@pytest.fixture
def provider() -> MemoryFleetProvider:
    return MemoryFleetProvider()


@pytest.fixture
def settings() -> Settings:
    """Memory-backed settings with scheduling off."""
    return Settings(provider="memory", models="", schedule_enabled=False, internal_api_secret="")


@pytest.fixture
def make_endpoint() -> Callable[[str], ResolvedEndpoint]:
    """Build a ResolvedEndpoint for a catalog model without a provider round-trip."""

    def _make(model_id: str) -> ResolvedEndpoint:
        descriptor = default_catalog().lookup(model_id)
        assert descriptor is not None
        name = derive_name(descriptor.model_id)
        return ResolvedEndpoint(
            name=name,
            endpoint_handle=f"arn:aws:sagemaker:us-east-1:000000000000:endpoint/{name.lower()}",
            endpoint_name=name,
            endpoint_config_name=name,
            descriptor=descriptor,
        )

    return _make


@pytest.fixture
def client(provider: MemoryFleetProvider, settings: Settings) -> Iterator[TestClient]:
    """FastAPI test client wired to an in-memory provider."""
    from model_fleet.api.dependencies import get_fleet_provider, get_fleet_settings
    from model_fleet.main import app

    app.dependency_overrides[get_fleet_provider] = lambda: provider
    app.dependency_overrides[get_fleet_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
