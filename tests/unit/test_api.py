"""HTTP surface tests with TestClient and an in-memory provider."""

from fastapi.testclient import TestClient

from model_fleet.api.dependencies import get_fleet_settings
from model_fleet.core.config import Settings
from model_fleet.main import app
from model_fleet.services.memory_provider import MemoryFleetProvider


def test_health(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_metrics_shape(client: TestClient) -> None:
    r = client.get("/metrics")
    assert r.status_code == 200
    data = r.json()
    assert "endpoints_provisioned_total" in data
    assert set(data["fleet_pass_duration_seconds"]) == {"count", "p50", "p95", "sum"}


def test_catalog_lists_every_model(client: TestClient) -> None:
    r = client.get("/v1/catalog")
    assert r.status_code == 200
    data = r.json()
    assert len(data) == 12
    idefics = next(e for e in data if e["model_id"] == "HuggingFaceM4/idefics-9b-instruct")
    assert idefics["name"] == "HuggingFaceM4-idefics-9b-instruct"
    assert idefics["input_modalities"] == ["Text", "Image"]


def test_registry_404_before_first_pass(client: TestClient) -> None:
    r = client.get("/v1/fleet/registry")
    assert r.status_code == 404
    assert r.json()["error"] == "RegistryNotFoundError"


def test_pass_then_read_registry(client: TestClient, provider: MemoryFleetProvider) -> None:
    r = client.post("/v1/fleet/passes", json={"models": ["amazon/FalconLite", "vendor/does-not-exist"]})
    assert r.status_code == 200
    body = r.json()
    assert body["published"] is True
    assert [e["name"] for e in body["endpoints"]] == ["amazon-FalconLite"]
    assert body["errors"][0]["kind"] == "UnknownModel"

    r = client.get("/v1/fleet/registry")
    assert r.status_code == 200
    assert r.json() == [
        {
            "name": "amazon-FalconLite",
            "endpoint": "amazon-FalconLite",
            "responseStreamingSupported": False,
            "inputModalities": ["Text"],
            "outputModalities": ["Text"],
            "interface": "langchain",
            "ragSupported": True,
        }
    ]


def test_duplicate_pass_returns_409(client: TestClient, provider: MemoryFleetProvider) -> None:
    r = client.post("/v1/fleet/passes", json={"models": ["Idefics_9b", "HuggingFaceM4/idefics-9b-instruct"]})
    assert r.status_code == 409
    body = r.json()
    assert body["published"] is False
    assert body["errors"][0]["kind"] == "DuplicateName"
    assert body["errors"][0]["fatal"] is True
    assert provider.documents == {}


def test_pass_with_schedule_override(client: TestClient, provider: MemoryFleetProvider) -> None:
    r = client.post("/v1/fleet/passes", json={"models": ["amazon/FalconLite"], "schedule_enabled": True})
    assert r.status_code == 200
    bindings = r.json()["bindings"]
    assert len(bindings) == 1
    assert bindings[0]["start_expression"] == "cron(0 8 ? * MON-FRI *)"
    assert len(provider.schedules) == 2


def test_pass_without_body_uses_settings(client: TestClient) -> None:
    r = client.post("/v1/fleet/passes")
    assert r.status_code == 200
    assert r.json()["requested"] == []


def test_internal_secret_required_when_configured(client: TestClient) -> None:
    app.dependency_overrides[get_fleet_settings] = lambda: Settings(provider="memory", internal_api_secret="s3cret")
    r = client.post("/v1/fleet/passes", json={"models": []})
    assert r.status_code == 401
    r = client.post("/v1/fleet/passes", json={"models": []}, headers={"X-Fleet-Internal-Secret": "s3cret"})
    assert r.status_code == 200
    # Catalog stays public
    assert client.get("/v1/catalog").status_code == 200
