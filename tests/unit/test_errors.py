"""Unit tests for custom exceptions."""

from model_fleet.core.errors import (
    DuplicateNameError,
    FleetError,
    InvalidScheduleError,
    ProvisioningError,
    RegistryNotFoundError,
    SchedulerRoleError,
    SecretUnavailableError,
    UnknownModelError,
)


def test_unknown_model_is_400() -> None:
    e = UnknownModelError("vendor/does-not-exist")
    assert e.status_code == 400
    assert "vendor/does-not-exist" in e.message
    assert e.error_code == "UnknownModelError"


def test_duplicate_name_is_409() -> None:
    e = DuplicateNameError("a-b", ["a/b", "a.b"])
    assert e.status_code == 409
    assert e.details == {"name": "a-b", "model_ids": ["a/b", "a.b"]}


def test_secret_unavailable() -> None:
    e = SecretUnavailableError("mistralai/Mistral-7B-Instruct-v0.1")
    assert e.status_code == 400
    assert e.details.get("model_id") == "mistralai/Mistral-7B-Instruct-v0.1"


def test_scheduler_role_error_is_provisioning_error() -> None:
    e = SchedulerRoleError("model-fleet-scheduler-role")
    assert isinstance(e, ProvisioningError)
    assert e.status_code == 502
    assert e.details.get("role_name") == "model-fleet-scheduler-role"


def test_invalid_schedule_and_registry_not_found() -> None:
    assert InvalidScheduleError("bad").status_code == 422
    e = RegistryNotFoundError("/model-fleet/models")
    assert e.status_code == 404


def test_fleet_error_base() -> None:
    e = FleetError("msg", status_code=500, error_code="TestError")
    assert str(e) == "msg"
    assert e.error_code == "TestError"
    assert e.details == {}
