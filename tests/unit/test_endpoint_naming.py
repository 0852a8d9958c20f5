"""Unit tests for endpoint naming."""

import pytest

from model_fleet.models.catalog import default_catalog
from model_fleet.services.endpoint_naming import (
    MAX_SCHEDULE_NAME_LENGTH,
    derive_name,
    prefixed,
    schedule_name,
    scheduler_role_name,
)


def test_derive_name_replaces_separators() -> None:
    assert derive_name("mistralai/Mistral-7B-Instruct-v0.1") == "mistralai-Mistral-7B-Instruct-v0-1"
    assert derive_name("meta-llama/Meta-Llama-3.1-8B-Instruct") == "meta-llama-Meta-Llama-3-1-8B-Instruct"


@pytest.mark.parametrize("model_id", default_catalog().ids())
def test_derive_name_is_idempotent(model_id: str) -> None:
    name = derive_name(model_id)
    assert "/" not in name and "." not in name
    assert derive_name(name) == name
    assert derive_name(model_id) == name


def test_catalog_names_are_unique() -> None:
    names = [derive_name(m) for m in default_catalog().ids()]
    assert len(names) == len(set(names))


def test_prefixed() -> None:
    assert prefixed("", "x") == "x"
    assert prefixed("dev", "x") == "dev-x"


def test_schedule_name_keeps_suffix() -> None:
    assert schedule_name("amazon-FalconLite", "start") == "amazon-FalconLite-start"
    long_name = schedule_name("x" * 100, "stop")
    assert len(long_name) == MAX_SCHEDULE_NAME_LENGTH
    assert long_name.endswith("-stop")


def test_scheduler_role_name() -> None:
    assert scheduler_role_name() == "model-fleet-scheduler-role"
    assert scheduler_role_name("dev") == "dev-model-fleet-scheduler-role"
