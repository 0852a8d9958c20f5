"""Unit tests for the registry document."""

import json

import pytest

from model_fleet.core.errors import RegistryNotFoundError
from model_fleet.services.memory_provider import MemoryFleetProvider
from model_fleet.services.registry_publisher import (
    build_registry_document,
    publish,
    read_registry,
    serialize_registry,
)

PARAM = "/model-fleet/models"


def test_document_schema_and_order(make_endpoint) -> None:
    endpoints = [make_endpoint("HuggingFaceM4/idefics-9b-instruct"), make_endpoint("amazon/FalconLite")]
    data = json.loads(serialize_registry(endpoints))
    assert [d["name"] for d in data] == ["HuggingFaceM4-idefics-9b-instruct", "amazon-FalconLite"]
    assert data[0] == {
        "name": "HuggingFaceM4-idefics-9b-instruct",
        "endpoint": "HuggingFaceM4-idefics-9b-instruct",
        "responseStreamingSupported": False,
        "inputModalities": ["Text", "Image"],
        "outputModalities": ["Text"],
        "interface": "multimodal",
        "ragSupported": False,
    }


def test_serialization_is_compact_and_stable(make_endpoint) -> None:
    endpoints = [make_endpoint("amazon/FalconLite")]
    first = serialize_registry(endpoints)
    assert first == serialize_registry(list(endpoints))
    assert ", " not in first and ": " not in first
    assert first.startswith('[{"name":"amazon-FalconLite","endpoint":')


def test_empty_fleet_document() -> None:
    assert serialize_registry([]) == "[]"
    assert build_registry_document([]) == []


@pytest.mark.asyncio
async def test_publish_overwrites_and_reads_back(make_endpoint, provider: MemoryFleetProvider) -> None:
    await publish([make_endpoint("amazon/FalconLite")], provider, PARAM)
    document = await publish([make_endpoint("mistralai/Mistral-7B-Instruct-v0.1")], provider, PARAM)
    assert provider.documents[PARAM] == document
    entries = await read_registry(provider, PARAM)
    assert [e.name for e in entries] == ["mistralai-Mistral-7B-Instruct-v0-1"]
    assert entries[0].rag_supported is True


@pytest.mark.asyncio
async def test_read_registry_missing(provider: MemoryFleetProvider) -> None:
    with pytest.raises(RegistryNotFoundError):
        await read_registry(provider, PARAM)
