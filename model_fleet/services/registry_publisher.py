"""Fleet registry document: build, serialize, publish, read back."""

import json
from typing import Sequence

from pydantic import TypeAdapter

from model_fleet.core.errors import RegistryNotFoundError
from model_fleet.core.logging import structured_log
from model_fleet.core.telemetry import record_registry_publish, span
from model_fleet.models.entities import ResolvedEndpoint
from model_fleet.models.schemas import RegistryEntry
from model_fleet.services.base_provider import BaseFleetProvider

_registry_adapter = TypeAdapter(list[RegistryEntry])


def to_registry_entry(endpoint: ResolvedEndpoint) -> RegistryEntry:
    d = endpoint.descriptor
    return RegistryEntry(
        name=endpoint.name,
        endpoint=endpoint.endpoint_name,
        response_streaming_supported=d.response_streaming_supported,
        input_modalities=list(d.input_modalities),
        output_modalities=list(d.output_modalities),
        interface=d.interface,
        rag_supported=d.rag_supported,
    )


def build_registry_document(endpoints: Sequence[ResolvedEndpoint]) -> list[RegistryEntry]:
    """One entry per endpoint, in resolution order."""
    return [to_registry_entry(ep) for ep in endpoints]


def serialize_registry(endpoints: Sequence[ResolvedEndpoint]) -> str:
    """Compact JSON; identical input always yields identical bytes."""
    entries = [e.model_dump(mode="json", by_alias=True) for e in build_registry_document(endpoints)]
    return json.dumps(entries, separators=(",", ":"), ensure_ascii=False)


def parse_registry(document: str) -> list[RegistryEntry]:
    return _registry_adapter.validate_json(document)


async def publish(
    endpoints: Sequence[ResolvedEndpoint],
    provider: BaseFleetProvider,
    parameter_name: str,
    *,
    pass_id: str | None = None,
) -> str:
    """Overwrite the registry document under ``parameter_name`` and return what was written."""
    document = serialize_registry(endpoints)
    with span("fleet.publish", {"parameter": parameter_name, "entries": len(endpoints)}):
        await provider.put_registry_document(parameter_name, document)
    record_registry_publish()
    structured_log(
        "INFO",
        "Fleet registry published",
        pass_id=pass_id,
        operation="publish",
        metadata={"parameter": parameter_name, "entries": len(endpoints), "bytes": len(document.encode("utf-8"))},
    )
    return document


async def read_registry(provider: BaseFleetProvider, parameter_name: str) -> list[RegistryEntry]:
    document = await provider.get_registry_document(parameter_name)
    if document is None:
        raise RegistryNotFoundError(parameter_name)
    return parse_registry(document)
