"""Unit tests for the fleet resolver."""

import threading

import pytest

from model_fleet.core.errors import UnknownModelError
from model_fleet.models.catalog import default_catalog
from model_fleet.models.entities import SharedResources
from model_fleet.services.memory_provider import MemoryFleetProvider
from model_fleet.services.model_resolver import FleetResolver, build_environment
from model_fleet.services.secret_source import static_token_source

MISTRAL_V01 = "mistralai/Mistral-7B-Instruct-v0.1"
IDEFICS_9B = "HuggingFaceM4/idefics-9b-instruct"
FALCON_LITE = "amazon/FalconLite"


def _resolver(provider: MemoryFleetProvider, **kwargs) -> FleetResolver:
    kwargs.setdefault("secret_for", static_token_source("hf_test_token"))
    return FleetResolver(default_catalog(), provider, **kwargs)


@pytest.mark.asyncio
async def test_resolves_mistral_with_derived_name(provider: MemoryFleetProvider) -> None:
    resolution = await _resolver(provider).resolve([MISTRAL_V01])
    assert resolution.errors == []
    [ep] = resolution.endpoints
    assert ep.name == "mistralai-Mistral-7B-Instruct-v0-1"
    assert ep.descriptor.rag_supported is True
    assert ep.descriptor.response_streaming_supported is False
    assert ep.descriptor.input_modalities == ("Text",)
    assert ep.endpoint_handle.startswith("arn:aws:sagemaker:")


@pytest.mark.asyncio
async def test_resolves_in_input_order(provider: MemoryFleetProvider) -> None:
    requested = [IDEFICS_9B, FALCON_LITE, MISTRAL_V01]
    resolution = await _resolver(provider, concurrency=3).resolve(requested)
    assert [ep.model_id for ep in resolution.endpoints] == requested
    assert not any(e.kind == "DuplicateName" for e in resolution.errors)


@pytest.mark.asyncio
async def test_unknown_model_is_recorded_and_others_resolve(provider: MemoryFleetProvider) -> None:
    resolution = await _resolver(provider).resolve(["vendor/does-not-exist", FALCON_LITE])
    assert [ep.model_id for ep in resolution.endpoints] == [FALCON_LITE]
    assert [(e.kind, e.subject) for e in resolution.errors] == [("UnknownModel", "vendor/does-not-exist")]
    assert resolution.fatal is False


@pytest.mark.asyncio
async def test_unknown_model_fail_policy_raises_before_side_effects(provider: MemoryFleetProvider) -> None:
    resolver = _resolver(provider, unknown_model_policy="fail")
    with pytest.raises(UnknownModelError):
        await resolver.resolve([FALCON_LITE, "vendor/does-not-exist"])
    assert provider.calls == []


@pytest.mark.asyncio
async def test_duplicate_ids_are_fatal_and_nothing_is_provisioned(provider: MemoryFleetProvider) -> None:
    resolution = await _resolver(provider).resolve([FALCON_LITE, MISTRAL_V01, FALCON_LITE])
    assert resolution.fatal is True
    assert resolution.endpoints == []
    dup = [e for e in resolution.errors if e.kind == "DuplicateName"]
    assert len(dup) == 1
    assert dup[0].subject == "amazon-FalconLite"
    assert provider.calls == []


@pytest.mark.asyncio
async def test_alias_and_canonical_id_collide(provider: MemoryFleetProvider) -> None:
    resolution = await _resolver(provider).resolve(["Mistral7b_Instruct", MISTRAL_V01])
    assert resolution.fatal is True
    assert provider.endpoints == {}


def test_plan_is_pure(provider: MemoryFleetProvider) -> None:
    plans, errors = _resolver(provider).plan(["Idefics_9b", "vendor/x"])
    assert [p.name for p in plans] == ["HuggingFaceM4-idefics-9b-instruct"]
    assert [e.kind for e in errors] == ["UnknownModel"]
    assert provider.calls == []


@pytest.mark.asyncio
async def test_strict_secrets_skip_gated_model(provider: MemoryFleetProvider) -> None:
    resolver = _resolver(provider, secret_for=static_token_source(None))
    resolution = await resolver.resolve([MISTRAL_V01, FALCON_LITE])
    assert [ep.model_id for ep in resolution.endpoints] == [FALCON_LITE]
    assert [(e.kind, e.subject) for e in resolution.errors] == [("SecretUnavailable", MISTRAL_V01)]
    assert "mistralai-Mistral-7B-Instruct-v0-1" not in provider.endpoints


@pytest.mark.asyncio
async def test_lenient_secrets_substitute_empty_token(provider: MemoryFleetProvider) -> None:
    resolver = _resolver(provider, secret_for=static_token_source(None), strict_secrets=False)
    resolution = await resolver.resolve([MISTRAL_V01])
    assert resolution.errors == []
    request = provider.endpoints["mistralai-Mistral-7B-Instruct-v0-1"]
    assert request.environment["HF_TOKEN"] == ""


@pytest.mark.asyncio
async def test_token_and_shared_handles_reach_the_provider(provider: MemoryFleetProvider) -> None:
    shared = SharedResources(security_group_ids=("sg-1",), subnet_ids=("subnet-1",), kms_key_id="key-1")
    await _resolver(provider, shared=shared).resolve([MISTRAL_V01])
    request = provider.endpoints["mistralai-Mistral-7B-Instruct-v0-1"]
    assert request.environment["HF_TOKEN"] == "hf_test_token"
    assert request.environment["HF_MODEL_ID"] == MISTRAL_V01
    assert request.shared is shared


@pytest.mark.asyncio
async def test_provisioning_failure_is_per_model(provider: MemoryFleetProvider) -> None:
    provider.fail_models.add(IDEFICS_9B)
    resolution = await _resolver(provider).resolve([IDEFICS_9B, FALCON_LITE])
    assert [ep.model_id for ep in resolution.endpoints] == [FALCON_LITE]
    assert [(e.kind, e.subject) for e in resolution.errors] == [("ProvisioningFailure", IDEFICS_9B)]
    assert resolution.fatal is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "model_id",
    [
        "mistralai/Mistral-7B-Instruct-v0.3",
        "meta-llama/Llama-2-13b-chat-hf",
        "meta-llama/Meta-Llama-3.1-8B-Instruct",
        "meta-llama/Meta-Llama-3.1-70B-Instruct",
    ],
)
async def test_gated_hub_models_receive_token(provider: MemoryFleetProvider, model_id: str) -> None:
    resolution = await _resolver(provider).resolve([model_id])
    assert resolution.errors == []
    [ep] = resolution.endpoints
    env = provider.endpoints[ep.name].environment
    assert env["HF_MODEL_ID"] == model_id
    assert env["HF_TOKEN"] == "hf_test_token"


@pytest.mark.asyncio
async def test_gated_hub_model_without_token_is_not_provisioned(provider: MemoryFleetProvider) -> None:
    resolver = _resolver(provider, secret_for=static_token_source(None))
    resolution = await resolver.resolve(["meta-llama/Meta-Llama-3.1-8B-Instruct"])
    assert [e.kind for e in resolution.errors] == ["SecretUnavailable"]
    assert provider.endpoints == {}


def test_build_environment_only_adds_token_for_gated_models() -> None:
    falcon = default_catalog().lookup(FALCON_LITE)
    assert falcon is not None
    env = build_environment(falcon, "hf_ignored")
    assert "HF_TOKEN" not in env
    assert env["HF_MODEL_ID"] == FALCON_LITE
    assert env["HF_MODEL_QUANTIZE"] == "gptq"


@pytest.mark.asyncio
async def test_secret_lookup_runs_off_the_event_loop_thread(provider: MemoryFleetProvider) -> None:
    loop_thread = threading.get_ident()
    lookup_threads: list[int] = []

    def secret_for(model_id: str) -> str:
        lookup_threads.append(threading.get_ident())
        return "hf_test_token"

    await _resolver(provider, secret_for=secret_for).resolve([MISTRAL_V01])
    assert lookup_threads and loop_thread not in lookup_threads
