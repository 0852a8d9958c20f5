"""Model catalog: deployment descriptors for every model the fleet can serve.

Each entry fully specifies how a model is deployed (instance type, serving
container, startup timeout, container environment) and what it advertises to
the serving layer (modalities, calling interface, RAG and streaming support).
Values in ``environment`` are strings because they are passed verbatim as
container environment variables; numbers and booleans are JSON-encoded.

The only value not known here is the Hugging Face access token for gated
models. Entries that need one set ``requires_token`` and the resolver injects
``HF_TOKEN`` at resolution time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Iterator, Literal, Mapping, Optional

Modality = Literal["Text", "Image"]
ModelInterface = Literal["langchain", "multimodal"]
ModelSource = Literal["huggingface", "jumpstart"]

# Hugging Face TGI Deep Learning Containers (repository:tag)
TGI_0_9_3 = "huggingface-pytorch-tgi-inference:2.0.1-tgi0.9.3-gpu-py39-cu118-ubuntu20.04"
TGI_1_1_0 = "huggingface-pytorch-tgi-inference:2.0.1-tgi1.1.0-gpu-py39-cu118-ubuntu20.04"
TGI_2_0_0 = "huggingface-pytorch-tgi-inference:2.1.1-tgi2.0.0-gpu-py310-cu121-ubuntu22.04"
TGI_2_2_0 = "huggingface-pytorch-tgi-inference:2.3.0-tgi2.2.0-gpu-py310-cu121-ubuntu22.04"


@dataclass(frozen=True)
class ModelDescriptor:
    """Immutable catalog entry."""

    model_id: str
    compute_class: str
    container_image: str
    startup_timeout_seconds: int
    environment: Mapping[str, str] = field(default_factory=dict)
    input_modalities: tuple[Modality, ...] = ("Text",)
    output_modalities: tuple[Modality, ...] = ("Text",)
    interface: ModelInterface = "langchain"
    rag_supported: bool = True
    response_streaming_supported: bool = False
    requires_token: bool = False
    source: ModelSource = "huggingface"
    jumpstart_model: Optional[str] = None
    accept_eula: bool = False
    aliases: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.startup_timeout_seconds <= 0:
            raise ValueError(f"{self.model_id}: startup_timeout_seconds must be positive")
        if self.source == "jumpstart" and not self.jumpstart_model:
            raise ValueError(f"{self.model_id}: jumpstart entries need jumpstart_model")
        object.__setattr__(self, "environment", MappingProxyType(dict(self.environment)))


CATALOG_ENTRIES: tuple[ModelDescriptor, ...] = (
    # ── Falcon ───────────────────────────────────────────────────────────────
    ModelDescriptor(
        model_id="amazon/FalconLite",
        compute_class="ml.g5.12xlarge",
        container_image=TGI_0_9_3,
        startup_timeout_seconds=600,
        environment={
            "SM_NUM_GPUS": "4",
            "MAX_INPUT_LENGTH": "12000",
            "MAX_TOTAL_TOKENS": "12001",
            "HF_MODEL_QUANTIZE": "gptq",
            "TRUST_REMOTE_CODE": "true",
            "MAX_BATCH_PREFILL_TOKENS": "12001",
            "MAX_BATCH_TOTAL_TOKENS": "12001",
            "GPTQ_BITS": "4",
            "GPTQ_GROUPSIZE": "128",
            "DNTK_ALPHA_SCALER": "0.25",
        },
        aliases=("FalconLite",),
    ),
    # ── Mistral / Mixtral ────────────────────────────────────────────────────
    ModelDescriptor(
        model_id="mistralai/Mistral-7B-Instruct-v0.1",
        compute_class="ml.g5.2xlarge",
        container_image=TGI_2_0_0,
        startup_timeout_seconds=300,
        environment={
            "SM_NUM_GPUS": "1",
            "MAX_INPUT_LENGTH": "2048",
            "MAX_TOTAL_TOKENS": "4096",
        },
        requires_token=True,
        aliases=("Mistral7b_Instruct",),
    ),
    ModelDescriptor(
        model_id="mistralai/Mistral-7B-Instruct-v0.2",
        compute_class="ml.g5.2xlarge",
        container_image=TGI_2_0_0,
        startup_timeout_seconds=300,
        environment={
            "SM_NUM_GPUS": "1",
            "MAX_INPUT_LENGTH": "2048",
            "MAX_TOTAL_TOKENS": "4096",
            "MAX_CONCURRENT_REQUESTS": "4",
        },
        requires_token=True,
        aliases=("Mistral7b_Instruct2",),
    ),
    ModelDescriptor(
        model_id="mistralai/Mixtral-8x7B-Instruct-v0.1",
        compute_class="ml.g5.48xlarge",
        container_image=TGI_2_0_0,
        startup_timeout_seconds=300,
        environment={
            "SM_NUM_GPUS": "8",
            "MAX_INPUT_LENGTH": "24576",
            "MAX_TOTAL_TOKENS": "32768",
            "MAX_BATCH_PREFILL_TOKENS": "24576",
            "MAX_CONCURRENT_REQUESTS": "4",
        },
        requires_token=True,
        aliases=("Mixtral_8x7b_Instruct",),
    ),
    ModelDescriptor(
        model_id="mistralai/Mistral-7B-Instruct-v0.3",
        compute_class="ml.g5.2xlarge",
        container_image=TGI_2_0_0,
        startup_timeout_seconds=600,
        environment={"SM_NUM_GPUS": "1"},
        source="jumpstart",
        jumpstart_model="huggingface-llm-mistral-7b-instruct@3.0.0",
        requires_token=True,
        aliases=("Mistral7b_Instruct3",),
    ),
    # ── Llama ────────────────────────────────────────────────────────────────
    ModelDescriptor(
        model_id="meta-llama/Llama-2-13b-chat-hf",
        compute_class="ml.g5.12xlarge",
        container_image=TGI_2_0_0,
        startup_timeout_seconds=600,
        environment={"SM_NUM_GPUS": "4"},
        source="jumpstart",
        jumpstart_model="meta-textgeneration-llama-2-13b-f@2.0.2",
        requires_token=True,
        aliases=("Llama2_13b_Chat",),
    ),
    ModelDescriptor(
        model_id="meta-llama/Meta-Llama-3.1-8B-Instruct",
        compute_class="ml.g5.4xlarge",
        container_image=TGI_2_2_0,
        startup_timeout_seconds=600,
        environment={"SM_NUM_GPUS": "1"},
        source="jumpstart",
        jumpstart_model="meta-textgeneration-llama-3-1-8b-instruct@2.1.0",
        requires_token=True,
        accept_eula=True,
        aliases=("Llama3_1_8B_Instruct",),
    ),
    ModelDescriptor(
        model_id="meta-llama/Meta-Llama-3.1-70B-Instruct",
        compute_class="ml.g5.48xlarge",
        container_image=TGI_2_2_0,
        startup_timeout_seconds=900,
        environment={"SM_NUM_GPUS": "8"},
        source="jumpstart",
        jumpstart_model="meta-textgeneration-llama-3-1-70b-instruct@2.1.0",
        requires_token=True,
        accept_eula=True,
        aliases=("Llama3_1_70B_Instruct",),
    ),
    # ── Qwen ─────────────────────────────────────────────────────────────────
    ModelDescriptor(
        model_id="Qwen/Qwen2-7B-Instruct",
        compute_class="ml.g5.4xlarge",
        container_image=TGI_2_2_0,
        startup_timeout_seconds=600,
        environment={"SM_NUM_GPUS": "1"},
        source="jumpstart",
        jumpstart_model="huggingface-llm-qwen2-7b-instruct@1.0.0",
        aliases=("Qwen2_7B_Instruct",),
    ),
    # ── IDEFICS (multimodal) ─────────────────────────────────────────────────
    ModelDescriptor(
        model_id="HuggingFaceM4/idefics-9b-instruct",
        compute_class="ml.g5.12xlarge",
        container_image=TGI_1_1_0,
        startup_timeout_seconds=300,
        environment={
            "SM_NUM_GPUS": "4",
            "MAX_INPUT_LENGTH": "1024",
            "MAX_TOTAL_TOKENS": "2048",
            "MAX_BATCH_TOTAL_TOKENS": "8192",
        },
        input_modalities=("Text", "Image"),
        interface="multimodal",
        rag_supported=False,
        aliases=("Idefics_9b",),
    ),
    ModelDescriptor(
        model_id="HuggingFaceM4/idefics-80b-instruct",
        compute_class="ml.g5.48xlarge",
        container_image=TGI_1_1_0,
        startup_timeout_seconds=600,
        environment={
            "SM_NUM_GPUS": "8",
            "MAX_INPUT_LENGTH": "1024",
            "MAX_TOTAL_TOKENS": "2048",
            "MAX_BATCH_TOTAL_TOKENS": "8192",
            # needed to fit on ml.g5.48xlarge; drop on p4d/p4de instances
            "HF_MODEL_QUANTIZE": "bitsandbytes",
        },
        input_modalities=("Text", "Image"),
        interface="multimodal",
        rag_supported=False,
        aliases=("Idefics_80b",),
    ),
    # ── SeaLLMs ──────────────────────────────────────────────────────────────
    ModelDescriptor(
        model_id="SeaLLMs/SeaLLMs-v3-7B-Chat",
        compute_class="ml.g5.2xlarge",
        container_image=TGI_2_2_0,
        startup_timeout_seconds=300,
        environment={"SM_NUM_GPUS": "1"},
        requires_token=True,
        aliases=("SeaLLMs_v3_7B_Chat",),
    ),
)


class ModelCatalog:
    """Read-only lookup over catalog entries, keyed by model id and alias."""

    def __init__(self, entries: tuple[ModelDescriptor, ...] | list[ModelDescriptor]) -> None:
        by_id: dict[str, ModelDescriptor] = {}
        aliases: dict[str, str] = {}
        for entry in entries:
            if entry.model_id in by_id:
                raise ValueError(f"Duplicate catalog entry: {entry.model_id}")
            by_id[entry.model_id] = entry
            for alias in entry.aliases:
                if alias in aliases or alias in by_id:
                    raise ValueError(f"Ambiguous catalog alias: {alias}")
                aliases[alias] = entry.model_id
        self._by_id = MappingProxyType(by_id)
        self._aliases = MappingProxyType(aliases)

    def canonical_id(self, key: str) -> str:
        """Map an alias to its model id; anything else is returned stripped."""
        k = (key or "").strip()
        return self._aliases.get(k, k)

    def lookup(self, key: str) -> Optional[ModelDescriptor]:
        """Return the descriptor for a model id or alias, or None."""
        return self._by_id.get(self.canonical_id(key))

    def ids(self) -> list[str]:
        return list(self._by_id)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.lookup(key) is not None

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


@lru_cache
def default_catalog() -> ModelCatalog:
    """Return the process-wide catalog built from CATALOG_ENTRIES."""
    return ModelCatalog(CATALOG_ENTRIES)
