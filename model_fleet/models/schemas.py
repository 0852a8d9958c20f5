"""Pydantic models for the registry document and the HTTP API."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from model_fleet.models.catalog import Modality, ModelDescriptor, ModelInterface


# --- Registry document ---
class RegistryEntry(BaseModel):
    """One element of the published fleet registry document.

    Field order is the serialized key order; consumers parse by key but the
    fixed order keeps republished documents byte-identical.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    endpoint: str
    response_streaming_supported: bool = Field(alias="responseStreamingSupported")
    input_modalities: list[Modality] = Field(alias="inputModalities")
    output_modalities: list[Modality] = Field(alias="outputModalities")
    interface: ModelInterface
    rag_supported: bool = Field(alias="ragSupported")


# --- Catalog ---
class CatalogEntrySchema(BaseModel):
    """GET /v1/catalog element."""

    model_id: str
    name: str
    aliases: list[str] = Field(default_factory=list)
    compute_class: str
    container_image: str
    startup_timeout_seconds: int
    input_modalities: list[Modality]
    output_modalities: list[Modality]
    interface: ModelInterface
    rag_supported: bool
    response_streaming_supported: bool
    requires_token: bool
    source: Literal["huggingface", "jumpstart"]

    @classmethod
    def from_descriptor(cls, d: ModelDescriptor, name: str) -> "CatalogEntrySchema":
        return cls(
            model_id=d.model_id,
            name=name,
            aliases=list(d.aliases),
            compute_class=d.compute_class,
            container_image=d.container_image,
            startup_timeout_seconds=d.startup_timeout_seconds,
            input_modalities=list(d.input_modalities),
            output_modalities=list(d.output_modalities),
            interface=d.interface,
            rag_supported=d.rag_supported,
            response_streaming_supported=d.response_streaming_supported,
            requires_token=d.requires_token,
            source=d.source,
        )


# --- Fleet pass ---
class FleetPassRequest(BaseModel):
    """POST /v1/fleet/passes body; omitted fields fall back to settings."""

    models: Optional[list[str]] = Field(
        default=None,
        max_length=64,
        description="Ordered model ids or aliases; defaults to FLEET_MODELS",
    )
    schedule_enabled: Optional[bool] = Field(default=None, description="Override FLEET_SCHEDULE_ENABLED")


class ResolutionErrorSchema(BaseModel):
    kind: Literal["UnknownModel", "DuplicateName", "SecretUnavailable", "ProvisioningFailure"]
    subject: str
    message: str
    fatal: bool = False


class ResolvedEndpointSchema(BaseModel):
    name: str
    model_id: str
    endpoint: str
    handle: str


class ScheduleBindingSchema(BaseModel):
    endpoint_name: str
    start_expression: str
    stop_expression: str
    role_arn: str
    start_trigger: Optional[str] = None
    stop_trigger: Optional[str] = None
    ok: bool = True
    error: Optional[str] = None


class FleetPassResponse(BaseModel):
    """POST /v1/fleet/passes response."""

    pass_id: str
    requested: list[str]
    endpoints: list[ResolvedEndpointSchema] = Field(default_factory=list)
    errors: list[ResolutionErrorSchema] = Field(default_factory=list)
    bindings: list[ScheduleBindingSchema] = Field(default_factory=list)
    published: bool
    registry_document: Optional[str] = None
    scheduling_error: Optional[str] = None
    duration_ms: float = 0.0
