"""In-memory entities produced and consumed during a fleet pass."""

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

from model_fleet.models.catalog import ModelDescriptor

ResolutionErrorKind = Literal["UnknownModel", "DuplicateName", "SecretUnavailable", "ProvisioningFailure"]


@dataclass(frozen=True)
class SharedResources:
    """Opaque handles supplied by the shared network/encryption layer."""

    security_group_ids: tuple[str, ...] = ()
    subnet_ids: tuple[str, ...] = ()
    kms_key_id: Optional[str] = None
    execution_role_arn: Optional[str] = None

    @property
    def has_vpc(self) -> bool:
        return bool(self.security_group_ids and self.subnet_ids)


@dataclass(frozen=True)
class DeploymentRequest:
    """Everything a provider needs to materialize one endpoint."""

    name: str
    descriptor: ModelDescriptor
    environment: Mapping[str, str]
    shared: SharedResources

    @property
    def model_id(self) -> str:
        return self.descriptor.model_id


@dataclass(frozen=True)
class ProvisionedEndpoint:
    """Provider result: opaque handle plus the endpoint name consumers call."""

    handle: str
    endpoint_name: str
    endpoint_config_name: str


@dataclass(frozen=True)
class ResolvedEndpoint:
    """One requested model, found in the catalog and provisioned."""

    name: str
    endpoint_handle: str
    endpoint_name: str
    endpoint_config_name: str
    descriptor: ModelDescriptor

    @property
    def model_id(self) -> str:
        return self.descriptor.model_id


@dataclass(frozen=True)
class ResolutionError:
    """A recorded, per-model resolution failure."""

    kind: ResolutionErrorKind
    subject: str
    message: str
    fatal: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "subject": self.subject, "message": self.message, "fatal": self.fatal}


@dataclass(frozen=True)
class ScheduleSpec:
    """Start/stop expressions shared by every endpoint in the fleet."""

    start_expression: str
    stop_expression: str
    timezone: str = "UTC"
    end_date: Optional[str] = None


@dataclass
class ScheduleBinding:
    """The two triggers installed for one endpoint."""

    endpoint_name: str
    start_expression: str
    stop_expression: str
    role_arn: str
    start_trigger: Optional[str] = None
    stop_trigger: Optional[str] = None
    ok: bool = True
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoint_name": self.endpoint_name,
            "start_expression": self.start_expression,
            "stop_expression": self.stop_expression,
            "role_arn": self.role_arn,
            "start_trigger": self.start_trigger,
            "stop_trigger": self.stop_trigger,
            "ok": self.ok,
            "error": self.error,
        }


@dataclass
class FleetPassReport:
    """Outcome of one resolve → publish → schedule pass."""

    pass_id: str
    requested: list[str]
    endpoints: list[ResolvedEndpoint] = field(default_factory=list)
    errors: list[ResolutionError] = field(default_factory=list)
    bindings: list[ScheduleBinding] = field(default_factory=list)
    published: bool = False
    registry_document: Optional[str] = None
    scheduling_error: Optional[str] = None
    duration_ms: float = 0.0

    @property
    def fatal(self) -> bool:
        return any(e.fatal for e in self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pass_id": self.pass_id,
            "requested": list(self.requested),
            "endpoints": [
                {"name": ep.name, "model_id": ep.model_id, "endpoint": ep.endpoint_name, "handle": ep.endpoint_handle}
                for ep in self.endpoints
            ],
            "errors": [e.to_dict() for e in self.errors],
            "bindings": [b.to_dict() for b in self.bindings],
            "published": self.published,
            "registry_document": self.registry_document,
            "scheduling_error": self.scheduling_error,
            "duration_ms": round(self.duration_ms, 2),
        }
