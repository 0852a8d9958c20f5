"""In-memory provisioning backend (dry runs and tests)."""

from dataclasses import dataclass, field
from typing import Optional

from model_fleet.core.errors import ProvisioningError, SchedulerRoleError
from model_fleet.models.entities import DeploymentRequest, ProvisionedEndpoint, ResolvedEndpoint
from model_fleet.services.base_provider import BaseFleetProvider, ScheduleAction


@dataclass
class MemorySchedule:
    name: str
    action: ScheduleAction
    expression: str
    endpoint_name: str
    role_arn: str
    timezone: str
    end_date: Optional[str]


@dataclass
class MemoryFleetProvider(BaseFleetProvider):
    """Keeps every side effect in dicts. Names listed in ``fail_*`` simulate API failures."""

    account_id: str = "000000000000"
    region: str = "us-east-1"
    endpoints: dict[str, DeploymentRequest] = field(default_factory=dict)
    documents: dict[str, str] = field(default_factory=dict)
    roles: dict[str, str] = field(default_factory=dict)
    schedules: dict[str, MemorySchedule] = field(default_factory=dict)
    fail_models: set[str] = field(default_factory=set)
    fail_schedules_for: set[str] = field(default_factory=set)
    fail_role: bool = False
    calls: list[str] = field(default_factory=list)

    def _arn(self, service: str, resource: str) -> str:
        return f"arn:aws:{service}:{self.region}:{self.account_id}:{resource}"

    async def create_model_endpoint(self, request: DeploymentRequest) -> ProvisionedEndpoint:
        self.calls.append(f"create_model_endpoint:{request.name}")
        if request.model_id in self.fail_models:
            raise ProvisioningError(
                f"Simulated endpoint failure for {request.model_id}",
                details={"model_id": request.model_id},
            )
        self.endpoints[request.name] = request
        return ProvisionedEndpoint(
            handle=self._arn("sagemaker", f"endpoint/{request.name.lower()}"),
            endpoint_name=request.name,
            endpoint_config_name=request.name,
        )

    async def put_registry_document(self, name: str, document: str) -> None:
        self.calls.append(f"put_registry_document:{name}")
        self.documents[name] = document

    async def get_registry_document(self, name: str) -> Optional[str]:
        return self.documents.get(name)

    async def ensure_scheduler_role(self, role_name: str) -> str:
        self.calls.append(f"ensure_scheduler_role:{role_name}")
        if self.fail_role:
            raise SchedulerRoleError(role_name)
        arn = self.roles.get(role_name)
        if arn is None:
            arn = f"arn:aws:iam::{self.account_id}:role/{role_name}"
            self.roles[role_name] = arn
        return arn

    async def upsert_schedule(
        self,
        name: str,
        action: ScheduleAction,
        expression: str,
        endpoint: ResolvedEndpoint,
        role_arn: str,
        *,
        timezone: str = "UTC",
        end_date: Optional[str] = None,
    ) -> str:
        self.calls.append(f"upsert_schedule:{name}")
        if endpoint.name in self.fail_schedules_for:
            raise ProvisioningError(f"Simulated schedule failure for {name}", details={"schedule": name})
        self.schedules[name] = MemorySchedule(
            name=name,
            action=action,
            expression=expression,
            endpoint_name=endpoint.endpoint_name,
            role_arn=role_arn,
            timezone=timezone,
            end_date=end_date,
        )
        return f"arn:aws:scheduler:{self.region}:{self.account_id}:schedule/default/{name}"
