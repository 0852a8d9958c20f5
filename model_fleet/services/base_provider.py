from abc import ABC, abstractmethod
from typing import Literal, Optional

from model_fleet.models.entities import DeploymentRequest, ProvisionedEndpoint, ResolvedEndpoint

ScheduleAction = Literal["start", "stop"]


class BaseFleetProvider(ABC):
    """
    Abstract base class for provisioning backends (AWS, in-memory dry run).
    Keeps resolution, publishing and scheduling independent of WHERE resources live.
    """

    @abstractmethod
    async def create_model_endpoint(self, request: DeploymentRequest) -> ProvisionedEndpoint:
        """Create (or converge on) the compute endpoint for one model."""
        pass

    @abstractmethod
    async def put_registry_document(self, name: str, document: str) -> None:
        """Write or overwrite the registry document under a well-known name."""
        pass

    @abstractmethod
    async def get_registry_document(self, name: str) -> Optional[str]:
        """Return the current registry document, or None if never published."""
        pass

    @abstractmethod
    async def ensure_scheduler_role(self, role_name: str) -> str:
        """Create the shared scheduler role if missing; return its ARN."""
        pass

    @abstractmethod
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
        """Create or update one recurring trigger; return its handle."""
        pass
