"""Resolve requested model ids into provisioned endpoints.

Resolution runs in two phases. ``plan`` is pure: it looks every id up in the
catalog, derives names and detects collisions over the whole request. Only a
plan without fatal errors is materialized through the provider.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence

from model_fleet.core.errors import DuplicateNameError, ProvisioningError, SecretUnavailableError, UnknownModelError
from model_fleet.core.logging import structured_log
from model_fleet.core.telemetry import record_endpoint_provisioned, record_provisioning_failure, span
from model_fleet.models.catalog import ModelCatalog, ModelDescriptor
from model_fleet.models.entities import DeploymentRequest, ResolutionError, ResolvedEndpoint, SharedResources
from model_fleet.services.base_provider import BaseFleetProvider
from model_fleet.services.endpoint_naming import derive_name
from model_fleet.services.secret_source import SecretLookup, no_secrets


@dataclass(frozen=True)
class PlannedModel:
    requested_id: str
    name: str
    descriptor: ModelDescriptor


@dataclass
class Resolution:
    endpoints: list[ResolvedEndpoint] = field(default_factory=list)
    errors: list[ResolutionError] = field(default_factory=list)

    @property
    def fatal(self) -> bool:
        return any(e.fatal for e in self.errors)


def build_environment(descriptor: ModelDescriptor, token: Optional[str]) -> dict[str, str]:
    """Container environment: model id, catalog values, then the access token for gated models."""
    env = {"HF_MODEL_ID": descriptor.model_id, **descriptor.environment}
    if descriptor.requires_token:
        env["HF_TOKEN"] = token or ""
    return env


class FleetResolver:
    def __init__(
        self,
        catalog: ModelCatalog,
        provider: BaseFleetProvider,
        *,
        secret_for: SecretLookup = no_secrets,
        shared: Optional[SharedResources] = None,
        unknown_model_policy: Literal["skip", "fail"] = "skip",
        strict_secrets: bool = True,
        concurrency: int = 1,
    ) -> None:
        self.catalog = catalog
        self.provider = provider
        self.secret_for = secret_for
        self.shared = shared or SharedResources()
        self.unknown_model_policy = unknown_model_policy
        self.strict_secrets = strict_secrets
        self.concurrency = max(1, concurrency)

    def plan(self, requested_ids: Sequence[str]) -> tuple[list[PlannedModel], list[ResolutionError]]:
        """
        Look up every requested id and derive endpoint names without side effects.

        Raises UnknownModelError on a catalog miss when the policy is ``fail``.
        """
        plans: list[PlannedModel] = []
        errors: list[ResolutionError] = []
        by_name: dict[str, list[str]] = {}

        for requested in requested_ids:
            descriptor = self.catalog.lookup(requested)
            if descriptor is None:
                if self.unknown_model_policy == "fail":
                    raise UnknownModelError(requested)
                errors.append(
                    ResolutionError(kind="UnknownModel", subject=requested, message=f"Unknown model: {requested}")
                )
                continue
            name = derive_name(descriptor.model_id)
            by_name.setdefault(name, []).append(requested)
            plans.append(PlannedModel(requested_id=requested, name=name, descriptor=descriptor))

        for name, ids in by_name.items():
            if len(ids) > 1:
                exc = DuplicateNameError(name, ids)
                errors.append(ResolutionError(kind="DuplicateName", subject=name, message=exc.message, fatal=True))
        return plans, errors

    async def _request_for(self, planned: PlannedModel, pass_id: Optional[str]) -> DeploymentRequest | ResolutionError:
        descriptor = planned.descriptor
        token: Optional[str] = None
        if descriptor.requires_token:
            # Secret lookups may block on AWS
            token = await asyncio.to_thread(self.secret_for, descriptor.model_id)
            if not token:
                if self.strict_secrets:
                    exc = SecretUnavailableError(descriptor.model_id)
                    return ResolutionError(kind="SecretUnavailable", subject=descriptor.model_id, message=exc.message)
                structured_log(
                    "WARNING",
                    "Gated model deployed without access token",
                    pass_id=pass_id,
                    model_id=descriptor.model_id,
                    operation="resolve",
                )
        return DeploymentRequest(
            name=planned.name,
            descriptor=descriptor,
            environment=build_environment(descriptor, token),
            shared=self.shared,
        )

    async def _materialize(
        self,
        request: DeploymentRequest,
        semaphore: asyncio.Semaphore,
        pass_id: Optional[str],
    ) -> ResolvedEndpoint | ResolutionError:
        async with semaphore:
            start = time.perf_counter()
            try:
                with span("fleet.materialize", {"model_id": request.model_id, "name": request.name}):
                    provisioned = await self.provider.create_model_endpoint(request)
            except ProvisioningError as exc:
                record_provisioning_failure()
                structured_log(
                    "ERROR",
                    "Endpoint provisioning failed",
                    pass_id=pass_id,
                    model_id=request.model_id,
                    operation="materialize",
                    error={"type": exc.error_code, "message": exc.message, "details": exc.details},
                )
                return ResolutionError(kind="ProvisioningFailure", subject=request.model_id, message=exc.message)
            record_endpoint_provisioned()
            structured_log(
                "INFO",
                "Endpoint provisioned",
                pass_id=pass_id,
                model_id=request.model_id,
                operation="materialize",
                duration_ms=(time.perf_counter() - start) * 1000,
                metadata={"endpoint_name": provisioned.endpoint_name},
            )
            return ResolvedEndpoint(
                name=request.name,
                endpoint_handle=provisioned.handle,
                endpoint_name=provisioned.endpoint_name,
                endpoint_config_name=provisioned.endpoint_config_name,
                descriptor=request.descriptor,
            )

    async def resolve(self, requested_ids: Sequence[str], *, pass_id: Optional[str] = None) -> Resolution:
        """Plan, then provision every planned model. Output order follows ``requested_ids``."""
        plans, errors = self.plan(requested_ids)
        if any(e.fatal for e in errors):
            structured_log(
                "ERROR",
                "Duplicate endpoint names; nothing provisioned",
                pass_id=pass_id,
                operation="resolve",
                metadata={"duplicates": [e.subject for e in errors if e.fatal]},
            )
            return Resolution(errors=errors)

        requests: list[DeploymentRequest] = []
        for planned in plans:
            outcome = await self._request_for(planned, pass_id)
            if isinstance(outcome, ResolutionError):
                errors.append(outcome)
            else:
                requests.append(outcome)

        semaphore = asyncio.Semaphore(self.concurrency)
        outcomes = await asyncio.gather(*(self._materialize(r, semaphore, pass_id) for r in requests))

        resolution = Resolution(errors=errors)
        for result in outcomes:
            if isinstance(result, ResolutionError):
                resolution.errors.append(result)
            else:
                resolution.endpoints.append(result)
        return resolution
