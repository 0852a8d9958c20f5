"""One resolve → publish → schedule pass over the configured fleet."""

import time
import uuid
from typing import Optional, Sequence

from model_fleet.core.config import Settings, get_settings
from model_fleet.core.errors import SchedulerRoleError
from model_fleet.core.logging import structured_log
from model_fleet.core.telemetry import record_pass_duration, span
from model_fleet.models.catalog import ModelCatalog, default_catalog
from model_fleet.models.entities import FleetPassReport, SharedResources
from model_fleet.services import lifecycle_scheduler, registry_publisher
from model_fleet.services.base_provider import BaseFleetProvider
from model_fleet.services.model_resolver import FleetResolver
from model_fleet.services.provider_factory import provider_for, secret_source_for
from model_fleet.services.secret_source import SecretLookup


def _generate_pass_id() -> str:
    return f"pass_{uuid.uuid4().hex[:12]}"


def shared_from_settings(settings: Settings) -> SharedResources:
    return SharedResources(
        security_group_ids=tuple(settings.security_groups),
        subnet_ids=tuple(settings.subnets),
        kms_key_id=settings.kms_key_id or None,
        execution_role_arn=settings.endpoint_execution_role_arn or None,
    )


async def run_fleet_pass(
    settings: Optional[Settings] = None,
    *,
    provider: Optional[BaseFleetProvider] = None,
    catalog: Optional[ModelCatalog] = None,
    secret_for: Optional[SecretLookup] = None,
    requested: Optional[Sequence[str]] = None,
    schedule_enabled: Optional[bool] = None,
) -> FleetPassReport:
    """
    Resolve the requested models, publish the registry document, then attach schedules.

    The document is written once, after every resolution in the pass has
    finished. A pass with a fatal error publishes and schedules nothing.
    Raises UnknownModelError (fail policy) and InvalidScheduleError before
    any side effect.
    """
    settings = settings or get_settings()
    provider = provider or provider_for(settings)
    catalog = catalog or default_catalog()
    secret_for = secret_for or secret_source_for(settings)
    requested_ids = list(requested if requested is not None else settings.requested_models)
    scheduling = settings.schedule_enabled if schedule_enabled is None else schedule_enabled

    pass_id = _generate_pass_id()
    report = FleetPassReport(pass_id=pass_id, requested=requested_ids)
    start = time.perf_counter()

    # Validate schedule config up front so a bad value never leaves a half-applied pass
    schedule = lifecycle_scheduler.build_schedule_spec(settings) if scheduling else None

    structured_log(
        "INFO",
        "Fleet pass started",
        pass_id=pass_id,
        operation="pass",
        metadata={"requested": requested_ids, "schedule_enabled": scheduling},
    )

    resolver = FleetResolver(
        catalog,
        provider,
        secret_for=secret_for,
        shared=shared_from_settings(settings),
        unknown_model_policy=settings.unknown_model_policy,
        strict_secrets=settings.strict_secrets,
        concurrency=settings.provisioning_concurrency,
    )

    try:
        with span("fleet.pass", {"pass_id": pass_id, "requested": len(requested_ids)}):
            resolution = await resolver.resolve(requested_ids, pass_id=pass_id)
            report.endpoints = resolution.endpoints
            report.errors = resolution.errors

            if resolution.fatal:
                return report

            report.registry_document = await registry_publisher.publish(
                resolution.endpoints,
                provider,
                settings.registry_parameter_name,
                pass_id=pass_id,
            )
            report.published = True

            if schedule is not None:
                try:
                    report.bindings = await lifecycle_scheduler.attach(
                        resolution.endpoints,
                        schedule,
                        provider,
                        enabled=True,
                        prefix=settings.prefix,
                        pass_id=pass_id,
                    )
                except SchedulerRoleError as exc:
                    report.scheduling_error = exc.message
                    structured_log(
                        "ERROR",
                        "Scheduler role unavailable; no triggers installed",
                        pass_id=pass_id,
                        operation="schedule",
                        error={"type": exc.error_code, "message": exc.message, "details": exc.details},
                    )
            return report
    finally:
        elapsed = time.perf_counter() - start
        report.duration_ms = elapsed * 1000
        record_pass_duration(elapsed)
        structured_log(
            "INFO",
            "Fleet pass finished",
            pass_id=pass_id,
            operation="pass",
            duration_ms=report.duration_ms,
            metadata={
                "endpoints": len(report.endpoints),
                "errors": len(report.errors),
                "fatal": report.fatal,
                "published": report.published,
                "bindings": len(report.bindings),
            },
        )
