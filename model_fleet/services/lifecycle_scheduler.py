"""Start/stop triggers that bound each endpoint's running hours.

Every endpoint gets two recurring triggers sharing one execution role: the
start trigger creates the endpoint from its config, the stop trigger deletes
it. Endpoint state (Stopped, Starting, Running, Stopping) is owned by
SageMaker; nothing here tracks it.
"""

import re
from datetime import date
from typing import Optional, Sequence

from model_fleet.core.config import Settings
from model_fleet.core.errors import InvalidScheduleError, ProvisioningError
from model_fleet.core.logging import structured_log
from model_fleet.core.telemetry import record_schedule_triggers, span
from model_fleet.models.entities import ResolvedEndpoint, ScheduleBinding, ScheduleSpec
from model_fleet.services.base_provider import BaseFleetProvider
from model_fleet.services.endpoint_naming import schedule_name, scheduler_role_name

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DAY = re.compile(r"^(MON|TUE|WED|THU|FRI|SAT|SUN|[1-7])(#[1-5]|L)?$")
_EXPRESSION = re.compile(r"^(cron|rate|at)\(.+\)$")


def _validate_days(days: str) -> str:
    value = (days or "").strip().upper()
    if value in ("*", "?"):
        return value
    if not value:
        raise InvalidScheduleError("Schedule days must not be empty")
    for part in value.split(","):
        bounds = part.split("-")
        if len(bounds) > 2 or not all(_DAY.match(b) for b in bounds):
            raise InvalidScheduleError(f"Invalid schedule days: {days!r}")
    return value


def cron_for(days: str, hhmm: str) -> str:
    """``cron(MM HH ? * DAYS *)`` for a days-of-week field and an ``HH:MM`` time."""
    match = _HHMM.match((hhmm or "").strip())
    if not match:
        raise InvalidScheduleError(f"Invalid schedule time, expected HH:MM: {hhmm!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    return f"cron({minute} {hour} ? * {_validate_days(days)} *)"


def _validate_expression(expr: str, field_name: str) -> str:
    value = (expr or "").strip()
    if not _EXPRESSION.match(value):
        raise InvalidScheduleError(f"{field_name} must be a cron(...), rate(...) or at(...) expression")
    return value


def build_schedule_spec(settings: Settings) -> ScheduleSpec:
    """Build start/stop expressions from settings; raise InvalidScheduleError if malformed."""
    if settings.schedule_cron_format:
        start = _validate_expression(settings.schedule_cron_start, "schedule_cron_start")
        stop = _validate_expression(settings.schedule_cron_stop, "schedule_cron_stop")
    else:
        start = cron_for(settings.schedule_days, settings.schedule_start_time)
        stop = cron_for(settings.schedule_days, settings.schedule_stop_time)

    end_date: Optional[str] = None
    if settings.schedule_end_date.strip():
        try:
            end_date = date.fromisoformat(settings.schedule_end_date.strip()).isoformat()
        except ValueError as exc:
            raise InvalidScheduleError(f"Invalid schedule_end_date: {settings.schedule_end_date!r}") from exc

    return ScheduleSpec(
        start_expression=start,
        stop_expression=stop,
        timezone=settings.schedule_timezone.strip() or "UTC",
        end_date=end_date,
    )


async def attach(
    endpoints: Sequence[ResolvedEndpoint],
    schedule: ScheduleSpec,
    provider: BaseFleetProvider,
    *,
    enabled: bool = True,
    prefix: str = "",
    pass_id: Optional[str] = None,
) -> list[ScheduleBinding]:
    """
    Install a start and a stop trigger per endpoint.

    Returns [] without touching the provider when disabled or when there is
    nothing to schedule. Raises SchedulerRoleError when the shared role cannot
    be created; a failed trigger only marks that endpoint's binding.
    """
    if not enabled or not endpoints:
        return []

    with span("fleet.schedule.role"):
        role_arn = await provider.ensure_scheduler_role(scheduler_role_name(prefix))

    bindings: list[ScheduleBinding] = []
    installed = 0
    for endpoint in endpoints:
        binding = ScheduleBinding(
            endpoint_name=endpoint.endpoint_name,
            start_expression=schedule.start_expression,
            stop_expression=schedule.stop_expression,
            role_arn=role_arn,
        )
        try:
            with span("fleet.schedule.endpoint", {"endpoint": endpoint.endpoint_name}):
                binding.start_trigger = await provider.upsert_schedule(
                    schedule_name(endpoint.endpoint_name, "start"),
                    "start",
                    schedule.start_expression,
                    endpoint,
                    role_arn,
                    timezone=schedule.timezone,
                    end_date=schedule.end_date,
                )
                installed += 1
                binding.stop_trigger = await provider.upsert_schedule(
                    schedule_name(endpoint.endpoint_name, "stop"),
                    "stop",
                    schedule.stop_expression,
                    endpoint,
                    role_arn,
                    timezone=schedule.timezone,
                    end_date=schedule.end_date,
                )
                installed += 1
        except ProvisioningError as exc:
            binding.ok = False
            binding.error = exc.message
            structured_log(
                "ERROR",
                "Schedule trigger installation failed",
                pass_id=pass_id,
                model_id=endpoint.model_id,
                operation="schedule",
                error={"type": exc.error_code, "message": exc.message},
            )
        bindings.append(binding)

    record_schedule_triggers(installed)
    structured_log(
        "INFO",
        "Lifecycle schedules attached",
        pass_id=pass_id,
        operation="schedule",
        metadata={
            "endpoints": len(bindings),
            "triggers": installed,
            "failed": [b.endpoint_name for b in bindings if not b.ok],
        },
    )
    return bindings
