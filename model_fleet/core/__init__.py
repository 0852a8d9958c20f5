"""Core configuration, logging, errors, and telemetry."""

from model_fleet.core.config import Settings, get_settings
from model_fleet.core.errors import (
    DuplicateNameError,
    FleetError,
    InvalidScheduleError,
    ProvisioningError,
    RegistryNotFoundError,
    SchedulerRoleError,
    SecretUnavailableError,
    UnauthorizedError,
    UnknownModelError,
)
from model_fleet.core.logging import configure_logging, structured_log
from model_fleet.core.telemetry import (
    get_metrics,
    get_trace_context,
    get_tracer,
    init_telemetry,
    instrument_fastapi,
    span,
)

__all__ = [
    "Settings",
    "get_settings",
    "FleetError",
    "UnknownModelError",
    "DuplicateNameError",
    "SecretUnavailableError",
    "ProvisioningError",
    "SchedulerRoleError",
    "InvalidScheduleError",
    "RegistryNotFoundError",
    "UnauthorizedError",
    "configure_logging",
    "structured_log",
    "init_telemetry",
    "instrument_fastapi",
    "get_tracer",
    "get_trace_context",
    "get_metrics",
    "span",
]
