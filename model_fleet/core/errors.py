"""Custom exceptions for the model fleet provisioner."""

from typing import Any, Optional


class FleetError(Exception):
    """Base exception for fleet provisioning errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class UnknownModelError(FleetError):
    """Raised when a requested model id is not in the catalog (fail-fast policy only)."""

    def __init__(self, model_id: str) -> None:
        super().__init__(
            f"Unknown model: {model_id}",
            status_code=400,
            details={"model_id": model_id},
        )


class DuplicateNameError(FleetError):
    """Raised when two requested models derive the same endpoint name."""

    def __init__(self, name: str, model_ids: Optional[list[str]] = None) -> None:
        super().__init__(
            f"Duplicate endpoint name in fleet: {name}",
            status_code=409,
            details={"name": name, "model_ids": model_ids or []},
        )


class SecretUnavailableError(FleetError):
    """Raised when a gated model needs a token and none was supplied."""

    def __init__(self, model_id: str) -> None:
        super().__init__(
            f"Access token required but unavailable for gated model: {model_id}",
            status_code=400,
            details={"model_id": model_id},
        )


class ProvisioningError(FleetError):
    """Raised when an external provisioning call fails."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, status_code=status_code, details=details or {})


class SchedulerRoleError(ProvisioningError):
    """Raised when the shared scheduler execution role cannot be created."""

    def __init__(self, role_name: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Scheduler execution role could not be created: {role_name}",
            details={"role_name": role_name},
        )


class InvalidScheduleError(FleetError):
    """Raised when start/stop schedule configuration is malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=422)


class RegistryNotFoundError(FleetError):
    """Raised when no fleet registry document has been published yet."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Fleet registry document not found: {name}",
            status_code=404,
            details={"name": name},
        )


class UnauthorizedError(FleetError):
    """Raised when the internal API secret is missing or invalid."""

    def __init__(self, message: str = "Invalid or missing internal secret") -> None:
        super().__init__(message, status_code=401)
