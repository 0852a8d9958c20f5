"""Deterministic naming for endpoints and their schedule triggers."""

from __future__ import annotations

# EventBridge Scheduler and IAM role name limit
MAX_SCHEDULE_NAME_LENGTH = 64


def derive_name(model_id: str) -> str:
    """Endpoint name for a model id: ``/`` and ``.`` become ``-``."""
    return (model_id or "").strip().replace("/", "-").replace(".", "-")


def prefixed(prefix: str, name: str) -> str:
    return f"{prefix}-{name}" if prefix else name


def schedule_name(endpoint_name: str, action: str) -> str:
    """Trigger name ``<endpoint>-<action>``; long endpoint names are cut, the suffix is kept."""
    suffix = f"-{action}"
    return endpoint_name[: MAX_SCHEDULE_NAME_LENGTH - len(suffix)] + suffix


def scheduler_role_name(prefix: str = "") -> str:
    return prefixed(prefix, "model-fleet-scheduler-role")[:MAX_SCHEDULE_NAME_LENGTH]
