"""Health and metrics endpoints."""

from fastapi import APIRouter

from model_fleet.core.telemetry import get_metrics

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    """Liveness: minimal check, no external calls."""
    return {"status": "ok"}


def _percentile(values: list[float], p: float) -> float:
    if not values:
        return 0.0
    sorted_vals = sorted(values)
    idx = int((len(sorted_vals) - 1) * p)
    return round(sorted_vals[idx], 2)


@router.get("/metrics")
async def metrics() -> dict:
    """JSON counters for provisioning passes."""
    snapshot = get_metrics()
    durations = snapshot.get("fleet_pass_duration_seconds", {}).get("values", [])
    return {
        "endpoints_provisioned_total": snapshot.get("endpoints_provisioned_total", 0),
        "provisioning_failures_total": snapshot.get("provisioning_failures_total", 0),
        "registry_publishes_total": snapshot.get("registry_publishes_total", 0),
        "schedule_triggers_total": snapshot.get("schedule_triggers_total", 0),
        "fleet_pass_duration_seconds": {
            "count": len(durations),
            "p50": _percentile(durations, 0.50),
            "p95": _percentile(durations, 0.95),
            "sum": round(float(sum(durations)), 2),
        },
    }
