"""OpenTelemetry tracing and in-process provisioning metrics."""

from contextlib import contextmanager
from threading import Lock
from typing import Any, Generator, Optional

from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

TRACER_NAME = "model-fleet"

# In-memory metrics, exposed on /metrics
_metrics: dict[str, list[float] | int] = {
    "endpoints_provisioned_total": 0,
    "provisioning_failures_total": 0,
    "registry_publishes_total": 0,
    "schedule_triggers_total": 0,
    "fleet_pass_duration_seconds": [],
}
_lock = Lock()
_initialized = False


def get_tracer(name: str = TRACER_NAME) -> trace.Tracer:
    """Return the OpenTelemetry tracer (no-op until a provider is installed)."""
    return trace.get_tracer(name)


def get_trace_context() -> dict[str, str]:
    """Return trace_id and span_id for current span (for log correlation)."""
    current = trace.get_current_span()
    if current is None or not current.is_recording():
        return {}
    ctx = current.get_span_context()
    return {"trace_id": format(ctx.trace_id, "032x"), "span_id": format(ctx.span_id, "016x")}


def init_telemetry(service_name: str = TRACER_NAME, console_export: bool = False) -> None:
    """Install a tracer provider; spans go to stdout only when console_export is set."""
    global _initialized
    if _initialized:
        return
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    _initialized = True


def instrument_fastapi(app: Any) -> None:
    """Instrument FastAPI app for automatic tracing."""
    FastAPIInstrumentor.instrument_app(app)


def _incr(key: str, amount: int = 1) -> None:
    with _lock:
        _metrics[key] = int(_metrics.get(key, 0)) + amount


def record_endpoint_provisioned() -> None:
    _incr("endpoints_provisioned_total")


def record_provisioning_failure() -> None:
    _incr("provisioning_failures_total")


def record_registry_publish() -> None:
    _incr("registry_publishes_total")


def record_schedule_triggers(count: int) -> None:
    _incr("schedule_triggers_total", count)


def record_pass_duration(seconds: float) -> None:
    """Record fleet pass duration for histogram."""
    with _lock:
        _metrics.setdefault("fleet_pass_duration_seconds", []).append(seconds)  # type: ignore[union-attr]


def get_metrics() -> dict[str, Any]:
    """Return current metrics snapshot (for /metrics or tests)."""
    out: dict[str, Any] = {}
    with _lock:
        for k, v in _metrics.items():
            if isinstance(v, list):
                out[k] = {"count": len(v), "sum": sum(v), "values": list(v)}
            else:
                out[k] = v
    return out


@contextmanager
def span(name: str, attributes: Optional[dict[str, Any]] = None) -> Generator[Any, None, None]:
    """Context manager for a child span."""
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span_obj:
        if attributes:
            for key, val in attributes.items():
                span_obj.set_attribute(key, str(val))
        yield span_obj
