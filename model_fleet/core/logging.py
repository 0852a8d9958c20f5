"""Structured JSON logging with secret redaction."""

import json
import logging
import os
import re
import sys
from datetime import UTC, datetime
from typing import Any, Optional

from model_fleet.core.telemetry import get_trace_context

# Patterns to redact from log output
SECRET_PATTERNS = (
    re.compile(r"(api_key|token|secret|password)\s*[:=]\s*['\"]?[\w-]{20,}['\"]?", re.I),
    re.compile(r"hf_[\w]+", re.I),
    re.compile(r"AKIA[0-9A-Z]{16}"),
)

_SECRET_KEYS = ("api_key", "token", "secret", "password", "authorization")


def _redact(message: str) -> str:
    def repl(m: re.Match[str]) -> str:
        if m.lastindex and m.lastindex >= 1:
            return f"{m.group(1)}=***REDACTED***"
        return "***REDACTED***"

    for pat in SECRET_PATTERNS:
        message = pat.sub(repl, message)
    return message


def _redact_dict(obj: Any) -> Any:
    if isinstance(obj, dict):
        redacted = {}
        for k, v in obj.items():
            key_lower = str(k).lower()
            if any(s in key_lower for s in _SECRET_KEYS):
                redacted[k] = "***REDACTED***"
            else:
                redacted[k] = _redact_dict(v)
        return redacted
    if isinstance(obj, (list, tuple)):
        return [_redact_dict(i) for i in obj]
    if isinstance(obj, str):
        return _redact(obj)
    return obj


def structured_log(
    level: str,
    message: str,
    *,
    pass_id: Optional[str] = None,
    model_id: Optional[str] = None,
    operation: Optional[str] = None,
    duration_ms: Optional[int | float] = None,
    trace_id: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
    error: Optional[dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Emit a structured log entry, correlated with the current span when there is one."""
    log = logging.getLogger(logger.name if logger else __name__)
    payload: dict[str, Any] = {
        "severity": level.upper(),
        "message": _redact(message),
        "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
    }
    if pass_id:
        payload["pass_id"] = pass_id
    if model_id:
        payload["model_id"] = model_id
    if operation:
        payload["operation"] = operation
    if duration_ms is not None:
        payload["duration_ms"] = round(duration_ms, 2)
    trace_ctx = {"trace_id": trace_id} if trace_id else get_trace_context()
    payload.update(trace_ctx)
    if metadata:
        payload["metadata"] = _redact_dict(metadata)
    if error:
        payload["error"] = _redact_dict(error)

    msg = json.dumps(payload) if _use_json() else _format_readable(payload)
    getattr(log, level.lower(), log.info)(msg)


def _use_json() -> bool:
    """Use JSON format unless LOG_FORMAT asks for readable lines."""
    return os.getenv("LOG_FORMAT", "json").lower() == "json"


def _format_readable(payload: dict[str, Any]) -> str:
    parts = [f"[{payload.get('severity', 'INFO')}]", payload.get("message", "")]
    if payload.get("pass_id"):
        parts.append(f"pass_id={payload['pass_id']}")
    if payload.get("model_id"):
        parts.append(f"model_id={payload['model_id']}")
    if payload.get("operation"):
        parts.append(f"operation={payload['operation']}")
    if payload.get("duration_ms") is not None:
        parts.append(f"duration_ms={payload['duration_ms']}")
    if payload.get("trace_id"):
        parts.append(f"trace_id={payload['trace_id']}")
    return " ".join(parts)


def configure_logging(log_level: str = "INFO") -> None:
    """Configure root logger with JSON or readable format."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        if _use_json():
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    # botocore is chatty at DEBUG and may echo request bodies
    logging.getLogger("botocore").setLevel(max(level, logging.INFO))


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "severity": record.levelname,
            "message": _redact(record.getMessage()),
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat().replace("+00:00", "Z"),
            "logger": record.name,
        }
        for attr in ("pass_id", "model_id", "operation", "trace_id", "span_id"):
            if getattr(record, attr, None):
                payload[attr] = getattr(record, attr)
        if getattr(record, "duration_ms", None) is not None:
            payload["duration_ms"] = record.duration_ms
        if getattr(record, "metadata", None):
            payload["metadata"] = _redact_dict(record.metadata)
        if record.exc_info:
            payload["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else "",
                "message": _redact(str(record.exc_info[1])) if record.exc_info[1] else "",
                "stack_trace": self.formatException(record.exc_info) if record.exc_info[2] else "",
            }
        return json.dumps(payload)
