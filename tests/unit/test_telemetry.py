"""Unit tests for tracer setup."""

from typing import Any

import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace.export import SimpleSpanProcessor

from model_fleet.core import telemetry
from model_fleet.core.config import get_settings


class _Recorder:
    def __init__(self) -> None:
        self.providers: list[Any] = []
        self.exporters: list[Any] = []

    def set_tracer_provider(self, provider: Any) -> None:
        self.providers.append(provider)

    def processor(self, exporter: Any) -> Any:
        self.exporters.append(exporter)
        return SimpleSpanProcessor(exporter)


@pytest.fixture
def recorder(monkeypatch: pytest.MonkeyPatch) -> _Recorder:
    rec = _Recorder()
    monkeypatch.setattr(telemetry, "_initialized", False)
    monkeypatch.setattr(telemetry.trace, "set_tracer_provider", rec.set_tracer_provider)
    monkeypatch.setattr(telemetry, "BatchSpanProcessor", rec.processor)
    return rec


def test_init_telemetry_without_console_export(recorder: _Recorder) -> None:
    telemetry.init_telemetry()
    assert len(recorder.providers) == 1
    assert recorder.exporters == []


def test_init_telemetry_is_idempotent(recorder: _Recorder) -> None:
    telemetry.init_telemetry()
    telemetry.init_telemetry(console_export=True)
    assert len(recorder.providers) == 1
    assert recorder.exporters == []


def test_console_export_setting_reaches_startup(recorder: _Recorder, monkeypatch: pytest.MonkeyPatch) -> None:
    from model_fleet.main import app

    monkeypatch.setenv("FLEET_TRACE_CONSOLE_EXPORT", "true")
    get_settings.cache_clear()
    with TestClient(app):
        pass
    assert len(recorder.providers) == 1
    [exporter] = recorder.exporters
    assert isinstance(exporter, telemetry.ConsoleSpanExporter)
