"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from model_fleet import __version__
from model_fleet.api.routes import catalog_router, fleet_router, health_router
from model_fleet.core.config import get_settings
from model_fleet.core.errors import FleetError
from model_fleet.core.logging import configure_logging
from model_fleet.core.telemetry import init_telemetry, instrument_fastapi


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: configure logging and telemetry."""
    settings = get_settings()
    configure_logging(settings.log_level)
    init_telemetry(console_export=settings.trace_console_export)
    yield


app = FastAPI(
    title="Model Fleet Provisioner",
    description="Resolves, publishes and schedules the SageMaker inference fleet",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(catalog_router)
app.include_router(fleet_router)

instrument_fastapi(app)


@app.exception_handler(FleetError)
async def fleet_error_handler(request: Request, exc: FleetError) -> JSONResponse:
    """Map custom exceptions to JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


@app.get("/")
async def root() -> dict:
    return {"service": "model-fleet", "docs": "/docs"}
