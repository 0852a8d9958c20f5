"""Fleet passes: POST /v1/fleet/passes, GET /v1/fleet/registry."""

from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from model_fleet.api.dependencies import get_fleet_provider, get_fleet_settings, verify_internal_secret
from model_fleet.core.config import Settings
from model_fleet.models.schemas import FleetPassRequest, FleetPassResponse, RegistryEntry
from model_fleet.services.base_provider import BaseFleetProvider
from model_fleet.services.fleet import run_fleet_pass
from model_fleet.services.registry_publisher import read_registry

router = APIRouter(prefix="/v1/fleet", tags=["fleet"], dependencies=[Depends(verify_internal_secret)])


@router.post(
    "/passes",
    response_model=FleetPassResponse,
    responses={status.HTTP_409_CONFLICT: {"model": FleetPassResponse}},
)
async def create_pass(
    settings: Annotated[Settings, Depends(get_fleet_settings)],
    provider: Annotated[BaseFleetProvider, Depends(get_fleet_provider)],
    body: Annotated[Optional[FleetPassRequest], Body()] = None,
) -> JSONResponse:
    """
    Run one resolve, publish and schedule pass.

    200 when the pass completed (possibly with per-model errors), 409 when a
    duplicate endpoint name aborted it before any side effect.
    """
    body = body or FleetPassRequest()
    report = await run_fleet_pass(
        settings,
        provider=provider,
        requested=body.models,
        schedule_enabled=body.schedule_enabled,
    )
    payload = FleetPassResponse.model_validate(report.to_dict())
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT if report.fatal else status.HTTP_200_OK,
        content=payload.model_dump(mode="json"),
    )


@router.get("/registry", response_model=list[RegistryEntry], response_model_by_alias=True)
async def get_registry(
    settings: Annotated[Settings, Depends(get_fleet_settings)],
    provider: Annotated[BaseFleetProvider, Depends(get_fleet_provider)],
) -> list[RegistryEntry]:
    """Currently published registry document (404 before the first pass)."""
    return await read_registry(provider, settings.registry_parameter_name)
