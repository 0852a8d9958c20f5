"""FastAPI dependencies: settings, provider, internal secret."""

import hmac
from typing import Annotated, Optional

from fastapi import Depends, Header

from model_fleet.core.config import Settings, get_settings
from model_fleet.core.errors import UnauthorizedError
from model_fleet.services.base_provider import BaseFleetProvider
from model_fleet.services.provider_factory import provider_for


def get_fleet_settings() -> Settings:
    return get_settings()


def get_fleet_provider(settings: Annotated[Settings, Depends(get_fleet_settings)]) -> BaseFleetProvider:
    """Return the configured provisioning backend (registered on first use)."""
    return provider_for(settings)


def verify_internal_secret(
    settings: Annotated[Settings, Depends(get_fleet_settings)],
    x_fleet_secret: Annotated[Optional[str], Header(alias="X-Fleet-Internal-Secret")] = None,
) -> None:
    """Require the internal secret header when one is configured."""
    if not settings.internal_api_secret:
        return
    if not x_fleet_secret or not hmac.compare_digest(x_fleet_secret, settings.internal_api_secret):
        raise UnauthorizedError()
