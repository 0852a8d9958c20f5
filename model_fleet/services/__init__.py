"""Services: resolver, registry publisher, lifecycle scheduler, providers."""

from model_fleet.services.endpoint_naming import derive_name
from model_fleet.services.fleet import run_fleet_pass
from model_fleet.services.model_resolver import FleetResolver, Resolution
from model_fleet.services.provider_factory import get_provider, provider_for, register_provider

__all__ = [
    "derive_name",
    "run_fleet_pass",
    "FleetResolver",
    "Resolution",
    "get_provider",
    "provider_for",
    "register_provider",
]
