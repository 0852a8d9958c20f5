"""Data models: model catalog, pass entities, Pydantic schemas."""

from model_fleet.models.catalog import (
    CATALOG_ENTRIES,
    ModelCatalog,
    ModelDescriptor,
    default_catalog,
)
from model_fleet.models.entities import (
    DeploymentRequest,
    FleetPassReport,
    ProvisionedEndpoint,
    ResolutionError,
    ResolvedEndpoint,
    ScheduleBinding,
    ScheduleSpec,
    SharedResources,
)
from model_fleet.models.schemas import (
    CatalogEntrySchema,
    FleetPassRequest,
    FleetPassResponse,
    RegistryEntry,
)

__all__ = [
    "CATALOG_ENTRIES",
    "ModelCatalog",
    "ModelDescriptor",
    "default_catalog",
    "DeploymentRequest",
    "FleetPassReport",
    "ProvisionedEndpoint",
    "ResolutionError",
    "ResolvedEndpoint",
    "ScheduleBinding",
    "ScheduleSpec",
    "SharedResources",
    "CatalogEntrySchema",
    "FleetPassRequest",
    "FleetPassResponse",
    "RegistryEntry",
]
