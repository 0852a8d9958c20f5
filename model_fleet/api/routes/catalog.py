from fastapi import APIRouter

from model_fleet.models.catalog import default_catalog
from model_fleet.models.schemas import CatalogEntrySchema
from model_fleet.services.endpoint_naming import derive_name

router = APIRouter(prefix="/v1", tags=["catalog"])


@router.get("/catalog", response_model=list[CatalogEntrySchema])
async def list_catalog() -> list[CatalogEntrySchema]:
    """Every deployable model, in catalog order."""
    return [CatalogEntrySchema.from_descriptor(d, derive_name(d.model_id)) for d in default_catalog()]
