from model_fleet.api.routes.catalog import router as catalog_router
from model_fleet.api.routes.fleet import router as fleet_router
from model_fleet.api.routes.health import router as health_router

__all__ = ["catalog_router", "fleet_router", "health_router"]
