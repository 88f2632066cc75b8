"""API routers."""

from mapping_service.routers.court_sentencing import router as court_sentencing_router
from mapping_service.routers.csip import router as csip_router
from mapping_service.routers.internal import router as internal_router
from mapping_service.routers.mappings import routers as mapping_routers
from mapping_service.routers.merges import router as merges_router

__all__ = [
    "court_sentencing_router",
    "csip_router",
    "internal_router",
    "mapping_routers",
    "merges_router",
]
