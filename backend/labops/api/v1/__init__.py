"""
API v1 Router - LabOps
"""
from fastapi import APIRouter

from labops.api.v1.endpoints import manufacturing_items, milling_locations

router = APIRouter()

# Manufacturing lifecycle
router.include_router(
    manufacturing_items.router,
    prefix="/manufacturing-items",
    tags=["manufacturing"]
)

# Milling location registry
router.include_router(
    milling_locations.router,
    prefix="/milling-locations",
    tags=["milling-locations"]
)
