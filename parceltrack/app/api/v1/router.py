"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from parceltrack.app.api.v1.endpoints import parcels

router = APIRouter()

# Parcel store endpoints
router.include_router(parcels.router)
