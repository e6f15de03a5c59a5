"""
Store dependencies for FastAPI.

Hands each request a parcel store bound to that request's database session.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from parceltrack.app.db.session import get_db
from parceltrack.app.services.parcel_store import ParcelStore


async def get_parcel_store(db: AsyncSession = Depends(get_db)) -> ParcelStore:
    return ParcelStore(db)
