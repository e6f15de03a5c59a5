"""
Parcel API Endpoints.

Thin HTTP surface over the parcel store. Store errors are rendered by the
global AppException handler (404 not found, 409 wrong status, 503 storage).
"""

from fastapi import APIRouter, Depends, Path, Response, status
from parceltrack.app.core.dependencies import get_parcel_store
from parceltrack.app.services.parcel_store import ParcelStore
from parceltrack.app.schemas.parcel import (
    ParcelCreate,
    ParcelCreatedResponse,
    ParcelResponse,
    ParcelStatusUpdate,
    ParcelStatusResponse,
    ParcelAddressUpdate,
)

router = APIRouter(tags=["Parcels"])


@router.post("/parcels", response_model=ParcelCreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_parcel(
    parcel_data: ParcelCreate,
    store: ParcelStore = Depends(get_parcel_store)
):
    """Register a new parcel and return its assigned number."""
    number = await store.add(parcel_data)
    return ParcelCreatedResponse(number=number)


@router.get("/parcels/{number}", response_model=ParcelResponse)
async def get_parcel(
    number: int = Path(..., description="Parcel number"),
    store: ParcelStore = Depends(get_parcel_store)
):
    return await store.get(number)


@router.get("/clients/{client}/parcels", response_model=list[ParcelResponse])
async def get_client_parcels(
    client: int = Path(..., description="Client identifier"),
    store: ParcelStore = Depends(get_parcel_store)
):
    """List every parcel of a client. Empty list when the client has none."""
    return await store.get_by_client(client)


@router.get("/parcels/{number}/status", response_model=ParcelStatusResponse)
async def get_parcel_status(
    number: int = Path(..., description="Parcel number"),
    store: ParcelStore = Depends(get_parcel_store)
):
    current = await store.get_status(number)
    return ParcelStatusResponse(number=number, status=current)


@router.put("/parcels/{number}/status", status_code=status.HTTP_204_NO_CONTENT)
async def set_parcel_status(
    status_data: ParcelStatusUpdate,
    number: int = Path(..., description="Parcel number"),
    store: ParcelStore = Depends(get_parcel_store)
):
    """
    Move a parcel to any status.

    No transition rules are enforced here.
    """
    await store.set_status(number, status_data.status)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/parcels/{number}/address", status_code=status.HTTP_204_NO_CONTENT)
async def set_parcel_address(
    address_data: ParcelAddressUpdate,
    number: int = Path(..., description="Parcel number"),
    store: ParcelStore = Depends(get_parcel_store)
):
    """Change the address of a parcel that is still registered."""
    await store.set_address(number, address_data.address)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/parcels/{number}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_parcel(
    number: int = Path(..., description="Parcel number"),
    store: ParcelStore = Depends(get_parcel_store)
):
    """Delete a parcel that is still registered."""
    await store.delete(number)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
