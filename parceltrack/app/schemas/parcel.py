"""
Parcel Pydantic schemas.

Defines the parcel value type handed to and returned by the store, plus the
request and response models of the HTTP surface.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from parceltrack.app.models.parcel_enums import ParcelStatus


class ParcelCreate(BaseModel):
    """Schema for registering a new parcel. The number is assigned on insert."""
    client: int = Field(..., description="Owning client identifier")
    status: str = Field(default=ParcelStatus.REGISTERED.value, min_length=1, max_length=32)
    address: str = Field(..., min_length=1, max_length=500, description="Delivery address")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are taken to be UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ParcelResponse(BaseModel):
    """Schema for a stored parcel."""
    number: int
    client: int
    status: str
    address: str
    created_at: datetime
    
    class Config:
        from_attributes = True


class ParcelCreatedResponse(BaseModel):
    number: int


class ParcelStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=32)


class ParcelStatusResponse(BaseModel):
    number: int
    status: str


class ParcelAddressUpdate(BaseModel):
    address: str = Field(..., min_length=1, max_length=500)
