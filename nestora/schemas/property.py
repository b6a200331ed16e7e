"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from nestora.models.property import PropertyStatus

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new listing."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=120)
    country: str | None = Field(None, max_length=120)
    bedrooms: int = Field(1, ge=0)
    bathrooms: int = Field(1, ge=0)
    max_guests: int = Field(2, ge=1)
    price_per_night_cents: int = Field(..., ge=0)
    amenities: list[str] = Field(default_factory=list)
    status: PropertyStatus = PropertyStatus.VACANT


class PropertyUpdate(BaseModel):
    """Schema for partially updating a listing. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=120)
    country: str | None = Field(None, max_length=120)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    max_guests: int | None = Field(None, ge=1)
    price_per_night_cents: int | None = Field(None, ge=0)
    amenities: list[str] | None = None
    status: PropertyStatus | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Listing information returned from the API."""

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    bedrooms: int
    bathrooms: int
    max_guests: int
    price_per_night_cents: int
    amenities: list[str] | None = None
    status: PropertyStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Paginated list of properties."""

    items: list[PropertyResponse]
    total: int


class PropertySearchResponse(PropertyListResponse):
    """Search results page."""

    limit: int
    offset: int


class PropertyStatsResponse(BaseModel):
    """Listing counts for the host dashboard."""

    total_properties: int
    vacant: int
    occupied: int
    unlisted: int
