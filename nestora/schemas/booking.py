"""Pydantic v2 request/response schemas for booking endpoints.

Request schemas deliberately leave check_in/check_out ordering to the booking
engine: an unlisted property must be rejected as ``property_unavailable``
even when its dates are also invalid.
"""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from nestora.models.booking import BookingStatus
from nestora.schemas.property import PropertyResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class QuoteRequest(BaseModel):
    """Dates to price for a property."""

    property_id: uuid.UUID
    check_in: date
    check_out: date


class BookingCreate(QuoteRequest):
    """Schema for a guest's booking request."""

    guests_count: int = Field(1, ge=1)
    guest_notes: str | None = Field(None, max_length=2000)


class BookingStatusUpdate(BaseModel):
    """Host request to move a booking to another status."""

    status: BookingStatus
    cancellation_reason: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class QuoteResponse(BaseModel):
    """Price breakdown for an available stay."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    price_per_night_cents: int
    nights: int
    total_cents: int
    platform_fee_cents: int
    host_payout_cents: int
    currency: str


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    guest_email: str
    guest_name: str
    check_in: date
    check_out: date
    nights: int
    guests_count: int
    total_cents: int
    platform_fee_cents: int
    host_payout_cents: int
    status: BookingStatus
    cancellation_reason: str | None = None
    guest_notes: str | None = None
    payment_intent_id: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Booking with the nested property, for single-booking views."""

    property: PropertyResponse | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int


class BookingStatsResponse(BaseModel):
    """Host dashboard figures."""

    pending_bookings: int
    active_bookings: int
    total_earnings_cents: int
    upcoming_check_ins: int


class BlockedRange(BaseModel):
    """A half-open range of nights held by an active booking."""

    check_in: date
    check_out: date
    status: BookingStatus

    model_config = ConfigDict(from_attributes=True)


class CalendarResponse(BaseModel):
    property_id: uuid.UUID
    blocked_dates: list[BlockedRange]
