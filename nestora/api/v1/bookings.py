"""Bookings API router.

Guests quote and request stays; hosts review and move bookings along the
state machine. Host access is ownership-scoped: every host query filters
through ``Property.owner_id``.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nestora.api.deps import get_current_active_user, get_current_host, get_db, get_fee_rate
from nestora.booking.availability import blocked_ranges
from nestora.booking.service import get_host_booking, quote_booking, request_booking, transition_booking
from nestora.config import settings
from nestora.models.booking import Booking, BookingStatus
from nestora.models.property import Property
from nestora.models.user import User
from nestora.schemas.booking import (
    BlockedRange,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatsResponse,
    BookingStatusUpdate,
    CalendarResponse,
    QuoteRequest,
    QuoteResponse,
)
from nestora.schemas.common import ErrorResponse

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])

_REJECTIONS = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Guest endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/quote",
    response_model=QuoteResponse,
    responses=_REJECTIONS,
    summary="Price a stay without booking it",
)
async def quote(
    body: QuoteRequest,
    db: AsyncSession = Depends(get_db),
    fee_rate: Decimal = Depends(get_fee_rate),
    current_user: User = Depends(get_current_active_user),
) -> QuoteResponse:
    """Check availability and return the price breakdown for the stay."""
    prop, stay_quote = await quote_booking(db, body.property_id, body.check_in, body.check_out, fee_rate)
    return QuoteResponse(
        property_id=prop.id,
        check_in=body.check_in,
        check_out=body.check_out,
        price_per_night_cents=prop.price_per_night_cents,
        nights=stay_quote.nights,
        total_cents=stay_quote.total_cents,
        platform_fee_cents=stay_quote.platform_fee_cents,
        host_payout_cents=stay_quote.host_payout_cents,
        currency=settings.currency,
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_REJECTIONS,
    summary="Request a booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    fee_rate: Decimal = Depends(get_fee_rate),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Create a ``pending`` booking for the current user as guest.

    The host confirms or cancels it afterwards.
    """
    booking = await request_booking(
        db,
        property_id=body.property_id,
        guest=current_user,
        check_in=body.check_in,
        check_out=body.check_out,
        fee_rate=fee_rate,
        guests_count=body.guests_count,
        notes=body.guest_notes,
    )
    return BookingResponse.model_validate(booking)


@router.get(
    "/mine",
    response_model=BookingListResponse,
    summary="List bookings made by the current user",
)
async def list_my_bookings(
    status_filter: BookingStatus | None = Query(None, alias="status", description="Filter by booking status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingListResponse:
    filters = [Booking.guest_id == current_user.id]
    if status_filter is not None:
        filters.append(Booking.status == status_filter)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Booking).where(*filters).order_by(Booking.check_in.desc()).offset(skip).limit(limit)
    )
    items = [BookingResponse.model_validate(b) for b in result.scalars().all()]
    return BookingListResponse(items=items, total=total)


@router.get(
    "/calendar/{property_id}",
    response_model=CalendarResponse,
    summary="Blocked date ranges for a property",
)
async def get_calendar(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> CalendarResponse:
    """Public: active bookings that have not yet checked out."""
    bookings = await blocked_ranges(db, property_id, date.today())
    return CalendarResponse(
        property_id=property_id,
        blocked_dates=[BlockedRange.model_validate(b) for b in bookings],
    )


# ---------------------------------------------------------------------------
# Host endpoints
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings on the current user's properties",
)
async def list_bookings(
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    status_filter: BookingStatus | None = Query(None, alias="status", description="Filter by booking status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(50, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> BookingListResponse:
    """Return a paginated list of bookings for properties owned by the user."""
    filters = [Property.owner_id == current_user.id]
    if property_id is not None:
        filters.append(Booking.property_id == property_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)

    count_query = (
        select(func.count()).select_from(Booking).join(Property, Booking.property_id == Property.id).where(*filters)
    )
    total_result = await db.execute(count_query)
    total = total_result.scalar_one()

    items_query = (
        select(Booking)
        .join(Property, Booking.property_id == Property.id)
        .where(*filters)
        .order_by(Booking.created_at.desc(), Booking.check_in.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(items_query)
    items = [BookingResponse.model_validate(b) for b in result.scalars().all()]
    return BookingListResponse(items=items, total=total)


@router.get(
    "/stats",
    response_model=BookingStatsResponse,
    summary="Booking figures for the host dashboard",
)
async def booking_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> BookingStatsResponse:
    """Pending and confirmed counts, earned payouts, and upcoming check-ins."""
    owned = (
        select(Booking.id)
        .join(Property, Booking.property_id == Property.id)
        .where(Property.owner_id == current_user.id)
    )

    async def _count(*criteria) -> int:
        result = await db.execute(
            select(func.count()).select_from(Booking).where(Booking.id.in_(owned), *criteria)
        )
        return result.scalar_one()

    earnings_result = await db.execute(
        select(func.coalesce(func.sum(Booking.host_payout_cents), 0)).where(
            Booking.id.in_(owned),
            Booking.status.in_((BookingStatus.CONFIRMED, BookingStatus.COMPLETED)),
        )
    )

    return BookingStatsResponse(
        pending_bookings=await _count(Booking.status == BookingStatus.PENDING),
        active_bookings=await _count(Booking.status == BookingStatus.CONFIRMED),
        total_earnings_cents=int(earnings_result.scalar_one()),
        upcoming_check_ins=await _count(
            Booking.status == BookingStatus.CONFIRMED,
            Booking.check_in >= date.today(),
        ),
    )


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Get booking detail with nested property",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> BookingDetailResponse:
    """Returns 404 unless the booking is on a property owned by the current user."""
    booking = await get_host_booking(db, booking_id, current_user)
    return BookingDetailResponse.model_validate(booking)


@router.patch(
    "/{booking_id}",
    response_model=BookingResponse,
    responses=_REJECTIONS,
    summary="Confirm, complete, or cancel a booking",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> BookingResponse:
    """Apply a host-initiated status transition.

    ``pending → confirmed | cancelled`` and ``confirmed → completed | cancelled``
    are allowed; anything else is rejected and leaves the booking unchanged.
    """
    booking = await transition_booking(
        db,
        booking_id,
        current_user,
        body.status,
        cancellation_reason=body.cancellation_reason,
    )
    return BookingResponse.model_validate(booking)
