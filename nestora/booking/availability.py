"""Conflict detection for property date ranges.

Stays are half-open intervals ``[check_in, check_out)``: a guest checking out
on a given day does not conflict with another guest checking in that day.
Only ``pending`` and ``confirmed`` bookings hold inventory.
"""

import uuid
from datetime import date

from sqlalchemy import ColumnElement, Select, and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nestora.models.booking import ACTIVE_STATUSES, Booking


def ranges_overlap(a_check_in: date, a_check_out: date, b_check_in: date, b_check_out: date) -> bool:
    """Return True when two half-open stays share at least one night."""
    return a_check_in < b_check_out and a_check_out > b_check_in


def overlap_clause(check_in: date, check_out: date) -> ColumnElement[bool]:
    """SQL form of :func:`ranges_overlap` against active bookings.

    This is the one definition of a conflicting booking; both the per-property
    check and the search filter build on it.
    """
    return and_(
        Booking.status.in_(ACTIVE_STATUSES),
        Booking.check_in < check_out,
        Booking.check_out > check_in,
    )


def conflicting_property_ids(check_in: date, check_out: date) -> Select[tuple[uuid.UUID]]:
    """Subquery of property ids with an active booking overlapping the range."""
    return select(Booking.property_id).where(overlap_clause(check_in, check_out))


async def has_conflict(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: uuid.UUID | None = None,
) -> bool:
    """Return True if an active booking on the property overlaps the range.

    ``exclude_booking_id`` leaves one booking out of the scan, so a booking
    being rescheduled does not conflict with itself. The caller must have
    checked ``check_in < check_out``.
    """
    query = select(Booking.id).where(
        Booking.property_id == property_id,
        overlap_clause(check_in, check_out),
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)

    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def blocked_ranges(db: AsyncSession, property_id: uuid.UUID, today: date) -> list[Booking]:
    """Active bookings of a property that have not checked out before ``today``."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.property_id == property_id,
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.check_out >= today,
        )
        .order_by(Booking.check_in)
    )
    return list(result.scalars().all())
