"""Booking service — quote, reserve, and transition bookings.

``request_booking`` runs the reservation gates in order and fails fast:

1. the property exists and is listed,
2. the date range is valid,
3. no active booking overlaps the range,
4. the quote is computed,
5. the booking row is inserted.

The property row is locked (``SELECT ... FOR UPDATE``) for the rest of the
transaction so concurrent requests for one property are serialised. On
PostgreSQL the ``bookings_no_overlap_per_property`` exclusion constraint
catches anything that still races past the check; that surfaces as
``ConflictOnCommit``.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nestora.booking.availability import has_conflict
from nestora.booking.errors import (
    ConflictOnCommit,
    DatesUnavailable,
    InvalidDateRange,
    NotFound,
    PaymentMismatch,
    PropertyUnavailable,
)
from nestora.booking.pricing import Quote, compute_quote
from nestora.booking.state import assert_transition
from nestora.models.booking import ACTIVE_STATUSES, OVERLAP_CONSTRAINT, Booking, BookingStatus
from nestora.models.property import Property, PropertyStatus
from nestora.models.user import User

logger = logging.getLogger(__name__)

# Unique constraint on bookings.payment_intent_id (see NAMING_CONVENTION).
PAYMENT_REFERENCE_CONSTRAINT = "uq_bookings_payment_intent_id"
_COMMIT_CONFLICT_CONSTRAINTS = (OVERLAP_CONSTRAINT, PAYMENT_REFERENCE_CONSTRAINT)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_listed_property(
    db: AsyncSession,
    property_id: uuid.UUID,
    *,
    lock: bool = False,
) -> Property:
    """Fetch a bookable property or raise ``PropertyUnavailable``."""
    query = select(Property).where(Property.id == property_id)
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    prop = result.scalar_one_or_none()

    if prop is None or not prop.is_listed:
        raise PropertyUnavailable()
    return prop


def _validate_range(check_in: date, check_out: date) -> None:
    if check_in >= check_out:
        raise InvalidDateRange()


def _violated_constraint(exc: IntegrityError) -> str:
    """Best-effort name of the constraint behind an IntegrityError."""
    orig = getattr(exc, "orig", None)

    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name

    # asyncpg chains the driver exception as the cause of the adapted error
    name = getattr(getattr(orig, "__cause__", None), "constraint_name", None)
    if name:
        return name

    text = str(orig) if orig is not None else str(exc)
    for candidate in _COMMIT_CONFLICT_CONSTRAINTS:
        if candidate in text:
            return candidate
    return ""


# ---------------------------------------------------------------------------
# Quote & reserve
# ---------------------------------------------------------------------------


async def quote_booking(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    fee_rate: Decimal,
) -> tuple[Property, Quote]:
    """Run the reservation gates without writing and return the quote."""
    prop = await _get_listed_property(db, property_id)
    _validate_range(check_in, check_out)

    if await has_conflict(db, property_id, check_in, check_out):
        raise DatesUnavailable()

    return prop, compute_quote(prop.price_per_night_cents, check_in, check_out, fee_rate)


async def request_booking(
    db: AsyncSession,
    *,
    property_id: uuid.UUID,
    guest: User,
    check_in: date,
    check_out: date,
    fee_rate: Decimal,
    guests_count: int = 1,
    notes: str | None = None,
    status: BookingStatus = BookingStatus.PENDING,
    payment_intent_id: str | None = None,
    expected_total_cents: int | None = None,
) -> Booking:
    """Reserve a property for a guest.

    ``status`` is ``pending`` for direct booking requests and ``confirmed``
    when payment has already been captured (simulated checkout or a succeeded
    Stripe payment intent).
    ``expected_total_cents`` is the amount already charged; the booking is
    refused when the quote comes out different.

    Raises:
        PropertyUnavailable: Property missing or unlisted.
        InvalidDateRange: ``check_out`` not after ``check_in``.
        DatesUnavailable: An active booking overlaps the range.
        ConflictOnCommit: A concurrent writer won the same dates.
        PaymentMismatch: The quote differs from ``expected_total_cents``.
    """
    if status not in ACTIVE_STATUSES:
        raise ValueError(f"New bookings cannot start as {status.value}")

    prop = await _get_listed_property(db, property_id, lock=True)
    _validate_range(check_in, check_out)

    if await has_conflict(db, property_id, check_in, check_out):
        logger.info(
            "Rejected booking for property %s (%s → %s): dates unavailable",
            property_id,
            check_in,
            check_out,
        )
        raise DatesUnavailable()

    quote = compute_quote(prop.price_per_night_cents, check_in, check_out, fee_rate)
    if expected_total_cents is not None and quote.total_cents != expected_total_cents:
        logger.warning(
            "Rejected booking for property %s: charged %d but the stay costs %d",
            property_id,
            expected_total_cents,
            quote.total_cents,
        )
        raise PaymentMismatch(
            f"Payment amount {expected_total_cents} does not match the booking total {quote.total_cents}"
        )

    booking = Booking(
        property_id=prop.id,
        guest_id=guest.id,
        guest_email=guest.email,
        guest_name=guest.display_name,
        check_in=check_in,
        check_out=check_out,
        nights=quote.nights,
        guests_count=guests_count,
        total_cents=quote.total_cents,
        platform_fee_cents=quote.platform_fee_cents,
        host_payout_cents=quote.host_payout_cents,
        guest_notes=notes,
        status=status,
        payment_intent_id=payment_intent_id,
    )
    db.add(booking)

    try:
        await db.flush()
    except IntegrityError as exc:
        constraint = _violated_constraint(exc)
        if constraint in _COMMIT_CONFLICT_CONSTRAINTS:
            logger.warning(
                "Booking for property %s (%s → %s) lost a commit race on %s",
                property_id,
                check_in,
                check_out,
                constraint,
            )
            raise ConflictOnCommit() from exc
        raise

    await db.refresh(booking)
    logger.info(
        "Created %s booking %s for property %s: %d nights, total=%d fee=%d payout=%d",
        booking.status.value,
        booking.id,
        property_id,
        quote.nights,
        quote.total_cents,
        quote.platform_fee_cents,
        quote.host_payout_cents,
    )
    return booking


async def get_booking_by_payment_intent(db: AsyncSession, payment_intent_id: str) -> Booking | None:
    result = await db.execute(select(Booking).where(Booking.payment_intent_id == payment_intent_id))
    return result.scalar_one_or_none()


async def confirm_payment(
    db: AsyncSession,
    *,
    payment_intent_id: str,
    property_id: uuid.UUID,
    guest: User,
    check_in: date,
    check_out: date,
    fee_rate: Decimal,
    guests_count: int = 1,
    notes: str | None = None,
    expected_total_cents: int | None = None,
) -> tuple[Booking, bool]:
    """Record a confirmed booking for a captured payment.

    Idempotent on ``payment_intent_id``: both the client confirmation call and
    the Stripe webhook may deliver the same payment.
    A payment already recorded for another guest is reported as
    ``NotFound``; its booking is never returned to a different user.

    Returns:
        ``(booking, created)`` where ``created`` is False when the payment
        was already recorded.
    """
    existing = await get_booking_by_payment_intent(db, payment_intent_id)
    if existing is not None:
        if existing.guest_id != guest.id:
            logger.warning(
                "User %s tried to confirm payment %s recorded for guest %s",
                guest.id,
                payment_intent_id,
                existing.guest_id,
            )
            raise NotFound()
        logger.info("Payment %s already recorded as booking %s", payment_intent_id, existing.id)
        return existing, False

    booking = await request_booking(
        db,
        property_id=property_id,
        guest=guest,
        check_in=check_in,
        check_out=check_out,
        fee_rate=fee_rate,
        guests_count=guests_count,
        notes=notes,
        status=BookingStatus.CONFIRMED,
        payment_intent_id=payment_intent_id,
        expected_total_cents=expected_total_cents,
    )
    return booking, True


# ---------------------------------------------------------------------------
# Host-side access & transitions
# ---------------------------------------------------------------------------


async def get_host_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    host: User,
    *,
    lock: bool = False,
) -> Booking:
    """Fetch a booking on one of the host's properties or raise ``NotFound``."""
    query = (
        select(Booking)
        .join(Property, Booking.property_id == Property.id)
        .where(Booking.id == booking_id, Property.owner_id == host.id)
    )
    if lock:
        query = query.with_for_update(of=Booking)

    result = await db.execute(query)
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound()
    return booking


async def transition_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    host: User,
    target: BookingStatus,
    cancellation_reason: str | None = None,
) -> Booking:
    """Move a booking along the state machine on behalf of its host.

    An invalid transition raises before anything is written. Cancelling
    releases the dates implicitly: cancelled bookings no longer match the
    conflict predicate.
    """
    booking = await get_host_booking(db, booking_id, host, lock=True)
    previous = booking.status
    assert_transition(previous, target)

    booking.status = target
    if target == BookingStatus.CANCELLED and cancellation_reason:
        booking.cancellation_reason = cancellation_reason

    await db.flush()
    await db.refresh(booking)
    logger.info("Booking %s moved %s → %s by host %s", booking.id, previous.value, target.value, host.id)
    return booking
