"""Stripe webhook event handlers — record bookings for captured payments."""

import logging

import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from nestora.booking.errors import BookingError, ConflictOnCommit
from nestora.booking.service import confirm_payment
from nestora.config import settings
from nestora.models.user import User
from nestora.payments.metadata import decode_booking_metadata

logger = logging.getLogger(__name__)


async def handle_payment_intent_succeeded(db: AsyncSession, event: stripe.Event) -> None:
    """Handle payment_intent.succeeded — create the confirmed booking if missing.

    The client normally confirms through ``/payments/confirm``; this covers
    clients that never come back. Both paths are idempotent on the intent id.
    """
    intent = event.data.object

    try:
        request = decode_booking_metadata(intent.metadata)
    except (KeyError, ValueError, TypeError):
        logger.info("PaymentIntent %s carries no booking metadata, skipping", intent.id)
        return

    guest = await db.get(User, request.guest_id)
    if guest is None:
        logger.warning("PaymentIntent %s references unknown guest %s", intent.id, request.guest_id)
        return

    try:
        booking, created = await confirm_payment(
            db,
            payment_intent_id=intent.id,
            property_id=request.property_id,
            guest=guest,
            check_in=request.check_in,
            check_out=request.check_out,
            fee_rate=settings.platform_fee_rate,
            guests_count=request.guests_count,
            notes=request.guest_notes,
        )
    except ConflictOnCommit:
        # Raced with the client confirmation; Stripe retries and the retry is idempotent.
        raise
    except BookingError as exc:
        # TODO: refund the intent once the payout/refund flow exists.
        logger.error(
            "PaymentIntent %s succeeded but its booking was rejected (%s): %s",
            intent.id,
            exc.code,
            exc.message,
        )
        return

    if created:
        logger.info("PaymentIntent %s recorded as booking %s", intent.id, booking.id)


async def handle_payment_intent_failed(db: AsyncSession, event: stripe.Event) -> None:
    """Handle payment_intent.payment_failed — nothing is held, just log it."""
    intent = event.data.object
    error = getattr(intent, "last_payment_error", None)
    logger.info(
        "PaymentIntent %s failed: %s",
        intent.id,
        getattr(error, "message", None) or "no error message",
    )
