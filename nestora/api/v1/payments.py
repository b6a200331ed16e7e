"""Checkout and payment confirmation API.

Without a Stripe secret key the service runs in simulation mode: checkout
creates the booking already ``confirmed``, as if payment had been captured.
"""

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from nestora.api.deps import get_current_active_user, get_db, get_fee_rate
from nestora.booking.errors import PaymentMismatch, PaymentNotCompleted
from nestora.booking.service import confirm_payment, quote_booking, request_booking
from nestora.config import settings
from nestora.models.booking import BookingStatus
from nestora.models.user import User
from nestora.payments.metadata import decode_booking_metadata, encode_booking_metadata
from nestora.payments.stripe_client import create_payment_intent, retrieve_payment_intent
from nestora.schemas.booking import BookingResponse
from nestora.schemas.common import ErrorResponse
from nestora.schemas.payment import CheckoutRequest, CheckoutResponse, ConfirmPaymentRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])

_REJECTIONS = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_402_PAYMENT_REQUIRED: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


def _check_intent_matches(intent, body: ConfirmPaymentRequest, guest: User) -> None:
    """Reject a confirmation for a stay other than the one the intent was opened for."""
    try:
        paid_for = decode_booking_metadata(intent.metadata)
    except (KeyError, ValueError, TypeError) as exc:
        raise PaymentMismatch("Payment does not carry booking details") from exc

    requested = (body.property_id, guest.id, body.check_in, body.check_out, body.guests_count)
    paid = (
        paid_for.property_id,
        paid_for.guest_id,
        paid_for.check_in,
        paid_for.check_out,
        paid_for.guests_count,
    )
    if requested != paid or intent.currency.lower() != settings.currency.lower():
        logger.warning("PaymentIntent %s does not match the confirmation from user %s", intent.id, guest.id)
        raise PaymentMismatch()


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    responses=_REJECTIONS,
    summary="Start checkout for a stay",
)
async def checkout(
    body: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    fee_rate: Decimal = Depends(get_fee_rate),
    current_user: User = Depends(get_current_active_user),
) -> CheckoutResponse:
    """Quote the stay and either open a Stripe PaymentIntent or, in simulation
    mode, book it directly as ``confirmed``.
    """
    prop, quote = await quote_booking(db, body.property_id, body.check_in, body.check_out, fee_rate)

    if settings.stripe_enabled:
        intent = await create_payment_intent(
            quote.total_cents,
            settings.currency,
            encode_booking_metadata(
                property_id=prop.id,
                property_title=prop.title,
                guest_id=current_user.id,
                check_in=body.check_in,
                check_out=body.check_out,
                nights=quote.nights,
                guests_count=body.guests_count,
                guest_notes=body.guest_notes,
            ),
        )
        return CheckoutResponse(
            mode="stripe",
            client_secret=intent.client_secret,
            payment_intent_id=intent.id,
            amount_cents=quote.total_cents,
            platform_fee_cents=quote.platform_fee_cents,
            host_payout_cents=quote.host_payout_cents,
            nights=quote.nights,
            currency=settings.currency,
            property_title=prop.title,
            price_per_night_cents=prop.price_per_night_cents,
        )

    booking = await request_booking(
        db,
        property_id=body.property_id,
        guest=current_user,
        check_in=body.check_in,
        check_out=body.check_out,
        fee_rate=fee_rate,
        guests_count=body.guests_count,
        notes=body.guest_notes,
        status=BookingStatus.CONFIRMED,
    )
    logger.info("Simulated payment for booking %s", booking.id)
    return CheckoutResponse(
        mode="simulation",
        booking=BookingResponse.model_validate(booking),
        amount_cents=booking.total_cents,
        platform_fee_cents=booking.platform_fee_cents,
        host_payout_cents=booking.host_payout_cents,
        nights=booking.nights,
        currency=settings.currency,
        property_title=prop.title,
        price_per_night_cents=prop.price_per_night_cents,
        message="Booking confirmed (payment simulation, Stripe not configured)",
    )


@router.post(
    "/confirm",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_REJECTIONS,
    summary="Record the booking for a succeeded payment",
)
async def confirm(
    body: ConfirmPaymentRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    fee_rate: Decimal = Depends(get_fee_rate),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Create the ``confirmed`` booking once Stripe reports the intent succeeded.

    The intent must have been opened by this user for exactly this stay, and
    its amount must equal the booking total. Repeating the call for the same
    intent returns the existing booking with 200 instead of 201.
    """
    expected_total_cents = None
    if settings.stripe_enabled:
        intent = await retrieve_payment_intent(body.payment_intent_id)
        if intent.status != "succeeded":
            raise PaymentNotCompleted(f"Payment not completed. Status: {intent.status}")
        _check_intent_matches(intent, body, current_user)
        expected_total_cents = intent.amount

    booking, created = await confirm_payment(
        db,
        payment_intent_id=body.payment_intent_id,
        property_id=body.property_id,
        guest=current_user,
        check_in=body.check_in,
        check_out=body.check_out,
        fee_rate=fee_rate,
        guests_count=body.guests_count,
        notes=body.guest_notes,
        expected_total_cents=expected_total_cents,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return BookingResponse.model_validate(booking)
