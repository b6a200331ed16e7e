"""Pydantic v2 schemas for checkout and payment confirmation."""

from typing import Literal

from pydantic import BaseModel, Field

from nestora.schemas.booking import BookingCreate, BookingResponse


class CheckoutRequest(BookingCreate):
    """Same fields as a booking request."""


class ConfirmPaymentRequest(BookingCreate):
    """Booking details plus the Stripe PaymentIntent that paid for them."""

    payment_intent_id: str = Field(..., min_length=1, max_length=255)


class CheckoutResponse(BaseModel):
    """Checkout outcome.

    In ``stripe`` mode the client completes payment with ``client_secret`` and
    then calls ``/payments/confirm``. In ``simulation`` mode (no Stripe key
    configured) the booking is created confirmed straight away.
    """

    mode: Literal["stripe", "simulation"]
    amount_cents: int
    platform_fee_cents: int
    host_payout_cents: int
    nights: int
    currency: str
    property_title: str
    price_per_night_cents: int
    client_secret: str | None = None
    payment_intent_id: str | None = None
    booking: BookingResponse | None = None
    message: str | None = None
