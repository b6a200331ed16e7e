"""Async Stripe API wrapper for Nestora payments."""

import logging

import stripe
from stripe import StripeClient

from nestora.config import settings

logger = logging.getLogger(__name__)


def get_stripe_client() -> StripeClient:
    """Create a StripeClient instance with async HTTP support."""
    return StripeClient(
        settings.stripe_secret_key,
        http_client=stripe.HTTPXClient(),
    )


async def create_payment_intent(
    amount_cents: int,
    currency: str,
    metadata: dict[str, str],
) -> stripe.PaymentIntent:
    """Create a PaymentIntent for a booking checkout.

    ``metadata`` carries the booking request so the ``payment_intent.succeeded``
    webhook can record the booking without the client.
    """
    client = get_stripe_client()
    logger.info(
        "Creating payment intent for property %s: %d %s",
        metadata.get("property_id"),
        amount_cents,
        currency,
    )
    intent = await client.v1.payment_intents.create_async(
        params={
            "amount": amount_cents,
            "currency": currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
    )
    logger.info("Created payment intent %s", intent.id)
    return intent


async def retrieve_payment_intent(payment_intent_id: str) -> stripe.PaymentIntent:
    """Retrieve a PaymentIntent by ID."""
    client = get_stripe_client()
    return await client.v1.payment_intents.retrieve_async(payment_intent_id)


def construct_webhook_event(payload: bytes, sig_header: str) -> stripe.Event:
    """Verify and construct a Stripe webhook event (synchronous)."""
    client = get_stripe_client()
    return client.construct_event(payload, sig_header, settings.stripe_webhook_secret)
