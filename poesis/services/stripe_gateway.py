"""Stripe adapter — customers, payment intents, error classification.

All SDK calls are blocking; they run in a worker thread with an explicit
timeout on top of the SDK's own network retries.
"""

import asyncio
import logging

import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.config import get_settings
from poesis.constants import PLAN_ANNUAL, SUBSCRIPTION_PAYMENT_PURPOSE
from poesis.models.user import User

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """A payment-provider failure mapped to a caller-facing category."""

    def __init__(self, kind: str, status_code: int, message: str):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.message = message


def init_stripe() -> None:
    """Set the Stripe API key and retry policy from settings. Call once at startup."""
    settings = get_settings()
    stripe.api_key = settings.stripe_secret_key
    stripe.max_network_retries = settings.stripe_max_network_retries


def classify_stripe_error(exc: Exception) -> PaymentGatewayError:
    """Map a Stripe SDK exception onto one of our gateway error categories."""
    user_message = getattr(exc, "user_message", None)

    if isinstance(exc, stripe.CardError):
        return PaymentGatewayError("card_declined", 402, user_message or "Your card was declined.")
    if isinstance(exc, (stripe.AuthenticationError, stripe.PermissionError)):
        return PaymentGatewayError(
            "authentication", 502, "Payment provider rejected our credentials. Please contact support."
        )
    if isinstance(exc, stripe.InvalidRequestError):
        return PaymentGatewayError(
            "invalid_request", 400, f"Invalid payment request: {user_message or 'check the payment details'}"
        )
    if isinstance(exc, (stripe.APIConnectionError, stripe.RateLimitError)):
        return PaymentGatewayError(
            "transient", 503, "Payment provider is temporarily unavailable. Please try again."
        )
    return PaymentGatewayError("provider_error", 502, "Payment provider error. Please try again later.")


async def _call(fn, *args, **kwargs):
    """Run a blocking Stripe call off the event loop, bounded by the configured timeout."""
    settings = get_settings()
    if not settings.stripe_secret_key:
        raise PaymentGatewayError("not_configured", 503, "Payments are not configured.")

    name = getattr(fn, "__qualname__", repr(fn))
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(fn, *args, **kwargs),
            timeout=settings.stripe_timeout_seconds,
        )
    except TimeoutError:
        logger.error("Stripe call %s timed out after %ss", name, settings.stripe_timeout_seconds)
        raise PaymentGatewayError(
            "transient", 503, "Payment provider timed out. Please try again."
        ) from None
    except stripe.StripeError as e:
        error = classify_stripe_error(e)
        logger.error("Stripe call %s failed (%s): %s", name, error.kind, e)
        raise error from e


def plan_amount_cents(plan: str) -> int:
    settings = get_settings()
    return settings.annual_price_cents if plan == PLAN_ANNUAL else settings.monthly_price_cents


async def ensure_customer(user: User, db: AsyncSession) -> str:
    """Return the user's Stripe customer id, creating the customer on first use."""
    if user.stripe_customer_id:
        return user.stripe_customer_id

    customer = await _call(
        stripe.Customer.create,
        email=user.email,
        name=user.username,
        metadata={"user_id": str(user.id)},
    )
    user.stripe_customer_id = customer.id
    await db.commit()
    logger.info("Created Stripe customer %s for user %s", customer.id, user.id)
    return customer.id


async def create_subscription_intent(user: User, plan: str):
    """Create a PaymentIntent for a subscription plan; metadata lets the webhook activate it."""
    settings = get_settings()
    return await _call(
        stripe.PaymentIntent.create,
        amount=plan_amount_cents(plan),
        currency=settings.currency,
        customer=user.stripe_customer_id,
        automatic_payment_methods={"enabled": True},
        metadata={
            "user_id": str(user.id),
            "plan_type": plan,
            "purpose": SUBSCRIPTION_PAYMENT_PURPOSE,
        },
    )


async def create_payment_intent(amount: float):
    """One-time payment; ``amount`` is in major currency units."""
    settings = get_settings()
    return await _call(
        stripe.PaymentIntent.create,
        amount=round(amount * 100),
        currency=settings.currency,
    )


async def retrieve_payment_intent(payment_intent_id: str):
    return await _call(stripe.PaymentIntent.retrieve, payment_intent_id)


async def retrieve_subscription(subscription_id: str):
    return await _call(stripe.Subscription.retrieve, subscription_id)
