"""Webhook routes — Stripe."""

import logging

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.config import get_settings
from poesis.db.session import get_db
from poesis.services.subscription_service import (
    apply_gateway_subscription_state,
    handle_payment_intent_succeeded,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["webhooks"])


@router.post("/stripe-webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="stripe-signature"),
    db: AsyncSession = Depends(get_db),
):
    settings = get_settings()
    if not settings.stripe_webhook_secret:
        raise HTTPException(status_code=503, detail="Stripe webhooks are not configured")
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing signature")

    payload = await request.body()

    try:
        event = stripe.Webhook.construct_event(
            payload.decode("utf-8"), stripe_signature, settings.stripe_webhook_secret
        )
        event_type = event["type"]
        # Handlers work on plain dicts; StripeObject has no dict API
        data = event["data"]["object"].to_dict()
    except stripe.SignatureVerificationError:
        raise HTTPException(status_code=400, detail="Invalid signature")
    except (ValueError, KeyError, AttributeError):
        raise HTTPException(status_code=400, detail="Invalid payload")

    logger.info("Stripe webhook: %s", event_type)

    if event_type == "payment_intent.succeeded":
        await handle_payment_intent_succeeded(db, data)
    elif event_type == "payment_intent.payment_failed":
        error = (data.get("last_payment_error") or {}).get("message")
        logger.warning("Payment %s failed: %s", data.get("id"), error)
    elif event_type == "customer.subscription.updated":
        await apply_gateway_subscription_state(db, data)
    elif event_type == "customer.subscription.deleted":
        await apply_gateway_subscription_state(db, data, deleted=True)
    else:
        logger.debug("Ignoring Stripe event %s", event_type)

    return {"received": True}
