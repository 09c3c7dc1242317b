"""Subscription and payment routes — intents, client confirmation, status."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.db.session import get_db
from poesis.models.user import User
from poesis.schemas.auth import UserOut
from poesis.schemas.subscription import (
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    MarkSubscriptionSuccessRequest,
    PaymentIntentRequest,
    PaymentIntentResponse,
    SubscriptionStatus,
)
from poesis.services import stripe_gateway
from poesis.services.auth_service import get_current_user
from poesis.services.subscription_service import (
    activate_subscription,
    normalize_plan,
    sync_with_gateway,
)
from poesis.services.user_service import to_user_out

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["subscription"])


@router.post("/create-subscription", response_model=CreateSubscriptionResponse)
async def create_subscription(
    body: CreateSubscriptionRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Start a plan purchase: returns the client secret the browser confirms with Stripe."""
    plan = normalize_plan(body.plan_type)
    await stripe_gateway.ensure_customer(user, db)
    intent = await stripe_gateway.create_subscription_intent(user, plan)
    return CreateSubscriptionResponse(
        client_secret=intent.client_secret,
        payment_intent_id=intent.id,
        plan_type=plan,
        amount=intent.amount,
        currency=intent.currency,
    )


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(body: PaymentIntentRequest):
    intent = await stripe_gateway.create_payment_intent(body.amount)
    return PaymentIntentResponse(client_secret=intent.client_secret)


@router.post("/mark-subscription-success", response_model=UserOut)
async def mark_subscription_success(
    body: MarkSubscriptionSuccessRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Client-side confirmation callback; converges with the webhook on activate_subscription."""
    if body.payment_intent_id:
        intent = await stripe_gateway.retrieve_payment_intent(body.payment_intent_id)
        if intent.status != "succeeded":
            raise HTTPException(
                status_code=400,
                detail=f"Payment has not succeeded (status: {intent.status})",
            )

    user = await activate_subscription(db, user, body.plan_type, card=body.card, source="client")
    return to_user_out(user)


@router.get("/subscription", response_model=SubscriptionStatus)
async def subscription_status(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    is_active, subscription = await sync_with_gateway(db, user)
    return SubscriptionStatus(is_active=is_active, subscription=subscription)
