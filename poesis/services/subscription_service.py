"""Subscription lifecycle — activation, expiry, reconciliation with Stripe.

State is kept on the User row: ``is_subscribed`` plus the start/end dates.
"Expired" is never stored; it is derived from the end date when read.
A cancellation reported by Stripe ends the period on the spot.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from poesis.constants import ACTIVE_GATEWAY_STATUSES, PLAN_ALIASES, PLAN_MONTHLY, PLAN_MONTHS
from poesis.models.user import User
from poesis.schemas.auth import SubscriptionInfo
from poesis.schemas.subscription import CardSummary
from poesis.services import stripe_gateway
from poesis.services.email_service import send_subscription_confirmation
from poesis.utils import add_months, ensure_utc, now_utc

logger = logging.getLogger(__name__)


def normalize_plan(raw: str | None) -> str:
    """Map a client plan identifier to monthly/annual. Unknown values fall back to monthly."""
    if not raw:
        return PLAN_MONTHLY
    return PLAN_ALIASES.get(raw.strip().lower(), PLAN_MONTHLY)


def compute_subscription_period(plan: str, now: datetime) -> tuple[datetime, datetime]:
    return now, add_months(now, PLAN_MONTHS[plan])


def days_remaining(user: User, now: datetime | None = None) -> int | None:
    """Whole days left, rounded up. None when the user has no end date."""
    end = ensure_utc(user.subscription_end_date)
    if end is None:
        return None
    now = now or now_utc()
    return math.ceil((end - now) / timedelta(days=1))


def is_subscription_active(user: User, now: datetime | None = None) -> bool:
    """Derive the current subscription state.

    With an end date the dates win over the stored flag, in both directions.
    Gateway-managed users without dates fall back to the flag.
    """
    remaining = days_remaining(user, now)
    if remaining is None:
        return bool(user.is_subscribed)
    return remaining > 0


def subscription_info(user: User, now: datetime | None = None) -> SubscriptionInfo | None:
    remaining = days_remaining(user, now)
    if remaining is None:
        return None
    start = ensure_utc(user.subscribed_at)
    return SubscriptionInfo(
        start_date=start.date() if start else None,
        end_date=ensure_utc(user.subscription_end_date).date(),
        days_remaining=max(remaining, 0),
        is_active=remaining > 0,
    )


async def activate_subscription(
    db: AsyncSession,
    user: User,
    plan_type: str | None,
    now: datetime | None = None,
    card: CardSummary | None = None,
    source: str = "client",
) -> User:
    """Mark the user subscribed for one plan period starting now.

    Both the client confirmation route and the Stripe webhook land here.
    No locking: concurrent activations each write their own period and the
    last commit wins.
    """
    plan = normalize_plan(plan_type)
    start, end = compute_subscription_period(plan, now or now_utc())

    user.subscribed_at = start
    user.subscription_end_date = end
    user.subscription_plan = plan
    user.is_subscribed = True
    await db.commit()

    logger.info(
        "Activated %s subscription for user %s via %s (ends %s)",
        plan, user.id, source, end.isoformat(),
    )

    # Billing state is committed; a failed notification must not undo it
    try:
        await send_subscription_confirmation(user, plan, end, card)
    except Exception as e:
        logger.error("Subscription confirmation for user %s failed: %s", user.id, e)

    return user


async def _find_user_by_customer(db: AsyncSession, customer_id: str) -> User | None:
    result = await db.execute(select(User).where(User.stripe_customer_id == customer_id))
    return result.scalar_one_or_none()


def _end_period(user: User, now: datetime | None = None) -> None:
    """Close the paid period at ``now`` so the date-based view agrees with a revoked flag."""
    now = now or now_utc()
    end = ensure_utc(user.subscription_end_date)
    if end is not None and end > now:
        user.subscription_end_date = now


async def apply_gateway_subscription_state(
    db: AsyncSession, sub_data: dict, deleted: bool = False
) -> User | None:
    """Handle customer.subscription.updated/deleted — copy Stripe's verdict onto the flag.

    A revoked subscription also has its end date pulled back to now, so access
    stops immediately instead of running to the end of the paid period.
    """
    customer_id = sub_data.get("customer")
    if not customer_id:
        logger.warning("Subscription event %s has no customer", sub_data.get("id"))
        return None

    user = await _find_user_by_customer(db, customer_id)
    if not user:
        logger.warning("No local user for Stripe customer %s", customer_id)
        return None

    if deleted:
        user.is_subscribed = False
    else:
        user.is_subscribed = sub_data.get("status") in ACTIVE_GATEWAY_STATUSES
    if not user.is_subscribed:
        _end_period(user)
    if sub_data.get("id"):
        user.stripe_subscription_id = sub_data["id"]
    await db.commit()

    logger.info(
        "Reconciled user %s from Stripe subscription %s: is_subscribed=%s",
        user.id, sub_data.get("id"), user.is_subscribed,
    )
    return user


async def handle_payment_intent_succeeded(db: AsyncSession, intent: dict) -> User | None:
    """Webhook path for payment_intent.succeeded; only subscription payments activate."""
    metadata = intent.get("metadata") or {}
    plan_type = metadata.get("plan_type")
    if not plan_type:
        logger.debug("PaymentIntent %s is not a subscription payment", intent.get("id"))
        return None

    user = None
    if metadata.get("user_id"):
        try:
            user = await db.get(User, int(metadata["user_id"]))
        except ValueError:
            logger.warning("PaymentIntent %s has malformed user_id metadata", intent.get("id"))
    if user is None and intent.get("customer"):
        user = await _find_user_by_customer(db, intent["customer"])
    if user is None:
        logger.warning("No local user for PaymentIntent %s", intent.get("id"))
        return None

    return await activate_subscription(db, user, plan_type, source="webhook")


async def sync_with_gateway(db: AsyncSession, user: User) -> tuple[bool, dict[str, Any] | None]:
    """Status for GET /api/subscription.

    Users with a Stripe subscription are checked against Stripe and the stored
    flag is corrected when it disagrees. Everyone else gets the date-based
    view, which never writes.
    """
    if not user.stripe_subscription_id:
        info = subscription_info(user)
        return (
            is_subscription_active(user),
            info.model_dump(by_alias=True, mode="json") if info else None,
        )

    stripe_sub = await stripe_gateway.retrieve_subscription(user.stripe_subscription_id)
    is_active = stripe_sub.status in ACTIVE_GATEWAY_STATUSES

    if is_active != bool(user.is_subscribed):
        logger.info(
            "Correcting is_subscribed for user %s: %s -> %s (Stripe status %s)",
            user.id, user.is_subscribed, is_active, stripe_sub.status,
        )
        user.is_subscribed = is_active
        if not is_active:
            _end_period(user)
        await db.commit()

    return is_active, {
        "id": stripe_sub.id,
        "status": stripe_sub.status,
        "cancelAtPeriodEnd": bool(getattr(stripe_sub, "cancel_at_period_end", False)),
    }
