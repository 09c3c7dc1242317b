"""Subscription and payment Pydantic schemas."""

from typing import Any

from pydantic import Field

from .base import CamelModel


class CreateSubscriptionRequest(CamelModel):
    # Normalized leniently by subscription_service.normalize_plan
    plan_type: str | None = None


class CreateSubscriptionResponse(CamelModel):
    client_secret: str | None
    payment_intent_id: str
    plan_type: str
    amount: int
    currency: str


class PaymentIntentRequest(CamelModel):
    amount: float = Field(gt=0)


class PaymentIntentResponse(CamelModel):
    client_secret: str | None


class CardSummary(CamelModel):
    brand: str | None = None
    last4: str | None = Field(None, max_length=4)


class MarkSubscriptionSuccessRequest(CamelModel):
    plan_type: str | None = None
    payment_intent_id: str | None = None
    card: CardSummary | None = None


class SubscriptionStatus(CamelModel):
    is_active: bool
    subscription: dict[str, Any] | None = None
