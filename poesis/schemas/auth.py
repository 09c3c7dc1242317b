"""Auth-related Pydantic schemas."""

from datetime import date, datetime

from pydantic import EmailStr, Field

from .base import CamelModel


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class SubscriptionInfo(CamelModel):
    start_date: date | None = None
    end_date: date
    days_remaining: int
    is_active: bool


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    role: str
    is_admin: bool = False
    is_subscribed: bool = False
    subscription_plan: str | None = None
    subscribed_at: datetime | None = None
    subscription_end_date: datetime | None = None
    created_at: datetime | None = None
    subscription_info: SubscriptionInfo | None = None


class MessageOut(CamelModel):
    message: str
