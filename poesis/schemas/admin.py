"""Admin back-office Pydantic schemas."""

from datetime import datetime

from pydantic import EmailStr

from .base import CamelModel


class CatalogStats(CamelModel):
    total_poems: int
    premium_poems: int
    free_poems: int
    categories: dict[str, int]
    authors_count: int
    total_users: int
    active_subscribers: int


class SubscriberOut(CamelModel):
    id: int
    username: str
    email: str
    subscription_type: str | None = None
    subscribed_at: datetime | None = None
    subscription_end_date: datetime | None = None
    is_active: bool
    days_remaining: int | None = None


class DeleteUserRequest(CamelModel):
    email: EmailStr
