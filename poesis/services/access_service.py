"""Premium-content gating: decides which projection of a poem a caller receives."""

from collections.abc import Iterable
from datetime import datetime

from poesis.constants import PREVIEW_LINE_COUNT, REDACTION_MARKER
from poesis.models.poem import Poem
from poesis.models.user import User
from poesis.schemas.poem import PoemOut
from poesis.services.subscription_service import is_subscription_active
from poesis.utils import now_utc


def redact_content(content: str) -> str:
    """First two lines plus the marker; shorter poems keep what they have."""
    preview = content.split("\n")[:PREVIEW_LINE_COUNT]
    return "\n".join(preview) + REDACTION_MARKER


def can_read_full(poem: Poem, user: User | None, now: datetime | None = None) -> bool:
    if not poem.is_premium:
        return True
    if user is None:
        return False
    return is_subscription_active(user, now)


def evaluate_access(poem: Poem, user: User | None, now: datetime | None = None) -> PoemOut:
    """Return the full projection, or the redacted one for premium poems and non-subscribers."""
    if can_read_full(poem, user, now):
        return PoemOut.model_validate(poem)

    redacted = PoemOut.model_validate(poem).model_copy(
        update={"content": redact_content(poem.content), "is_premium_locked": True}
    )
    return redacted


def evaluate_many(
    poems: Iterable[Poem], user: User | None, now: datetime | None = None
) -> list[PoemOut]:
    now = now or now_utc()
    return [evaluate_access(poem, user, now) for poem in poems]
