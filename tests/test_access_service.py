from datetime import timedelta

import pytest

from poesis.models import Poem, User, UserRole
from poesis.services.access_service import (
    can_read_full,
    evaluate_access,
    evaluate_many,
    redact_content,
)
from poesis.utils import now_utc

CONTENT = "First line\nSecond line\nThird line\nFourth line"


def _poem(content=CONTENT, is_premium=True, poem_id=1):
    return Poem(
        id=poem_id,
        title=f"Poem {poem_id}",
        author="Emily Dickinson",
        content=content,
        image_url="https://example.com/p.jpg",
        is_premium=is_premium,
    )


def _user(is_subscribed=False, end_in=None, role=UserRole.USER):
    now = now_utc()
    return User(
        id=7,
        username="reader",
        email="reader@example.com",
        role=role,
        is_subscribed=is_subscribed,
        subscribed_at=now - timedelta(days=1) if end_in is not None else None,
        subscription_end_date=now + end_in if end_in is not None else None,
    )


class TestRedactContent:
    def test_keeps_first_two_lines(self):
        assert redact_content(CONTENT) == "First line\nSecond line..."

    def test_single_line_still_gets_marker(self):
        assert redact_content("Only one line") == "Only one line..."

    def test_empty_content(self):
        assert redact_content("") == "..."


class TestFreePoems:
    @pytest.mark.parametrize(
        "user",
        [
            None,
            _user(),
            _user(is_subscribed=True, end_in=timedelta(days=30)),
            _user(is_subscribed=True, end_in=timedelta(days=-3)),
        ],
    )
    def test_full_content_for_every_caller(self, user):
        out = evaluate_access(_poem(is_premium=False), user)
        assert out.content == CONTENT
        assert out.is_premium_locked is False


class TestPremiumPoems:
    def test_anonymous_gets_redacted(self):
        out = evaluate_access(_poem(), None)
        assert out.content == "First line\nSecond line..."
        assert out.is_premium_locked is True
        assert out.is_premium is True

    def test_unsubscribed_user_gets_redacted(self):
        out = evaluate_access(_poem(), _user())
        assert out.is_premium_locked is True

    def test_active_subscriber_gets_full_content(self):
        out = evaluate_access(_poem(), _user(is_subscribed=True, end_in=timedelta(days=30)))
        assert out.content == CONTENT
        assert out.is_premium_locked is False

    def test_stale_flag_with_past_end_date_is_redacted(self):
        # The stored flag still says subscribed, but the period is over
        user = _user(is_subscribed=True, end_in=timedelta(days=-1))
        assert can_read_full(_poem(), user) is False

    def test_flag_off_with_days_remaining_still_reads(self):
        user = _user(is_subscribed=False, end_in=timedelta(days=5))
        assert can_read_full(_poem(), user) is True

    def test_gateway_subscriber_without_dates_uses_flag(self):
        assert can_read_full(_poem(), _user(is_subscribed=True)) is True
        assert can_read_full(_poem(), _user(is_subscribed=False)) is False

    def test_admin_without_subscription_is_redacted(self):
        assert can_read_full(_poem(), _user(role=UserRole.ADMIN)) is False

    def test_short_premium_poem(self):
        out = evaluate_access(_poem(content="Just this"), None)
        assert out.content == "Just this..."
        assert out.is_premium_locked is True

    def test_original_poem_is_not_mutated(self):
        poem = _poem()
        evaluate_access(poem, None)
        assert poem.content == CONTENT


def test_evaluate_many_mixes_projections():
    poems = [_poem(is_premium=False, poem_id=1), _poem(poem_id=2)]
    out = evaluate_many(poems, None)
    assert [p.is_premium_locked for p in out] == [False, True]
    assert out[0].content == CONTENT
