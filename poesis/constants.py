"""Centralized application constants — single source of truth for hardcoded values."""

# --- Session ---
COOKIE_NAME = "poesis_session"
SESSION_KEY_PREFIX = "session:"

# --- Premium content ---
PREVIEW_LINE_COUNT = 2
REDACTION_MARKER = "..."

# --- Catalog ---
RELATED_POEMS_LIMIT = 2
RELATED_POEMS_MAX_LIMIT = 20

# --- Subscription plans ---
PLAN_MONTHLY = "monthly"
PLAN_ANNUAL = "annual"
PLAN_ALIASES = {
    "monthly": PLAN_MONTHLY,
    "month": PLAN_MONTHLY,
    "annual": PLAN_ANNUAL,
    "yearly": PLAN_ANNUAL,
}
PLAN_MONTHS = {PLAN_MONTHLY: 1, PLAN_ANNUAL: 12}

# --- Stripe ---
ACTIVE_GATEWAY_STATUSES = frozenset({"active", "trialing"})
SUBSCRIPTION_PAYMENT_PURPOSE = "subscription"
