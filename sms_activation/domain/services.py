# sms_activation/domain/services.py
from __future__ import annotations

import hmac
import secrets
import string
from datetime import datetime, timedelta, timezone

TOKEN_ALPHABET = string.ascii_uppercase + string.digits
TOKEN_LENGTH = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_small_token(length: int = TOKEN_LENGTH) -> str:
    """Short uppercase alphanumeric token, convenient to type from an SMS."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def confirmation_period_valid(
    sent_at: datetime | None, window: timedelta, *, now: datetime
) -> bool:
    """
    True while a token sent at `sent_at` is still inside `window`.

    Examples:
        window = 1 day,  sent_at = now          -> True
        window = 5 days, sent_at = 4 days ago   -> True
        window = 5 days, sent_at = 6 days ago   -> False
        window = 0                              -> always False
    """
    if sent_at is None or window <= timedelta(0):
        return False
    if sent_at.tzinfo is None:
        sent_at = sent_at.replace(tzinfo=timezone.utc)
    return now - sent_at <= window
