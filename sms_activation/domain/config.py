from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class ConfirmationConfig:
    """
    Per-entity-type confirmation policy.

    confirm_within: how long an issued token stays valid, and how long an
        unconfirmed identity may still sign in. Zero means no grace period.
    confirmation_keys: attributes used to find an identity when a new token
        is requested without knowing the old one.
    required: when False the access gate never blocks unconfirmed identities.
    """

    confirm_within: timedelta = timedelta(0)
    confirmation_keys: tuple[str, ...] = ("phone",)
    required: bool = True
    max_token_attempts: int = 10
    sms_body: str = "{token}"
    unconfirmed_message: str = (
        "You have to confirm your phone number before continuing."
    )

    def render_sms_body(self, token: str) -> str:
        return self.sms_body.format(token=token)
