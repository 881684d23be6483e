from __future__ import annotations

import logging
from typing import Awaitable, Callable

from sms_activation.domain.context import ConfirmationContext
from sms_activation.domain.entities import Identity, is_blank

logger = logging.getLogger(__name__)

IssueToken = Callable[[Identity, ConfirmationContext], Awaitable[str]]


class PhoneChangeGuard:
    """Holds a new phone number back until it has been confirmed by SMS."""

    def __init__(self, issue_token: IssueToken) -> None:
        self._issue_token = issue_token

    def should_postpone(self, identity: Identity, ctx: ConfirmationContext) -> bool:
        postpone = (
            identity.phone_changed
            and not ctx.bypass_postpone_once
            and not is_blank(identity.phone)
        )
        # one-shot
        ctx.bypass_postpone_once = False
        return postpone

    async def postpone(self, identity: Identity, ctx: ConfirmationContext) -> None:
        ctx.reconfirmation_pending = True
        identity.unconfirmed_phone = identity.phone
        identity.phone = identity.phone_was
        await self._issue_token(identity, ctx)
        logger.info(
            "phone change postponed until reconfirmation",
            extra={"identity_id": identity.id},
        )
