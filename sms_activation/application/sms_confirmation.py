from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Mapping, Optional

import sms_activation.domain.services as domain_services
from sms_activation.domain.config import ConfirmationConfig
from sms_activation.domain.context import ConfirmationContext
from sms_activation.domain.entities import ConfirmationState, Identity, is_blank
from sms_activation.domain.errors import (
    ErrorKind,
    PhoneAlreadyTaken,
    TokenAlreadyTaken,
    TokenSpaceExhausted,
)
from sms_activation.domain.phone_change import PhoneChangeGuard
from sms_activation.domain.ports.identity_repository import IdentityRepositoryPort
from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.domain.token_issuer import TOKEN_FIELD, TokenIssuer
from sms_activation.logging import mask_phone

logger = logging.getLogger(__name__)

# Attributes a lookup placeholder may carry back to the caller.
_PLACEHOLDER_FIELDS = {"phone", "unconfirmed_phone", "sms_confirmation_token"}

# Fields confirm() rewrites; put back when the write is refused.
_CONFIRM_FIELDS = (
    "phone",
    "unconfirmed_phone",
    TOKEN_FIELD,
    "confirmation_sms_sent_at",
    "sms_confirmed_at",
)


class SmsConfirmation:
    """
    Phone confirmation state machine for one identity type.

    Create one per unit of work: it is bound to the repository of that
    transaction. Every command takes an optional ConfirmationContext; pass
    the same context through a request so the raw token stays cached.

    Persistence hooks are explicit. `save()` runs them around the
    repository call; a host that saves identities itself must call
    before_create/after_create or before_update/after_update the same way.
    """

    def __init__(
        self,
        identities: IdentityRepositoryPort,
        sms: SmsPort,
        config: ConfirmationConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        token_issuer: TokenIssuer | None = None,
    ) -> None:
        self._identities = identities
        self._sms = sms
        self._config = config or ConfirmationConfig()
        self._clock = clock or domain_services.utcnow
        self._issuer = token_issuer or TokenIssuer(
            identities,
            max_attempts=self._config.max_token_attempts,
        )
        self._guard = PhoneChangeGuard(self.issue_token)

    # ---- queries -------------------------------------------------------

    def is_confirmed(self, identity: Identity) -> bool:
        return identity.sms_confirmed_at is not None

    def is_reconfirmation_pending(self, identity: Identity) -> bool:
        return not is_blank(identity.unconfirmed_phone)

    def confirmation_required(self, identity: Identity) -> bool:
        return self._config.required and not self.is_confirmed(identity)

    def confirmation_period_valid(self, identity: Identity) -> bool:
        return domain_services.confirmation_period_valid(
            identity.confirmation_sms_sent_at,
            self._config.confirm_within,
            now=self._clock(),
        )

    def is_active(self, identity: Identity) -> bool:
        """
        Access gate. Confirmed identities are never blocked; unconfirmed ones
        may sign in until their confirmation window elapses.
        """
        return (
            not self.confirmation_required(identity)
            or self.is_confirmed(identity)
            or self.confirmation_period_valid(identity)
        )

    def inactive_message(self, identity: Identity, default: str = "inactive") -> str:
        if not self.is_confirmed(identity):
            return self._config.unconfirmed_message
        return default

    def state(self, identity: Identity) -> ConfirmationState:
        if self.is_reconfirmation_pending(identity):
            return ConfirmationState.RECONFIRMATION_PENDING
        if self.is_confirmed(identity):
            return ConfirmationState.CONFIRMED
        if identity.sms_confirmation_token is None:
            return ConfirmationState.UNCONFIRMED
        if self.confirmation_period_valid(identity):
            return ConfirmationState.TOKEN_PENDING
        return ConfirmationState.TOKEN_EXPIRED

    # ---- commands ------------------------------------------------------

    async def issue_token(self, identity: Identity, ctx: ConfirmationContext) -> str:
        """Assign a fresh token without persisting it."""
        token = await self._issuer.issue()
        ctx.raw_token = token
        identity.sms_confirmed_at = None
        identity.sms_confirmation_token = token
        identity.confirmation_sms_sent_at = self._clock()
        logger.info("sms token issued", extra={"identity_id": identity.id})
        return token

    async def dispatch_notification(
        self, identity: Identity, ctx: ConfirmationContext
    ) -> bool:
        """
        Text the outstanding token to the pending phone, or to the current one.

        Reuses ctx.raw_token when present. Otherwise a new token is issued
        and persisted, which invalidates any token delivered earlier.
        """
        phone = (
            identity.unconfirmed_phone
            if self.is_reconfirmation_pending(identity)
            else identity.phone
        )
        if is_blank(phone):
            identity.add_error(TOKEN_FIELD, ErrorKind.NO_PHONE_ASSOCIATED)
            return False

        if ctx.raw_token is None:
            await self.issue_token(identity, ctx)
            if not await self.save(identity, ctx):
                return False

        await self._sms.send(to=phone, body=self._config.render_sms_body(ctx.raw_token))
        logger.info(
            "sms confirmation dispatched",
            extra={"identity_id": identity.id, "to": mask_phone(phone)},
        )
        return True

    async def confirm(
        self,
        identity: Identity,
        token: Optional[str] = None,
        ctx: ConfirmationContext | None = None,
    ) -> bool:
        ctx = ctx or ConfirmationContext()
        if not self._unless_confirmed(identity):
            return False

        if token is not None and not (
            identity.sms_confirmation_token
            and domain_services.secure_compare(identity.sms_confirmation_token, token)
        ):
            identity.add_error(TOKEN_FIELD, ErrorKind.NOT_FOUND)
            logger.info("sms confirmation token mismatch", extra={"identity_id": identity.id})
            return False

        if not self.confirmation_period_valid(identity):
            identity.add_error("phone", ErrorKind.PERIOD_EXPIRED)
            logger.info(
                "sms confirmation period expired", extra={"identity_id": identity.id}
            )
            return False

        before = {name: getattr(identity, name) for name in _CONFIRM_FIELDS}
        identity.sms_confirmation_token = None
        identity.sms_confirmed_at = self._clock()

        if self.is_reconfirmation_pending(identity):
            ctx.skip_reconfirmation_postpone_once()
            identity.phone = identity.unconfirmed_phone
            identity.unconfirmed_phone = None
            # the promoted phone must stay unique across identities
            saved = await self.save(identity, ctx, validate_phone_uniqueness=True)
        else:
            saved = await self.save(identity, ctx)

        if not saved:
            # the store still holds the pending state
            for name, value in before.items():
                setattr(identity, name, value)
            return False
        logger.info("sms confirmation succeeded", extra={"identity_id": identity.id})
        return True

    async def resend(
        self, identity: Identity, ctx: ConfirmationContext | None = None
    ) -> bool:
        """Send the token again; a new one is only minted if none is cached."""
        ctx = ctx or ConfirmationContext()
        ctx.reconfirmation_pending = False
        if not self._unless_confirmed(identity):
            return False
        return await self.dispatch_notification(identity, ctx)

    async def send_reconfirmation_instructions(
        self, identity: Identity, ctx: ConfirmationContext
    ) -> None:
        ctx.reconfirmation_pending = False
        if not ctx.suppress_notification:
            await self.resend(identity, ctx)

    def skip_confirmation(self, identity: Identity) -> None:
        """Administrative bypass: mark confirmed without touching the token."""
        identity.sms_confirmed_at = self._clock()

    def _unless_confirmed(self, identity: Identity) -> bool:
        if not self.is_confirmed(identity) or self.is_reconfirmation_pending(identity):
            return True
        identity.add_error(TOKEN_FIELD, ErrorKind.ALREADY_CONFIRMED)
        return False

    # ---- lookups -------------------------------------------------------

    async def request_confirmation(
        self, attributes: Mapping[str, Optional[str]], ctx: ConfirmationContext | None = None
    ) -> Identity:
        """
        Find an identity by the configured lookup keys and resend its token.
        When nothing matches, return an unsaved placeholder carrying
        not_found errors on the lookup keys.
        """
        identity = await self._find_or_initialize_with_errors(attributes)
        if identity.persisted:
            await self.resend(identity, ctx)
        return identity

    async def confirm_by_token(
        self, token: Optional[str], ctx: ConfirmationContext | None = None
    ) -> Identity:
        token = (token or "").strip().upper()
        identity = None
        if token:
            identity = await self._identities.find_by_unique_field(
                TOKEN_FIELD, token, for_update=True
            )
        if identity is None:
            placeholder = Identity(sms_confirmation_token=token or None)
            placeholder.add_error(TOKEN_FIELD, ErrorKind.NOT_FOUND)
            return placeholder
        await self.confirm(identity, token, ctx)
        return identity

    async def _find_or_initialize_with_errors(
        self, attributes: Mapping[str, Optional[str]]
    ) -> Identity:
        conditions: dict[str, str] = {}
        for key in self._config.confirmation_keys:
            value = attributes.get(key)
            conditions[key] = value.strip() if isinstance(value, str) else ""

        if conditions and all(conditions.values()):
            identity = await self._identities.find_first(conditions, for_update=True)
            if identity is not None:
                return identity

        placeholder = Identity()
        for key, value in conditions.items():
            if key in _PLACEHOLDER_FIELDS:
                setattr(placeholder, key, value or None)
            placeholder.add_error(key, ErrorKind.NOT_FOUND)
        return placeholder

    # ---- persistence hooks ---------------------------------------------

    async def save(
        self,
        identity: Identity,
        ctx: ConfirmationContext | None = None,
        *,
        validate_phone_uniqueness: bool = False,
    ) -> bool:
        """Persist the identity, running the create or update hooks around it."""
        ctx = ctx or ConfirmationContext()
        creating = not identity.persisted

        if creating:
            await self.before_create(identity, ctx)
        else:
            await self.before_update(identity, ctx)

        if not await self._write(identity, ctx, validate_phone_uniqueness):
            return False

        if creating:
            await self.after_create(identity, ctx)
        else:
            await self.after_update(identity, ctx)
        return True

    async def before_create(self, identity: Identity, ctx: ConfirmationContext) -> None:
        if self.confirmation_required(identity):
            await self.issue_token(identity, ctx)

    async def after_create(self, identity: Identity, ctx: ConfirmationContext) -> None:
        if (
            self.confirmation_required(identity)
            and not ctx.suppress_notification
            and not is_blank(identity.phone)
        ):
            await self.resend(identity, ctx)

    async def before_update(self, identity: Identity, ctx: ConfirmationContext) -> None:
        if self._guard.should_postpone(identity, ctx):
            await self._guard.postpone(identity, ctx)

    async def after_update(self, identity: Identity, ctx: ConfirmationContext) -> None:
        if ctx.reconfirmation_pending:
            await self.send_reconfirmation_instructions(identity, ctx)

    async def _write(
        self,
        identity: Identity,
        ctx: ConfirmationContext,
        validate_phone_uniqueness: bool,
    ) -> bool:
        for attempt in range(1, self._config.max_token_attempts + 1):
            try:
                await self._identities.save(
                    identity, validate_phone_uniqueness=validate_phone_uniqueness
                )
            except PhoneAlreadyTaken:
                identity.add_error("phone", ErrorKind.VALIDATION_FAILED)
                return False
            except TokenAlreadyTaken:
                logger.warning(
                    "sms token taken on save; reissuing",
                    extra={"identity_id": identity.id, "attempt": attempt},
                )
                await self.issue_token(identity, ctx)
                continue
            identity.mark_persisted()
            return True
        raise TokenSpaceExhausted(
            f"token still taken after {self._config.max_token_attempts} saves"
        )
