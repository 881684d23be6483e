from __future__ import annotations

import logging

import sms_activation.domain.services as domain_services
from sms_activation.domain.errors import TokenSpaceExhausted
from sms_activation.domain.ports.identity_repository import IdentityRepositoryPort

logger = logging.getLogger(__name__)

TOKEN_FIELD = "sms_confirmation_token"


class TokenIssuer:
    """
    Mints confirmation tokens that no outstanding identity is using.

    The probe is check-then-act: the caller persists the chosen token later,
    so the store must still enforce uniqueness and the caller must retry on
    TokenAlreadyTaken.
    """

    def __init__(
        self,
        identities: IdentityRepositoryPort,
        *,
        max_attempts: int = 10,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._identities = identities
        self._max_attempts = max_attempts

    async def issue(self) -> str:
        for attempt in range(1, self._max_attempts + 1):
            token = domain_services.generate_small_token()
            if not await self._identities.exists_with_value(TOKEN_FIELD, token):
                return token
            logger.info("sms token candidate collided", extra={"attempt": attempt})
        logger.error(
            "no free sms token found", extra={"attempts": self._max_attempts}
        )
        raise TokenSpaceExhausted(
            f"no free token after {self._max_attempts} attempts"
        )
