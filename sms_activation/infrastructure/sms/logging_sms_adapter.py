from __future__ import annotations

import logging

from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.logging import mask_phone

logger = logging.getLogger(__name__)


class LoggingSmsAdapter(SmsPort):
    """
    Development backend (SMS_BACKEND=console): nothing is sent, the message
    is written to the log instead so the token can be read from there.
    """

    async def send(self, *, to: str, body: str) -> None:
        logger.warning("console sms backend", extra={"to": mask_phone(to), "body": body})

    async def aclose(self) -> None:
        return None
