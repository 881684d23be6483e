from datetime import datetime
from typing import Callable

from sms_activation.application.sms_confirmation import SmsConfirmation
from sms_activation.domain.config import ConfirmationConfig
from sms_activation.domain.entities import Identity
from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.domain.ports.unit_of_work import UnitOfWorkPort


async def confirm_by_token(
    uow: UnitOfWorkPort,
    sms: SmsPort,
    token: str,
    config: ConfirmationConfig | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
) -> Identity:
    async with uow as transaction:
        confirmation = SmsConfirmation(
            transaction.identities, sms, config, clock=clock
        )
        identity = await confirmation.confirm_by_token(token)
        if identity.errors:
            await transaction.rollback()
        else:
            await transaction.commit()
    return identity
