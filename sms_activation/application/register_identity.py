from datetime import datetime
from typing import Callable

from sms_activation.application.sms_confirmation import SmsConfirmation
from sms_activation.domain.config import ConfirmationConfig
from sms_activation.domain.context import ConfirmationContext
from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import SmsDeliveryError
from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.domain.ports.unit_of_work import UnitOfWorkPort


async def register_identity(
    uow: UnitOfWorkPort,
    sms: SmsPort,
    phone: str,
    config: ConfirmationConfig | None = None,
    *,
    skip_confirmation: bool = False,
    skip_notification: bool = False,
    clock: Callable[[], datetime] | None = None,
) -> Identity:
    identity = Identity(phone=phone)
    ctx = ConfirmationContext()
    if skip_notification:
        ctx.skip_confirmation_notification()

    async with uow as transaction:
        confirmation = SmsConfirmation(
            transaction.identities, sms, config, clock=clock
        )
        if skip_confirmation:
            confirmation.skip_confirmation(identity)
        try:
            saved = await confirmation.save(
                identity, ctx, validate_phone_uniqueness=True
            )
        except SmsDeliveryError:
            # the token is kept even though the text never left
            await transaction.commit()
            raise
        if saved:
            await transaction.commit()
        else:
            await transaction.rollback()
    return identity
