from datetime import datetime
from typing import Callable

from sms_activation.application.sms_confirmation import SmsConfirmation
from sms_activation.domain.config import ConfirmationConfig
from sms_activation.domain.context import ConfirmationContext
from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import IdentityNotFound, SmsDeliveryError
from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.domain.ports.unit_of_work import UnitOfWorkPort


async def change_phone(
    uow: UnitOfWorkPort,
    sms: SmsPort,
    identity_id: str,
    phone: str,
    config: ConfirmationConfig | None = None,
    *,
    skip_reconfirmation: bool = False,
    skip_notification: bool = False,
    clock: Callable[[], datetime] | None = None,
) -> Identity:
    """
    Ask for a new phone number. Unless skip_reconfirmation is set, the
    number is parked in unconfirmed_phone and a token is texted to it.
    """
    ctx = ConfirmationContext()
    if skip_reconfirmation:
        ctx.skip_reconfirmation_postpone_once()
    if skip_notification:
        ctx.skip_confirmation_notification()

    async with uow as transaction:
        identity = await transaction.identities.find_by_unique_field(
            "id", identity_id, for_update=True
        )
        if identity is None:
            raise IdentityNotFound()

        confirmation = SmsConfirmation(
            transaction.identities, sms, config, clock=clock
        )
        identity.phone = phone.strip()
        try:
            saved = await confirmation.save(
                identity, ctx, validate_phone_uniqueness=True
            )
        except SmsDeliveryError:
            await transaction.commit()
            raise
        if saved:
            await transaction.commit()
        else:
            await transaction.rollback()
    return identity
