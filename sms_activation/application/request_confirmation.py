from datetime import datetime
from typing import Callable, Mapping, Optional

from sms_activation.application.sms_confirmation import SmsConfirmation
from sms_activation.domain.config import ConfirmationConfig
from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import SmsDeliveryError
from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.domain.ports.unit_of_work import UnitOfWorkPort


async def request_confirmation(
    uow: UnitOfWorkPort,
    sms: SmsPort,
    attributes: Mapping[str, Optional[str]],
    config: ConfirmationConfig | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
) -> Identity:
    async with uow as transaction:
        confirmation = SmsConfirmation(
            transaction.identities, sms, config, clock=clock
        )
        try:
            identity = await confirmation.request_confirmation(attributes)
        except SmsDeliveryError:
            # a freshly minted token stays persisted; delivery is not retried
            await transaction.commit()
            raise
        await transaction.commit()
    return identity
