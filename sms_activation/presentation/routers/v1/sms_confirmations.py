from typing import Annotated

from fastapi import APIRouter, Depends

from sms_activation.application.confirm_by_token import confirm_by_token
from sms_activation.application.request_confirmation import request_confirmation
from sms_activation.domain.config import ConfirmationConfig
from sms_activation.domain.errors import SmsDeliveryError
from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.domain.ports.unit_of_work import UnitOfWorkPort
from sms_activation.presentation.dependencies import (
    get_confirmation_config,
    get_sms_port,
    get_uow,
)
from sms_activation.presentation.errors import raise_for_field_errors, sms_delivery_failed
from sms_activation.schemas.requests import ConfirmationRequestIn, ConfirmTokenIn
from sms_activation.schemas.responses import AcceptedOut, OkOut

router = APIRouter(prefix="/sms_confirmation", tags=["SMS confirmation"])


@router.post("", status_code=202, response_model=AcceptedOut)
async def post_request_confirmation(
    body: ConfirmationRequestIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sms: Annotated[SmsPort, Depends(get_sms_port)],
    config: Annotated[ConfirmationConfig, Depends(get_confirmation_config)],
):
    try:
        identity = await request_confirmation(
            uow=uow, sms=sms, attributes=body.attributes, config=config
        )
    except SmsDeliveryError as e:
        raise sms_delivery_failed(e) from e
    raise_for_field_errors(identity)
    return AcceptedOut()


@router.post("/confirm", response_model=OkOut)
async def post_confirm(
    body: ConfirmTokenIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sms: Annotated[SmsPort, Depends(get_sms_port)],
    config: Annotated[ConfirmationConfig, Depends(get_confirmation_config)],
):
    identity = await confirm_by_token(
        uow=uow, sms=sms, token=body.token, config=config
    )
    raise_for_field_errors(identity)
    return OkOut()
