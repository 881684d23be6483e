from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from sms_activation.application.change_phone import change_phone
from sms_activation.application.register_identity import register_identity
from sms_activation.application.sms_confirmation import SmsConfirmation
from sms_activation.domain.config import ConfirmationConfig
from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import IdentityNotFound, SmsDeliveryError
from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.domain.ports.unit_of_work import UnitOfWorkPort
from sms_activation.presentation.dependencies import (
    get_confirmation_config,
    get_sms_port,
    get_uow,
)
from sms_activation.presentation.errors import raise_for_field_errors, sms_delivery_failed
from sms_activation.schemas.requests import IdentityCreateIn, PhoneChangeIn
from sms_activation.schemas.responses import IdentityOut

router = APIRouter(prefix="/identities", tags=["Identities"])


def identity_out(confirmation: SmsConfirmation, identity: Identity) -> IdentityOut:
    active = confirmation.is_active(identity)
    return IdentityOut(
        id=identity.id,
        phone=identity.phone,
        unconfirmed_phone=identity.unconfirmed_phone,
        state=confirmation.state(identity).value,
        confirmed=confirmation.is_confirmed(identity),
        active=active,
        reconfirmation_pending=confirmation.is_reconfirmation_pending(identity),
        confirmation_sms_sent_at=identity.confirmation_sms_sent_at,
        sms_confirmed_at=identity.sms_confirmed_at,
        inactive_message=None if active else confirmation.inactive_message(identity),
    )


@router.post("", status_code=201, response_model=IdentityOut)
async def post_create_identity(
    body: IdentityCreateIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sms: Annotated[SmsPort, Depends(get_sms_port)],
    config: Annotated[ConfirmationConfig, Depends(get_confirmation_config)],
):
    try:
        identity = await register_identity(
            uow=uow,
            sms=sms,
            phone=body.phone,
            config=config,
            skip_confirmation=body.skip_confirmation,
            skip_notification=body.skip_notification,
        )
    except SmsDeliveryError as e:
        raise sms_delivery_failed(e) from e
    raise_for_field_errors(identity)
    return identity_out(SmsConfirmation(uow.identities, sms, config), identity)


@router.get("/{identity_id}", response_model=IdentityOut)
async def get_identity(
    identity_id: str,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sms: Annotated[SmsPort, Depends(get_sms_port)],
    config: Annotated[ConfirmationConfig, Depends(get_confirmation_config)],
):
    async with uow as tx:
        identity = await tx.identities.find_by_unique_field("id", identity_id)
        if identity is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="identity not found"
            )
        # read-only; no commit needed
        return identity_out(SmsConfirmation(tx.identities, sms, config), identity)


@router.patch("/{identity_id}/phone", response_model=IdentityOut)
async def patch_identity_phone(
    identity_id: str,
    body: PhoneChangeIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sms: Annotated[SmsPort, Depends(get_sms_port)],
    config: Annotated[ConfirmationConfig, Depends(get_confirmation_config)],
):
    try:
        identity = await change_phone(
            uow=uow,
            sms=sms,
            identity_id=identity_id,
            phone=body.phone,
            config=config,
            skip_reconfirmation=body.skip_reconfirmation,
            skip_notification=body.skip_notification,
        )
    except IdentityNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="identity not found"
        )
    except SmsDeliveryError as e:
        raise sms_delivery_failed(e) from e
    raise_for_field_errors(identity)
    return identity_out(SmsConfirmation(uow.identities, sms, config), identity)
