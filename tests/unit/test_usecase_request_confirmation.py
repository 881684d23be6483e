import pytest

from sms_activation.application.request_confirmation import request_confirmation
from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import SmsDeliveryError

PHONE = "+33600000001"


@pytest.mark.asyncio
async def test_request_confirmation_resends_to_known_phone(
    uow, repo, sms, config, clock
):
    seeded = repo.seed(Identity(phone=PHONE))

    identity = await request_confirmation(
        uow, sms, {"phone": f" {PHONE} "}, config, clock=clock
    )

    assert identity.id == seeded.id
    assert identity.errors == {}
    assert repo.lookups == [{"phone": PHONE}]
    assert repo.get(seeded.id).sms_confirmation_token == "TK001"
    assert sms.calls == [(PHONE, "TK001")]
    assert uow.committed is True


@pytest.mark.asyncio
async def test_request_confirmation_unknown_phone(uow, repo, sms, config, clock):
    identity = await request_confirmation(
        uow, sms, {"phone": PHONE}, config, clock=clock
    )

    assert identity.persisted is False
    assert identity.phone == PHONE
    assert identity.errors == {"phone": ["not_found"]}
    assert sms.calls == []


@pytest.mark.asyncio
async def test_request_confirmation_blank_phone_skips_lookup(
    uow, repo, sms, config, clock
):
    identity = await request_confirmation(
        uow, sms, {"phone": "   "}, config, clock=clock
    )

    assert repo.lookups == []
    assert identity.phone is None
    assert identity.errors == {"phone": ["not_found"]}


@pytest.mark.asyncio
async def test_request_confirmation_confirmed_identity(uow, repo, sms, config, clock):
    repo.seed(Identity(phone=PHONE, sms_confirmed_at=clock()))

    identity = await request_confirmation(
        uow, sms, {"phone": PHONE}, config, clock=clock
    )

    assert identity.errors == {"sms_confirmation_token": ["already_confirmed"]}
    assert sms.calls == []


@pytest.mark.asyncio
async def test_request_confirmation_delivery_failure_keeps_token(
    uow, repo, sms_down, config, clock
):
    seeded = repo.seed(Identity(phone=PHONE))

    with pytest.raises(SmsDeliveryError):
        await request_confirmation(
            uow, sms_down, {"phone": PHONE}, config, clock=clock
        )

    assert repo.get(seeded.id).sms_confirmation_token == "TK001"
    assert uow.committed is True
