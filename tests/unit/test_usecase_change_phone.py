import pytest

from sms_activation.application.change_phone import change_phone
from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import IdentityNotFound

PHONE = "+33600000001"
NEW_PHONE = "+33600000002"


@pytest.fixture()
def confirmed(repo, clock):
    return repo.seed(Identity(phone=PHONE, sms_confirmed_at=clock()))


@pytest.mark.asyncio
async def test_change_phone_parks_new_number(uow, repo, sms, config, clock, confirmed):
    identity = await change_phone(
        uow, sms, confirmed.id, f" {NEW_PHONE} ", config, clock=clock
    )

    assert identity.phone == PHONE
    assert identity.unconfirmed_phone == NEW_PHONE
    assert identity.sms_confirmation_token == "TK001"
    assert sms.calls == [(NEW_PHONE, "TK001")]

    stored = repo.get(confirmed.id)
    assert stored.phone == PHONE
    assert stored.unconfirmed_phone == NEW_PHONE
    assert repo.lookups == [{"id": confirmed.id}]
    assert uow.committed is True


@pytest.mark.asyncio
async def test_change_phone_unknown_identity(uow, sms, config, clock):
    with pytest.raises(IdentityNotFound):
        await change_phone(uow, sms, "id-404", NEW_PHONE, config, clock=clock)

    assert uow.committed is False
    assert uow.rolled_back is True


@pytest.mark.asyncio
async def test_change_phone_skip_reconfirmation(uow, repo, sms, config, clock, confirmed):
    identity = await change_phone(
        uow, sms, confirmed.id, NEW_PHONE, config,
        skip_reconfirmation=True, clock=clock,
    )

    assert identity.phone == NEW_PHONE
    assert identity.unconfirmed_phone is None
    assert repo.get(confirmed.id).phone == NEW_PHONE
    assert sms.calls == []


@pytest.mark.asyncio
async def test_change_phone_skip_notification(uow, repo, sms, config, clock, confirmed):
    identity = await change_phone(
        uow, sms, confirmed.id, NEW_PHONE, config,
        skip_notification=True, clock=clock,
    )

    assert identity.unconfirmed_phone == NEW_PHONE
    assert repo.get(confirmed.id).sms_confirmation_token == "TK001"
    assert sms.calls == []


@pytest.mark.asyncio
async def test_change_phone_to_a_taken_number_without_reconfirmation(
    uow, repo, sms, config, clock, confirmed
):
    repo.seed(Identity(phone=NEW_PHONE))

    identity = await change_phone(
        uow, sms, confirmed.id, NEW_PHONE, config,
        skip_reconfirmation=True, clock=clock,
    )

    assert identity.errors == {"phone": ["validation_failed"]}
    assert repo.get(confirmed.id).phone == PHONE
    assert uow.rolled_back is True
    assert uow.committed is False
