import itertools
from datetime import timedelta

import pytest

from sms_activation.application.sms_confirmation import SmsConfirmation
from sms_activation.domain.config import ConfirmationConfig
from tests.fakes import FakeSms, FakeSmsDown, FakeUoW, FrozenClock


@pytest.fixture()
def uow():
    return FakeUoW()


@pytest.fixture()
def repo(uow):
    return uow.identities


@pytest.fixture()
def sms():
    return FakeSms()


@pytest.fixture()
def sms_down():
    return FakeSmsDown()


@pytest.fixture()
def clock():
    return FrozenClock()


@pytest.fixture()
def config():
    return ConfirmationConfig(confirm_within=timedelta(days=3))


@pytest.fixture()
def confirmation(repo, sms, config, clock):
    return SmsConfirmation(repo, sms, config, clock=clock)


@pytest.fixture(autouse=True)
def patch_token(monkeypatch):
    """
    Make tokens deterministic in all tests: TK001, TK002, ...
    You can override in a specific test by re-monkeypatching.
    """
    from sms_activation.domain import services as domain_services

    counter = itertools.count(1)
    monkeypatch.setattr(
        domain_services,
        "generate_small_token",
        lambda length=5: f"TK{next(counter):03d}",
    )
    yield
