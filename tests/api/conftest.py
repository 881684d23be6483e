from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from sms_activation.domain.config import ConfirmationConfig
from sms_activation.main import create_app
from sms_activation.presentation.dependencies import (
    get_confirmation_config,
    get_sms_port,
    get_uow,
)
from tests.fakes import FakeSms, FakeUoW


@pytest.fixture()
def app_and_deps():
    app = create_app()
    uow = FakeUoW()
    sms = FakeSms()
    config = ConfirmationConfig(confirm_within=timedelta(days=3))

    def _get_uow():
        return uow

    def _get_sms():
        return sms

    def _get_config():
        return config

    app.dependency_overrides[get_uow] = _get_uow
    app.dependency_overrides[get_sms_port] = _get_sms
    app.dependency_overrides[get_confirmation_config] = _get_config

    try:
        yield app, uow, sms
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)
