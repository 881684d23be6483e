from fastapi import Request

from sms_activation.domain.config import ConfirmationConfig
from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.domain.ports.unit_of_work import UnitOfWorkPort
from sms_activation.infrastructure.db.pool import get_pool
from sms_activation.infrastructure.db.uow import PgUnitOfWork
from sms_activation.settings import get_settings


def get_uow() -> UnitOfWorkPort:
    return PgUnitOfWork(get_pool())


def get_confirmation_config() -> ConfirmationConfig:
    return get_settings().confirmation_config()


def get_sms_port(request: Request) -> SmsPort:
    # This is set in sms_activation.main lifespan()
    return request.app.state.sms_adapter
