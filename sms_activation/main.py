from contextlib import asynccontextmanager
from fastapi import FastAPI

from sms_activation.infrastructure.db.pool import close_pool, open_pool
from sms_activation.infrastructure.sms.factory import build_sms_adapter
from sms_activation.logging import setup_logging
from sms_activation.presentation.api import api
from sms_activation.settings import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    await open_pool()

    # one shared SMS adapter for every request
    sms_adapter = build_sms_adapter(
        settings.sms_backend,
        base_url=settings.sms_base_url,
        sender=settings.sms_sender,
    )
    app.state.sms_adapter = sms_adapter

    try:
        yield
    finally:
        # shutdown
        await sms_adapter.aclose()
        await close_pool()


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    app = FastAPI(title="SMS Activation API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(api)
    return app


app = create_app()
