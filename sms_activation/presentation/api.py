from fastapi import APIRouter

from sms_activation.presentation.routers.v1.identities import router as identities_router
from sms_activation.presentation.routers.v1.sms_confirmations import (
    router as sms_confirmations_router,
)
from sms_activation.presentation.routes.health import router as health_router

api = APIRouter()

# Add all v1 routers here
routers = (identities_router, sms_confirmations_router)
for router in routers:
    api.include_router(router, prefix="/v1")

api.include_router(health_router)
