from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class AcceptedOut(BaseModel):
    status: Literal["accepted"] = "accepted"


class OkOut(BaseModel):
    status: Literal["ok"] = "ok"


class IdentityOut(BaseModel):
    id: str = Field(..., description="The id of the identity")
    phone: str | None = Field(None, description="Current, confirmed phone")
    unconfirmed_phone: str | None = Field(None, description="Phone awaiting reconfirmation")
    state: str
    confirmed: bool
    active: bool
    reconfirmation_pending: bool
    confirmation_sms_sent_at: datetime | None = None
    sms_confirmed_at: datetime | None = None
    inactive_message: str | None = None
