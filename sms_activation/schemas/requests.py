from pydantic import BaseModel, Field


class IdentityCreateIn(BaseModel):
    phone: str = Field(..., description="Phone number to confirm", min_length=3, max_length=32)
    skip_confirmation: bool = Field(False, description="Mark confirmed right away")
    skip_notification: bool = Field(False, description="Issue the token but send no SMS")


class PhoneChangeIn(BaseModel):
    phone: str = Field(..., description="New phone number", max_length=32)
    skip_reconfirmation: bool = Field(
        False, description="Apply the new phone without reconfirming it"
    )
    skip_notification: bool = Field(False, description="Send no SMS for this change")


class ConfirmationRequestIn(BaseModel):
    """Lookup attributes, keyed by the configured confirmation keys."""

    attributes: dict[str, str] = Field(..., description="e.g. {'phone': '+33...'}")


class ConfirmTokenIn(BaseModel):
    token: str = Field(..., min_length=1, max_length=16)
