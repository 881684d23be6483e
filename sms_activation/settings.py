from datetime import timedelta
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from sms_activation.domain.config import ConfirmationConfig


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    sms_backend: str = "http"
    sms_base_url: str = "http://sms-mock:8026"
    sms_sender: str = "SmsActivation"

    # Confirmation policy
    sms_confirm_within_seconds: int = 0
    sms_confirmation_keys: list[str] = ["phone"]
    sms_confirmation_required: bool = True
    sms_token_max_attempts: int = 10
    sms_body_template: str = "Your confirmation code is {token}"
    unconfirmed_sms_message: str = (
        "You have to confirm your phone number before continuing."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    def confirmation_config(self) -> ConfirmationConfig:
        return ConfirmationConfig(
            confirm_within=timedelta(seconds=self.sms_confirm_within_seconds),
            confirmation_keys=tuple(self.sms_confirmation_keys),
            required=self.sms_confirmation_required,
            max_token_attempts=self.sms_token_max_attempts,
            sms_body=self.sms_body_template,
            unconfirmed_message=self.unconfirmed_sms_message,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
