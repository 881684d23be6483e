from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ConfirmationState(str, Enum):
    UNCONFIRMED = "unconfirmed"
    TOKEN_PENDING = "token_pending"
    TOKEN_EXPIRED = "token_expired"
    CONFIRMED = "confirmed"
    RECONFIRMATION_PENDING = "reconfirmation_pending"


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass
class Identity:
    id: str | None = None
    phone: str | None = None
    unconfirmed_phone: str | None = None
    sms_confirmation_token: str | None = None
    confirmation_sms_sent_at: datetime | None = None
    sms_confirmed_at: datetime | None = None
    errors: dict[str, list[str]] = field(default_factory=dict)
    _phone_was: str | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.phone is not None:
            self.phone = self.phone.strip()
        if self.unconfirmed_phone is not None:
            self.unconfirmed_phone = self.unconfirmed_phone.strip() or None
        # a row loaded from the store starts clean
        if self.id is not None:
            self._phone_was = self.phone

    @property
    def persisted(self) -> bool:
        return self.id is not None

    @property
    def phone_was(self) -> str | None:
        return self._phone_was

    @property
    def phone_changed(self) -> bool:
        return self.persisted and self.phone != self._phone_was

    def mark_persisted(self) -> None:
        """Called once the current field values have been written."""
        self._phone_was = self.phone

    def add_error(self, field_name: str, kind: str) -> None:
        self.errors.setdefault(field_name, []).append(kind)

    def has_error(self, kind: str) -> bool:
        return any(kind in kinds for kinds in self.errors.values())
