class ErrorKind:
    """Field-level error codes attached to an Identity by failed operations."""

    NOT_FOUND = "not_found"
    NO_PHONE_ASSOCIATED = "no_phone_associated"
    ALREADY_CONFIRMED = "already_confirmed"
    PERIOD_EXPIRED = "confirmation_period_expired"
    VALIDATION_FAILED = "validation_failed"


class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class IdentityNotFound(DomainError):
    """No identity matches the lookup criteria (e.g., id)."""

    pass


class PhoneAlreadyTaken(DomainError):
    """The store refused a save because another identity owns the phone."""

    pass


class TokenAlreadyTaken(DomainError):
    """The store refused a save because the confirmation token is in use."""

    pass


class TokenSpaceExhausted(DomainError):
    """No free confirmation token was found within the attempt budget."""

    pass


class SmsDeliveryError(DomainError):
    """The SMS transport failed to accept a message."""

    pass
