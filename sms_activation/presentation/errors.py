import logging

from fastapi import HTTPException, status

from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import ErrorKind, SmsDeliveryError

logger = logging.getLogger(__name__)

# First kind present wins; anything unlisted is a 422.
_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_CONFIRMED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PERIOD_EXPIRED: status.HTTP_400_BAD_REQUEST,
}


def status_for(identity: Identity) -> int:
    for kind, code in _STATUS_BY_KIND.items():
        if identity.has_error(kind):
            return code
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def raise_for_field_errors(identity: Identity) -> None:
    """Turn field-level errors on an identity into an HTTP error response."""
    if not identity.errors:
        return
    raise HTTPException(
        status_code=status_for(identity), detail={"errors": identity.errors}
    )


def sms_delivery_failed(exc: SmsDeliveryError) -> HTTPException:
    logger.warning("sms delivery failed", extra={"error": str(exc)})
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY, detail="sms delivery failed"
    )
