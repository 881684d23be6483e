import pytest
from fastapi import HTTPException

from sms_activation.domain.entities import Identity
from sms_activation.presentation.errors import raise_for_field_errors, status_for


def _with_errors(**errors) -> Identity:
    identity = Identity()
    for field_name, kinds in errors.items():
        for kind in kinds:
            identity.add_error(field_name, kind)
    return identity


def test_no_errors_does_not_raise():
    raise_for_field_errors(Identity())


def test_not_found_wins_over_later_kinds():
    identity = _with_errors(
        phone=["not_found"], sms_confirmation_token=["already_confirmed"]
    )
    assert status_for(identity) == 404


def test_priority_does_not_depend_on_field_order():
    identity = _with_errors(
        sms_confirmation_token=["already_confirmed"], phone=["not_found"]
    )
    assert status_for(identity) == 404


def test_unmapped_kinds_are_unprocessable():
    identity = _with_errors(phone=["validation_failed"])

    with pytest.raises(HTTPException) as ei:
        raise_for_field_errors(identity)

    assert ei.value.status_code == 422
    assert ei.value.detail == {"errors": {"phone": ["validation_failed"]}}


def test_expired_period_is_bad_request():
    identity = _with_errors(phone=["validation_failed", "confirmation_period_expired"])
    assert status_for(identity) == 400
