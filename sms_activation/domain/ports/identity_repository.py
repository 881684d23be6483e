from __future__ import annotations

from typing import Mapping, Optional, Protocol

from sms_activation.domain.entities import Identity


class IdentityRepositoryPort(Protocol):
    async def find_by_unique_field(
        self, field: str, value: str, *, for_update: bool = False
    ) -> Optional[Identity]:
        """
        Fetch the identity whose `field` equals `value`.
        With for_update=True the row stays locked until the transaction ends.
        Return None if not found.
        """

    async def find_first(
        self, conditions: Mapping[str, str], *, for_update: bool = False
    ) -> Optional[Identity]:
        """Fetch the first identity matching every field/value pair."""

    async def exists_with_value(self, field: str, value: str) -> bool:
        """Uniqueness probe used when picking a new confirmation token."""

    async def save(
        self, identity: Identity, *, validate_phone_uniqueness: bool = False
    ) -> None:
        """
        Insert (id is None, assigns id) or update the identity.

        Raises PhoneAlreadyTaken when validate_phone_uniqueness is set and
        another identity owns the phone, and TokenAlreadyTaken when the
        confirmation token collides with an outstanding one.
        """
