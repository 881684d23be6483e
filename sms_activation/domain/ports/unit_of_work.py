from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Protocol, Type

from sms_activation.domain.ports.identity_repository import IdentityRepositoryPort


@dataclass
class UnitOfWorkPort(Protocol):
    """
    Transaction boundary.

    Usage:
        async with uow as tx:
            identity = await tx.identities.find_by_unique_field(
                "sms_confirmation_token", token, for_update=True
            )
            ...
            await tx.commit()
    """

    identities: IdentityRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort":
        """Begin a new transaction."""

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """End the transaction, rolling back anything not committed."""

    async def commit(self) -> None:
        """Commit the transaction."""

    async def rollback(self) -> None:
        """Rollback the transaction."""
