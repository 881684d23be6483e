from datetime import datetime, timedelta, timezone
from typing import Mapping

from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import (
    PhoneAlreadyTaken,
    SmsDeliveryError,
    TokenAlreadyTaken,
)


def _copy(identity: Identity) -> Identity:
    return Identity(
        id=identity.id,
        phone=identity.phone,
        unconfirmed_phone=identity.unconfirmed_phone,
        sms_confirmation_token=identity.sms_confirmation_token,
        confirmation_sms_sent_at=identity.confirmation_sms_sent_at,
        sms_confirmed_at=identity.sms_confirmed_at,
    )


class FakeIdentityRepo:
    """In-memory store. Loads hand out fresh copies, like rows from a DB."""

    def __init__(self):
        self.rows: dict[str, Identity] = {}
        self.saves: list[tuple[str, bool]] = []
        self.lookups: list[dict] = []
        # reported as existing by the uniqueness probe
        self.taken_tokens: set[str] = set()
        # each value is refused once by save(), as a unique index would
        self.reject_tokens_on_save: set[str] = set()
        self._next_id = 0

    def seed(self, identity: Identity) -> Identity:
        self._next_id += 1
        identity.id = identity.id or f"id-{self._next_id}"
        self.rows[identity.id] = _copy(identity)
        return _copy(identity)

    def get(self, identity_id: str) -> Identity:
        return _copy(self.rows[identity_id])

    async def find_by_unique_field(self, field: str, value: str, *, for_update=False):
        return await self.find_first({field: value}, for_update=for_update)

    async def find_first(self, conditions: Mapping[str, str], *, for_update=False):
        self.lookups.append(dict(conditions))
        for row in self.rows.values():
            if all(getattr(row, k) == v for k, v in conditions.items()):
                return _copy(row)
        return None

    async def exists_with_value(self, field: str, value: str) -> bool:
        if field == "sms_confirmation_token" and value in self.taken_tokens:
            return True
        return any(getattr(row, field) == value for row in self.rows.values())

    async def save(self, identity: Identity, *, validate_phone_uniqueness=False):
        token = identity.sms_confirmation_token
        if token in self.reject_tokens_on_save:
            self.reject_tokens_on_save.discard(token)
            raise TokenAlreadyTaken(token)
        others = [r for r in self.rows.values() if r.id != identity.id]
        if token and any(r.sms_confirmation_token == token for r in others):
            raise TokenAlreadyTaken(token)
        if validate_phone_uniqueness and identity.phone:
            if any(r.phone == identity.phone for r in others):
                raise PhoneAlreadyTaken(identity.phone)

        if identity.id is None:
            self._next_id += 1
            identity.id = f"id-{self._next_id}"
        self.rows[identity.id] = _copy(identity)
        self.saves.append((identity.id, validate_phone_uniqueness))


class FakeUoW:
    def __init__(self, identities: FakeIdentityRepo | None = None):
        self.identities = identities or FakeIdentityRepo()
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc and not self.committed:
            self.rolled_back = True

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


class FakeSms:
    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    async def send(self, *, to: str, body: str) -> None:
        self.calls.append((to, body))


class FakeSmsDown(FakeSms):
    async def send(self, *, to: str, body: str) -> None:
        self.calls.append((to, body))
        raise SmsDeliveryError("gateway down")


class FrozenClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)
