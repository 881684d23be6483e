from __future__ import annotations

import uuid
from typing import Mapping, Optional

import psycopg
from psycopg import sql
from psycopg.errors import UniqueViolation

from sms_activation.domain.entities import Identity
from sms_activation.domain.errors import PhoneAlreadyTaken, TokenAlreadyTaken
from sms_activation.domain.ports.identity_repository import IdentityRepositoryPort

_COLUMNS = (
    "id",
    "phone",
    "unconfirmed_phone",
    "sms_confirmation_token",
    "confirmation_sms_sent_at",
    "sms_confirmed_at",
)
_LOOKUP_COLUMNS = frozenset(_COLUMNS[:4])

TOKEN_CONSTRAINT = "identities_sms_confirmation_token_key"
PHONE_CONSTRAINT = "identities_phone_key"


def _row_to_identity(row: tuple) -> Identity:
    id_, phone, unconfirmed_phone, token, sent_at, confirmed_at = row
    return Identity(
        id=str(id_),
        phone=phone,
        unconfirmed_phone=unconfirmed_phone,
        sms_confirmation_token=token,
        confirmation_sms_sent_at=sent_at,
        sms_confirmed_at=confirmed_at,
    )


def _valid_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class PgIdentityRepository(IdentityRepositoryPort):
    """
    Postgres implementation of IdentityRepositoryPort.

    NOTE:
    - Constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    - Writes run inside a savepoint so a unique violation leaves the outer
      transaction usable for a retry.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def find_by_unique_field(
        self, field: str, value: str, *, for_update: bool = False
    ) -> Optional[Identity]:
        return await self.find_first({field: value}, for_update=for_update)

    async def find_first(
        self, conditions: Mapping[str, str], *, for_update: bool = False
    ) -> Optional[Identity]:
        if not conditions:
            return None
        unknown = set(conditions) - _LOOKUP_COLUMNS
        if unknown:
            raise ValueError(f"cannot look identities up by {sorted(unknown)}")
        if "id" in conditions and not _valid_uuid(conditions["id"]):
            return None

        query = sql.SQL(
            "SELECT {columns} FROM identities WHERE {where} LIMIT 1{lock}"
        ).format(
            columns=sql.SQL(", ").join(map(sql.Identifier, _COLUMNS)),
            where=sql.SQL(" AND ").join(
                sql.SQL("{} = %s").format(sql.Identifier(name))
                for name in conditions
            ),
            lock=sql.SQL(" FOR UPDATE" if for_update else ""),
        )
        async with self._conn.cursor() as cur:
            await cur.execute(query, tuple(conditions.values()))
            row = await cur.fetchone()
        return _row_to_identity(row) if row else None

    async def exists_with_value(self, field: str, value: str) -> bool:
        if field not in _LOOKUP_COLUMNS:
            raise ValueError(f"cannot probe identities by {field!r}")
        query = sql.SQL("SELECT 1 FROM identities WHERE {} = %s LIMIT 1").format(
            sql.Identifier(field)
        )
        async with self._conn.cursor() as cur:
            await cur.execute(query, (value,))
            return await cur.fetchone() is not None

    async def save(
        self, identity: Identity, *, validate_phone_uniqueness: bool = False
    ) -> None:
        try:
            async with self._conn.transaction():
                if validate_phone_uniqueness and identity.phone:
                    await self._check_phone_unique(identity)
                if identity.persisted:
                    await self._update(identity)
                else:
                    await self._insert(identity)
        except UniqueViolation as e:
            constraint = e.diag.constraint_name
            if constraint == TOKEN_CONSTRAINT:
                raise TokenAlreadyTaken(identity.sms_confirmation_token) from e
            if constraint == PHONE_CONSTRAINT:
                raise PhoneAlreadyTaken(identity.phone) from e
            raise

    async def _check_phone_unique(self, identity: Identity) -> None:
        sql_text = """
        SELECT 1 FROM identities
        WHERE phone = %s AND (%s::uuid IS NULL OR id <> %s::uuid)
        LIMIT 1
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql_text, (identity.phone, identity.id, identity.id))
            if await cur.fetchone() is not None:
                raise PhoneAlreadyTaken(identity.phone)

    async def _insert(self, identity: Identity) -> None:
        sql_text = """
        INSERT INTO identities (
            phone, unconfirmed_phone, sms_confirmation_token,
            confirmation_sms_sent_at, sms_confirmed_at
        )
        VALUES (%s, %s, %s, %s, %s)
        RETURNING id
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                sql_text,
                (
                    identity.phone,
                    identity.unconfirmed_phone,
                    identity.sms_confirmation_token,
                    identity.confirmation_sms_sent_at,
                    identity.sms_confirmed_at,
                ),
            )
            row = await cur.fetchone()
        identity.id = str(row[0])

    async def _update(self, identity: Identity) -> None:
        sql_text = """
        UPDATE identities
        SET phone = %s,
            unconfirmed_phone = %s,
            sms_confirmation_token = %s,
            confirmation_sms_sent_at = %s,
            sms_confirmed_at = %s,
            updated_at = now()
        WHERE id = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                sql_text,
                (
                    identity.phone,
                    identity.unconfirmed_phone,
                    identity.sms_confirmation_token,
                    identity.confirmation_sms_sent_at,
                    identity.sms_confirmed_at,
                    identity.id,
                ),
            )
