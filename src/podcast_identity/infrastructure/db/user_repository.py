"""SQLAlchemy adapter for user persistence."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import cast
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from podcast_identity.application.ports.user_repository_port import (
    DuplicateEmailError,
    UserRecord,
    UserRecordMissingError,
    UserRepositoryPort,
)
from podcast_identity.domain.auth.roles import Role
from podcast_identity.infrastructure.db.metadata import users

logger = logging.getLogger(__name__)


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email or None."""

        statement = sa.select(*users.c).where(users.c.email == email).limit(1)
        return await self._fetch_one(statement)

    async def find_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id or None."""

        statement = sa.select(*users.c).where(users.c.id == user_id).limit(1)
        return await self._fetch_one(statement)

    def create(self, *, email: str, password_hash: str, role: Role) -> UserRecord:
        """Build an unsaved draft; ids are assigned on insert."""

        return UserRecord(email=email, password_hash=password_hash, role=role)

    async def save(self, record: UserRecord) -> UserRecord:
        """Insert drafts and update email/password hash of persisted records."""

        if record.user_id is None:
            return await self._insert(record)
        return await self._update(record, user_id=record.user_id)

    async def _insert(self, record: UserRecord) -> UserRecord:
        statement = sa.insert(users).values(
            id=uuid4(),
            email=record.email,
            password_hash=record.password_hash,
            role=record.role.value,
        ).returning(*users.c)

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().one()
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateEmailError(email=record.email) from exc

        persisted = _to_user_record(row)
        logger.info("user_inserted user_id=%s role=%s", persisted.user_id, persisted.role)
        return persisted

    async def _update(self, record: UserRecord, *, user_id: UUID) -> UserRecord:
        statement = (
            sa.update(users)
            .where(users.c.id == user_id)
            .values(
                email=record.email,
                password_hash=record.password_hash,
                updated_at=sa.text("CURRENT_TIMESTAMP"),
            )
            .returning(*users.c)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().first()
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateEmailError(email=record.email) from exc

        if row is None:
            raise UserRecordMissingError(user_id=user_id)
        return _to_user_record(row)

    async def _fetch_one(self, statement: sa.Select[tuple[object, ...]]) -> UserRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        role=Role(cast(str, row["role"])),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )
