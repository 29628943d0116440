"""Port for user persistence operations used by the identity service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID

from podcast_identity.domain.auth.roles import Role


class DuplicateEmailError(ValueError):
    """Raised when storage rejects a write because the email is already taken."""

    def __init__(self, *, email: str) -> None:
        super().__init__("email already registered")
        self.email = email


class UserRecordMissingError(LookupError):
    """Raised when an update targets a user row that no longer exists."""

    def __init__(self, *, user_id: UUID) -> None:
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


@dataclass(frozen=True)
class UserRecord:
    """User persistence model; drafts carry no id or timestamps."""

    email: str
    password_hash: str = field(repr=False)
    role: Role
    user_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def find_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email or None."""

    async def find_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id or None."""

    def create(self, *, email: str, password_hash: str, role: Role) -> UserRecord:
        """Build an unsaved user draft."""

    async def save(self, record: UserRecord) -> UserRecord:
        """Insert a draft or update a persisted record and return the stored row."""
