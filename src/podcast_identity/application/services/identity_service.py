"""Application identity service for accounts, login, and profile edits."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from dataclasses import dataclass, replace
from enum import StrEnum
from functools import partial
from uuid import UUID

from podcast_identity.application.ports.password_hasher_port import PasswordHasherPort
from podcast_identity.application.ports.token_issuer_port import (
    InvalidTokenError,
    TokenIssuerPort,
)
from podcast_identity.application.ports.user_repository_port import (
    DuplicateEmailError,
    UserRecord,
    UserRepositoryPort,
)
from podcast_identity.domain.auth.credentials import (
    canonical_email,
    normalize_user_email,
    require_user_password,
)
from podcast_identity.domain.auth.roles import Role

logger = logging.getLogger(__name__)


class IdentityError(StrEnum):
    """Failure kinds returned by identity operations."""

    ACCOUNT_EXISTS = "account_exists"
    USER_NOT_FOUND = "user_not_found"
    WRONG_CREDENTIALS = "wrong_credentials"
    UPDATE_FAILED = "update_failed"
    INTERNAL_ERROR = "internal_error"
    INVALID_INPUT = "invalid_input"

    @property
    def message(self) -> str:
        """Caller-facing message for this failure kind."""

        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    IdentityError.ACCOUNT_EXISTS: "There is a user with that email already",
    IdentityError.USER_NOT_FOUND: "User not found",
    IdentityError.WRONG_CREDENTIALS: "Wrong password",
    IdentityError.UPDATE_FAILED: "Could not update profile",
    IdentityError.INTERNAL_ERROR: "Could not complete request",
    IdentityError.INVALID_INPUT: "Email cannot be blank and password must be 1 to 72 bytes",
}


@dataclass(frozen=True)
class _IdentityResult:
    error: IdentityError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return None if self.error is None else self.error.message


@dataclass(frozen=True)
class CreateAccountResult(_IdentityResult):
    """Outcome of one account registration."""

    user_id: UUID | None = None

    @property
    def message(self) -> str | None:
        if self.error is IdentityError.INTERNAL_ERROR:
            return "Could not create account"
        return super().message


@dataclass(frozen=True)
class LoginResult(_IdentityResult):
    """Outcome of one credential check; `cause` keeps unexpected faults."""

    token: str | None = None
    cause: BaseException | None = None


@dataclass(frozen=True)
class UserLookupResult(_IdentityResult):
    """Outcome of one user lookup."""

    user: UserRecord | None = None


@dataclass(frozen=True)
class EditProfileResult(_IdentityResult):
    """Outcome of one profile edit."""


@dataclass(frozen=True)
class ProfileChanges:
    """Partial profile input; `None` leaves the stored field untouched."""

    email: str | None = None
    password: str | None = None


class IdentityService:
    """Orchestrate registration, login, lookup, and profile edits.

    The service holds no mutable state. Email uniqueness is finally enforced by
    the repository; the lookup before insert only short-circuits the common
    case. Password hashing runs on `hashing_executor` so bcrypt work does not
    block the event loop; `None` selects the loop's default executor.
    """

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
        token_issuer: TokenIssuerPort,
        hashing_executor: Executor | None = None,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._token_issuer = token_issuer
        self._hashing_executor = hashing_executor

    async def create_account(
        self,
        *,
        email: str,
        password: str,
        role: Role,
    ) -> CreateAccountResult:
        """Register a new account; no token is issued here."""

        try:
            normalized_email = normalize_user_email(email=email)
            require_user_password(password=password)
        except ValueError:
            return CreateAccountResult(error=IdentityError.INVALID_INPUT)

        try:
            existing = await self._users.find_by_email(email=normalized_email)
        except Exception:
            logger.exception("create_account_lookup_failed")
            return CreateAccountResult(error=IdentityError.INTERNAL_ERROR)
        if existing is not None:
            logger.info("create_account_rejected_existing user_id=%s", existing.user_id)
            return CreateAccountResult(error=IdentityError.ACCOUNT_EXISTS)

        try:
            password_hash = await self._hash_password(password)
            draft = self._users.create(
                email=normalized_email,
                password_hash=password_hash,
                role=role,
            )
            persisted = await self._users.save(draft)
        except DuplicateEmailError:
            logger.info("create_account_lost_uniqueness_race")
            return CreateAccountResult(error=IdentityError.ACCOUNT_EXISTS)
        except Exception:
            logger.exception("create_account_persist_failed")
            return CreateAccountResult(error=IdentityError.INTERNAL_ERROR)

        logger.info("account_created user_id=%s role=%s", persisted.user_id, role)
        return CreateAccountResult(user_id=persisted.user_id)

    async def login(self, *, email: str, password: str) -> LoginResult:
        """Verify credentials and issue a bearer token on success."""

        try:
            user = await self._users.find_by_email(email=canonical_email(email))
            if user is None:
                return LoginResult(error=IdentityError.USER_NOT_FOUND)

            is_valid = await self._verify_password(password, user.password_hash)
            if not is_valid:
                logger.info("login_failed user_id=%s reason=wrong_credentials", user.user_id)
                return LoginResult(error=IdentityError.WRONG_CREDENTIALS)

            if user.user_id is None:  # pragma: no cover - persisted rows always carry ids.
                raise ValueError("persisted user record has no id")
            token = self._token_issuer.sign(user_id=user.user_id)
        except Exception as exc:
            logger.exception("login_failed reason=internal_error")
            return LoginResult(error=IdentityError.INTERNAL_ERROR, cause=exc)

        logger.info("login_success user_id=%s", user.user_id)
        return LoginResult(token=token)

    async def find_by_id(self, *, user_id: UUID) -> UserLookupResult:
        """Return one user; absence and lookup faults both read as not found."""

        try:
            user = await self._users.find_by_id(user_id=user_id)
        except Exception:
            logger.warning("find_by_id_failed user_id=%s", user_id, exc_info=True)
            return UserLookupResult(error=IdentityError.USER_NOT_FOUND)
        if user is None:
            return UserLookupResult(error=IdentityError.USER_NOT_FOUND)
        return UserLookupResult(user=user)

    async def edit_profile(self, *, user_id: UUID, changes: ProfileChanges) -> EditProfileResult:
        """Apply supplied email/password changes, hashing only a new password."""

        try:
            changes = _normalize_changes(changes)
        except ValueError:
            logger.info("edit_profile_rejected_input user_id=%s", user_id)
            return EditProfileResult(error=IdentityError.UPDATE_FAILED)

        try:
            current = await self._users.find_by_id(user_id=user_id)
        except Exception:
            logger.exception("edit_profile_load_failed user_id=%s", user_id)
            return EditProfileResult(error=IdentityError.UPDATE_FAILED)
        if current is None:
            logger.info("edit_profile_user_missing user_id=%s", user_id)
            return EditProfileResult(error=IdentityError.UPDATE_FAILED)

        try:
            merged = await self._merge_profile(current, changes)
            await self._users.save(merged)
        except DuplicateEmailError:
            logger.info("edit_profile_email_taken user_id=%s", user_id)
            return EditProfileResult(error=IdentityError.UPDATE_FAILED)
        except Exception:
            logger.exception("edit_profile_save_failed user_id=%s", user_id)
            return EditProfileResult(error=IdentityError.UPDATE_FAILED)

        logger.info(
            "profile_updated user_id=%s email_changed=%s password_changed=%s",
            user_id,
            changes.email is not None,
            changes.password is not None,
        )
        return EditProfileResult()

    async def authenticate_token(self, *, token: str) -> UserLookupResult:
        """Resolve a bearer token to its persisted user."""

        try:
            user_id = self._token_issuer.verify(token)
        except InvalidTokenError as exc:
            logger.info("token_rejected reason=%s", exc.reason)
            return UserLookupResult(error=IdentityError.USER_NOT_FOUND)
        return await self.find_by_id(user_id=user_id)

    async def _merge_profile(self, current: UserRecord, changes: ProfileChanges) -> UserRecord:
        merged = current
        if changes.email is not None:
            merged = replace(merged, email=changes.email)
        if changes.password is not None:
            merged = replace(merged, password_hash=await self._hash_password(changes.password))
        return merged

    async def _hash_password(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._hashing_executor,
            self._password_hasher.hash_password,
            password,
        )

    async def _verify_password(self, password: str, password_hash: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._hashing_executor,
            partial(
                self._password_hasher.verify_password,
                password=password,
                password_hash=password_hash,
            ),
        )


def _normalize_changes(changes: ProfileChanges) -> ProfileChanges:
    """Return changes with a normalized email; reject blank or over-long supplied values."""

    email = changes.email
    if email is not None:
        email = normalize_user_email(email=email)
    if changes.password is not None:
        require_user_password(password=changes.password)
    return ProfileChanges(email=email, password=changes.password)
