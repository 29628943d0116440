from __future__ import annotations

import threading
from uuid import UUID, uuid4

import pytest
from jose import jwt

from podcast_identity.application.ports.user_repository_port import UserRecord
from podcast_identity.application.services.identity_service import IdentityService
from podcast_identity.config.settings import Settings
from podcast_identity.domain.auth.roles import Role
from podcast_identity.infrastructure.runtime import build_identity_runtime, build_token_issuer


def _settings(monkeypatch: pytest.MonkeyPatch, **extra: str) -> Settings:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("TOKEN_SECRET_KEY", "runtime-secret")
    monkeypatch.delenv("TOKEN_LIFETIME_SECONDS", raising=False)
    monkeypatch.delenv("TOKEN_ALGORITHM", raising=False)
    for key, value in extra.items():
        monkeypatch.setenv(key, value)
    return Settings(_env_file=None)


def test_token_issuer_without_lifetime_omits_expiry(monkeypatch: pytest.MonkeyPatch) -> None:
    issuer = build_token_issuer(_settings(monkeypatch))

    claims = jwt.get_unverified_claims(issuer.sign(user_id=uuid4()))

    assert "exp" not in claims


def test_token_issuer_uses_configured_lifetime_and_algorithm(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    issuer = build_token_issuer(
        _settings(monkeypatch, TOKEN_LIFETIME_SECONDS="60", TOKEN_ALGORITHM="HS512")
    )

    token = issuer.sign(user_id=uuid4())
    claims = jwt.get_unverified_claims(token)

    assert jwt.get_unverified_header(token)["alg"] == "HS512"
    assert claims["exp"] - claims["iat"] == 60


@pytest.mark.asyncio
async def test_runtime_bounds_hashing_pool_and_closes(monkeypatch: pytest.MonkeyPatch) -> None:
    runtime = build_identity_runtime(_settings(monkeypatch, PASSWORD_HASH_WORKERS="3"))

    assert runtime.hashing_executor._max_workers == 3

    await runtime.aclose()
    with pytest.raises(RuntimeError):
        runtime.hashing_executor.submit(lambda: None)


class _ThreadRecordingHasher:
    def __init__(self) -> None:
        self.thread_names: list[str] = []

    def hash_password(self, password: str) -> str:
        self.thread_names.append(threading.current_thread().name)
        return f"hashed::{password}"

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        self.thread_names.append(threading.current_thread().name)
        return password_hash == f"hashed::{password}"


class _SingleUserRepository:
    def __init__(self) -> None:
        self.user: UserRecord | None = None

    async def find_by_email(self, *, email: str) -> UserRecord | None:
        if self.user is not None and self.user.email == email:
            return self.user
        return None

    async def find_by_id(self, *, user_id: UUID) -> UserRecord | None:
        if self.user is not None and self.user.user_id == user_id:
            return self.user
        return None

    def create(self, *, email: str, password_hash: str, role: Role) -> UserRecord:
        return UserRecord(email=email, password_hash=password_hash, role=role)

    async def save(self, record: UserRecord) -> UserRecord:
        self.user = UserRecord(
            email=record.email,
            password_hash=record.password_hash,
            role=record.role,
            user_id=record.user_id or uuid4(),
        )
        return self.user


@pytest.mark.asyncio
async def test_hashing_and_verification_run_on_runtime_pool(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    runtime = build_identity_runtime(_settings(monkeypatch, PASSWORD_HASH_WORKERS="2"))
    hasher = _ThreadRecordingHasher()
    service = IdentityService(
        users=_SingleUserRepository(),
        password_hasher=hasher,
        token_issuer=runtime.token_issuer,
        hashing_executor=runtime.hashing_executor,
    )

    try:
        created = await service.create_account(email="a@b.com", password="pw1", role=Role.CLIENT)
        logged_in = await service.login(email="a@b.com", password="pw1")
    finally:
        await runtime.aclose()

    assert created.ok is True
    assert logged_in.ok is True
    assert len(hasher.thread_names) == 2
    assert all(name.startswith("password-hash") for name in hasher.thread_names)
    assert threading.current_thread().name not in hasher.thread_names
