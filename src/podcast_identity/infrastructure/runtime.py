"""Composition root wiring the identity service from settings."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from podcast_identity.application.services.identity_service import IdentityService
from podcast_identity.config.settings import Settings
from podcast_identity.infrastructure.db.session import create_session_factory
from podcast_identity.infrastructure.db.user_repository import SqlAlchemyUserRepository
from podcast_identity.infrastructure.security.password_hasher import BcryptPasswordHasher
from podcast_identity.infrastructure.security.token_issuer import JoseTokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityRuntime:
    """Composed identity service plus the resources it owns."""

    identity_service: IdentityService
    token_issuer: JoseTokenIssuer
    session_factory: async_sessionmaker[AsyncSession]
    hashing_executor: ThreadPoolExecutor

    async def aclose(self) -> None:
        """Dispose the database engine and stop the hashing pool."""

        engine = self.session_factory.kw.get("bind")
        if engine is not None:
            await engine.dispose()
        self.hashing_executor.shutdown(wait=True)


def build_token_issuer(settings: Settings) -> JoseTokenIssuer:
    """Build the process-wide token issuer from settings."""

    lifetime = (
        timedelta(seconds=settings.token_lifetime_seconds)
        if settings.token_lifetime_seconds is not None
        else None
    )
    return JoseTokenIssuer(
        secret_key=settings.token_secret_key,
        algorithm=settings.token_algorithm,
        lifetime=lifetime,
    )


def build_identity_runtime(settings: Settings) -> IdentityRuntime:
    """Wire repository, hasher, token issuer, and hashing pool into one service."""

    session_factory = create_session_factory(settings.database_url)
    token_issuer = build_token_issuer(settings)
    hashing_executor = ThreadPoolExecutor(
        max_workers=settings.password_hash_workers,
        thread_name_prefix="password-hash",
    )
    identity_service = IdentityService(
        users=SqlAlchemyUserRepository(session_factory),
        password_hasher=BcryptPasswordHasher(),
        token_issuer=token_issuer,
        hashing_executor=hashing_executor,
    )
    logger.info(
        "identity_runtime_ready hash_workers=%s token_algorithm=%s token_lifetime_seconds=%s",
        settings.password_hash_workers,
        settings.token_algorithm,
        settings.token_lifetime_seconds,
    )
    return IdentityRuntime(
        identity_service=identity_service,
        token_issuer=token_issuer,
        session_factory=session_factory,
        hashing_executor=hashing_executor,
    )
