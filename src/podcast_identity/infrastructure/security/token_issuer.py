"""JWT bearer token issuer built on python-jose."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

from jose import JWTError, jwt

from podcast_identity.application.ports.token_issuer_port import (
    InvalidTokenError,
    TokenIssuerPort,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class JoseTokenIssuer(TokenIssuerPort):
    """Sign and verify compact HMAC tokens carrying a user id subject."""

    def __init__(
        self,
        *,
        secret_key: str,
        algorithm: str = "HS256",
        lifetime: timedelta | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not secret_key:
            raise ValueError("token secret key cannot be blank")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._lifetime = lifetime
        self._clock = clock

    def sign(self, *, user_id: UUID) -> str:
        """Return a signed token with `sub`, `iat` and optional `exp` claims."""

        issued_at = self._clock()
        claims: dict[str, object] = {"sub": str(user_id), "iat": issued_at}
        if self._lifetime is not None:
            claims["exp"] = issued_at + self._lifetime
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> UUID:
        """Return the user id of a valid token or raise InvalidTokenError."""

        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.debug("token_verify_failed error=%s", exc)
            raise InvalidTokenError(reason="invalid_signature_or_structure") from exc

        self._check_expiry(claims)

        subject = claims.get("sub")
        if not isinstance(subject, str):
            raise InvalidTokenError(reason="invalid_subject")
        try:
            return UUID(subject)
        except ValueError as exc:
            raise InvalidTokenError(reason="invalid_subject") from exc

    def _check_expiry(self, claims: dict[str, object]) -> None:
        """Reject tokens whose `exp` claim is at or before the injected clock."""

        expires_at = claims.get("exp")
        if expires_at is None:
            return
        if not isinstance(expires_at, int | float):
            raise InvalidTokenError(reason="invalid_signature_or_structure")
        if self._clock().timestamp() >= expires_at:
            raise InvalidTokenError(reason="expired")
