"""Port for signing and verifying bearer session tokens."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID


class InvalidTokenError(ValueError):
    """Raised when a bearer token is tampered, malformed, or expired."""

    def __init__(self, *, reason: str) -> None:
        super().__init__(f"invalid token: {reason}")
        self.reason = reason


class TokenIssuerPort(Protocol):
    """Bearer token signing contract."""

    def sign(self, *, user_id: UUID) -> str:
        """Return a signed token encoding the user id and issuance time."""

    def verify(self, token: str) -> UUID:
        """Return the user id encoded in a valid token or raise InvalidTokenError."""
