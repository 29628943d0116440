"""Port for password hashing and verification."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Salted one-way password hashing with constant-time verification.

    Implementations are stateless and may be called from several worker
    threads at once.
    """

    def hash_password(self, password: str) -> str:
        """Hash plaintext password with a fresh salt for storage."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Verify plaintext password against stored hash.

        A malformed or corrupted stored hash returns False instead of raising.
        """
