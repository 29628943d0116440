"""Shared normalization helpers for user credential inputs."""

from __future__ import annotations

MAX_PASSWORD_BYTES = 72


def canonical_email(email: str) -> str:
    """Return the lookup form of one email without validating it."""

    return email.strip().lower()


def normalize_user_email(*, email: str) -> str:
    """Normalize one user email and reject blank values."""

    normalized = canonical_email(email)
    if not normalized:
        raise ValueError("email cannot be blank")
    return normalized


def require_user_password(*, password: str) -> str:
    """Reject blank or over-long plaintext passwords and return the value unchanged.

    bcrypt only reads the first 72 bytes of its input, so longer passwords are
    refused instead of being silently truncated.
    """

    if not password.strip():
        raise ValueError("password cannot be blank")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return password
