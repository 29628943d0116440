from __future__ import annotations

from podcast_identity.infrastructure.security.password_hasher import BcryptPasswordHasher


def test_hash_password_never_stores_plaintext_and_verifies() -> None:
    hasher = BcryptPasswordHasher()
    password = "super-secret-password"

    password_hash = hasher.hash_password(password)

    assert password_hash != password
    assert password not in password_hash
    assert hasher.verify_password(password=password, password_hash=password_hash) is True


def test_wrong_password_fails_verification() -> None:
    hasher = BcryptPasswordHasher()
    password_hash = hasher.hash_password("correct")

    assert hasher.verify_password(password="wrong", password_hash=password_hash) is False


def test_same_password_hashes_differ_but_both_verify() -> None:
    hasher = BcryptPasswordHasher()

    first = hasher.hash_password("pw1")
    second = hasher.hash_password("pw1")

    assert first != second
    assert len(first) == len(second)
    assert hasher.verify_password(password="pw1", password_hash=first) is True
    assert hasher.verify_password(password="pw1", password_hash=second) is True


def test_malformed_stored_hash_fails_verification_without_raising() -> None:
    hasher = BcryptPasswordHasher()

    assert hasher.verify_password(password="pw1", password_hash="") is False
    assert hasher.verify_password(password="pw1", password_hash="not-a-bcrypt-hash") is False
    assert hasher.verify_password(password="pw1", password_hash="$2b$12$ção") is False


def test_password_of_exactly_72_bytes_round_trips() -> None:
    hasher = BcryptPasswordHasher()
    password = "y" * 72

    password_hash = hasher.hash_password(password)

    assert hasher.verify_password(password=password, password_hash=password_hash) is True
