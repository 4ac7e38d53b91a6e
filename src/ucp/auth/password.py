"""
Password hashing and validation using argon2id.

Only the one-way digest is ever stored. Verification fetches the digest and
checks it here; digests are never compared in SQL.
"""

from __future__ import annotations

import argon2

from ucp import messages
from ucp.errors import ValidationError

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,  # argon2id
)

SPECIAL_CHARACTERS = frozenset("!@#$%^&*()-_=+[]{}|;:'\",.<>?/`~")


class PasswordStrengthError(ValidationError):
    """Raised when a password does not meet strength requirements."""

    default_message = messages.WEAK_PASSWORD


def hash_password(password: str) -> str:
    """Hash a password using argon2id. Returns the full hash string."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its argon2id hash.

    Returns True if the password matches. Never raises on mismatch.
    """
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """Check if the hash needs to be updated (parameters changed)."""
    return _hasher.check_needs_rehash(password_hash)


def validate_password_strength(password: str) -> None:
    """
    Validate password meets minimum strength requirements.

    Raises PasswordStrengthError if the password is too weak.

    Requirements:
    - Minimum 8 characters
    - Maximum 128 characters
    - At least one letter
    - At least one digit
    - At least one special character
    """
    if (
        len(password) < 8
        or len(password) > 128
        or not any(c.isalpha() for c in password)
        or not any(c.isdigit() for c in password)
        or not any(c in SPECIAL_CHARACTERS for c in password)
    ):
        raise PasswordStrengthError
