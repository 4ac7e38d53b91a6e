"""
Input validators for account and character data.

Each validator raises a ``ValidationError`` carrying the localized message
and returns None on success.
"""

from __future__ import annotations

import re

from email_validator import EmailNotValidError, validate_email

from ucp import messages
from ucp.errors import ValidationError

_USERNAME_RE = re.compile(r"[A-Za-z0-9]+")
_CHARACTER_NAME_RE = re.compile(r"[A-Z][A-Za-z]*_[A-Z][A-Za-z]*")
# letters of any alphabet, words separated by single spaces
_ORIGIN_RE = re.compile(r"[^\W\d_]+(?: [^\W\d_]+)*")

MIN_CHARACTER_AGE = 13
MAX_CHARACTER_AGE = 79
MIN_ORIGIN_LENGTH = 4


def validate_username(username: str) -> None:
    if not username:
        raise ValidationError(messages.MISSING_FIELDS)
    if not _USERNAME_RE.fullmatch(username):
        raise ValidationError(messages.INVALID_USERNAME)


def normalize_email(email: str) -> str:
    """Stored and signed form of an address: trimmed and lowercased."""
    return email.strip().lower()


def validate_email_address(email: str) -> None:
    if not email:
        raise ValidationError(messages.INVALID_EMAIL)
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(messages.INVALID_EMAIL) from e


def validate_character_name(name: str) -> None:
    """``Firstname_Lastname``: two capitalized, letters-only parts joined by one underscore."""
    if not name:
        raise ValidationError(messages.CHARACTER_NAME_EMPTY)
    if not _CHARACTER_NAME_RE.fullmatch(name):
        raise ValidationError(messages.CHARACTER_NAME_INVALID)


def validate_character_origin(origin: str) -> None:
    if not origin:
        raise ValidationError(messages.CHARACTER_ORIGIN_EMPTY)
    if not _ORIGIN_RE.fullmatch(origin):
        raise ValidationError(messages.CHARACTER_ORIGIN_INVALID)
    if len(origin) < MIN_ORIGIN_LENGTH:
        raise ValidationError(messages.CHARACTER_ORIGIN_SHORT)


def validate_character_age(age: int) -> None:
    if not MIN_CHARACTER_AGE <= age <= MAX_CHARACTER_AGE:
        raise ValidationError(messages.CHARACTER_AGE_INVALID)
