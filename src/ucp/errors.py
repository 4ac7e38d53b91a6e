"""
Domain error taxonomy.

Every failure a player can see is a ``UCPError`` carrying a stable,
localized message and the HTTP status of its family. Storage and notifier
details never reach the message; they are logged by the service that
caught them.
"""

from __future__ import annotations

from ucp import messages


class UCPError(Exception):
    """Base class for all user-facing errors."""

    status_code: int = 500
    default_message: str = messages.INTERNAL_ERROR

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Families
# ---------------------------------------------------------------------------


class ValidationError(UCPError):
    """Malformed input."""

    status_code = 422
    default_message = messages.MISSING_FIELDS


class ConflictError(UCPError):
    """Duplicate resource or session already present. Reported without detail."""

    status_code = 409


class UnauthorizedError(UCPError):
    """Bad credentials, invalid/expired token, missing session."""

    status_code = 401


class NotFoundError(UCPError):
    """Subject of the action does not exist."""

    status_code = 404


class InternalError(UCPError):
    """Storage or notifier failure, not attributable to caller input."""

    status_code = 500


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class MissingField(ValidationError):
    default_message = messages.MISSING_FIELDS


class InvalidExpiry(ValidationError):
    default_message = messages.BAN_INVALID_EXPIRE


class MissingCharacterName(ValidationError):
    default_message = messages.CHARACTER_NAME_EMPTY


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------


class DuplicateAccount(ConflictError):
    default_message = messages.DUPLICATE_ACCOUNT


class DuplicateCharacterName(ConflictError):
    default_message = messages.CHARACTER_DUPLICATE


class QuotaExceeded(ConflictError):
    default_message = messages.CHARACTER_QUOTA


class AlreadyAuthenticated(ConflictError):
    default_message = messages.ALREADY_LOGGED_IN


# ---------------------------------------------------------------------------
# Unauthorized
# ---------------------------------------------------------------------------


class BadCredentials(UnauthorizedError):
    default_message = messages.BAD_CREDENTIALS


class NotActivated(UnauthorizedError):
    default_message = messages.NOT_ACTIVATED


class InvalidToken(UnauthorizedError):
    default_message = messages.TOKEN_INVALID


class TokenExpired(UnauthorizedError):
    default_message = messages.TOKEN_EXPIRED


class NotAuthenticated(UnauthorizedError):
    default_message = messages.NOT_LOGGED_IN


class Banned(UnauthorizedError):
    status_code = 403
    default_message = messages.BANNED


class InsufficientPrivilege(UnauthorizedError):
    status_code = 403
    default_message = messages.NO_PRIVILEGE


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class AccountNotFound(NotFoundError):
    default_message = messages.BAD_CREDENTIALS


class SubjectNotFound(NotFoundError):
    default_message = messages.BAN_SUBJECT_NOT_FOUND


class BanNotFound(NotFoundError):
    default_message = messages.UNBAN_NOT_FOUND


class CharacterNotFound(NotFoundError):
    default_message = messages.CHARACTER_NOT_FOUND


class CharacterNotAccepted(NotFoundError):
    default_message = messages.CHARACTER_NOT_ACCEPTED


# ---------------------------------------------------------------------------
# Internal
# ---------------------------------------------------------------------------


class NotificationFailed(InternalError):
    default_message = messages.EMAIL_NOT_SENT
