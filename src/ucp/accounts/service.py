"""
Account lifecycle business logic.

Registration, confirmation, login, password reset, and the moderation
actions (ban, unban, admin jail) together with the read-only account and
server statistics. Accounts move Unregistered -> PendingConfirmation ->
Active; a time-windowed ban blocks login only.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ucp import messages
from ucp.auth.identity import Identity
from ucp.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from ucp.auth.tokens import build_action_link
from ucp.clock import to_db_datetime
from ucp.db.models import Activation, LogCategory
from ucp.db.repository import DuplicateRow, RowNotFound, StorageError
from ucp.errors import (
    AccountNotFound,
    BadCredentials,
    Banned,
    BanNotFound,
    DuplicateAccount,
    InternalError,
    InvalidExpiry,
    MissingField,
    NotActivated,
    NotFoundError,
    NotificationFailed,
    SubjectNotFound,
    ValidationError,
)
from ucp.validators import normalize_email, validate_email_address, validate_username

if TYPE_CHECKING:
    from ucp.auth.tokens import TokenAuthority
    from ucp.clock import Clock
    from ucp.db.repository import (
        AccountStats,
        BanRecord,
        LogRecord,
        ServerStats,
        StaffMember,
        UcpRepository,
    )
    from ucp.email.dispatch import NotificationDispatcher

SECONDS_PER_DAY = 24 * 60 * 60
MAX_BAN_DAYS = 30
CONFIRM_PATH = "confirm"
RESET_PATH = "confirm-reset"


class AccountService:
    def __init__(
        self,
        repository: UcpRepository,
        tokens: TokenAuthority,
        notifier: NotificationDispatcher,
        clock: Clock,
        public_api_url: str,
        logger: Any,
    ) -> None:
        self.repository = repository
        self.tokens = tokens
        self.notifier = notifier
        self.clock = clock
        self.public_api_url = public_api_url
        self.logger = logger

    @contextmanager
    def _storage(self, action: str, **context: Any) -> Iterator[None]:
        """Surface storage failures as InternalError, logging what was attempted."""
        try:
            yield
        except StorageError as e:
            self.logger.exception("storage_failed", action=action, step=e.action, **context)
            raise InternalError from e

    # -----------------------------------------------------------------------
    # Registration and confirmation
    # -----------------------------------------------------------------------

    async def register(self, username: str, email: str, password: str, ip: str | None = None) -> None:
        """
        Create an unconfirmed account and send the confirmation link.

        The first delivery attempt is awaited. If it fails the account is
        removed again so the caller can retry with the same name.

        Raises:
            ValidationError: Malformed username, email or password.
            DuplicateAccount: Username or email already registered.
            NotificationFailed: The confirmation email could not be sent.
        """
        if not username or not email or not password:
            raise MissingField
        email = normalize_email(email)
        validate_username(username)
        validate_email_address(email)
        validate_password_strength(password)

        with self._storage("register", username=username):
            if await self.repository.account_exists(username, email):
                raise DuplicateAccount

            now = self.clock.now()
            try:
                await self.repository.create_account(
                    username=username,
                    email=email,
                    password_hash=hash_password(password),
                    registered_at=to_db_datetime(now),
                    ip=ip,
                )
            except DuplicateRow as e:
                raise DuplicateAccount from e

        token = self.tokens.issue(email, now)
        link = build_action_link(self.public_api_url, CONFIRM_PATH, email, token, now)
        if not await self.notifier.deliver(email, "confirm_account", username=username, confirm_url=link):
            with self._storage("register_rollback", username=username):
                await self.repository.delete_unconfirmed_account(username)
            self.logger.warning("account_removed_after_email_failure", username=username)
            raise NotificationFailed

        self.logger.info("account_created", username=username)

    async def confirm(self, email: str, signature: str, issued_at: int) -> None:
        """
        Activate the account behind a confirmation link.

        Confirming an already active account is a no-op success.

        Raises:
            InvalidToken / TokenExpired: The link does not verify.
            AccountNotFound: No account has this email.
        """
        if not email or not signature:
            raise MissingField(messages.MISSING_TOKEN_PARAMS)
        self.tokens.check(email, signature, issued_at, self.clock.now())

        with self._storage("confirm", email=email):
            try:
                await self.repository.set_activation(email, Activation.CONFIRMED)
            except RowNotFound:
                activation = await self.repository.get_activation_by_email(email)
                if activation is None:
                    raise AccountNotFound(messages.ACCOUNT_NOT_ACTIVATED_BY_TOKEN) from None
                self.logger.info("account_confirm_repeated", email=email)
                return

        self.logger.info("account_confirmed", email=email)

    # -----------------------------------------------------------------------
    # Login
    # -----------------------------------------------------------------------

    async def login(self, username: str, password: str, ip: str | None = None) -> Identity:
        """
        Authenticate and return the caller's identity with role flags.

        Checks run in a fixed order: ban, existence, activation, password.

        Raises:
            Banned: The account has an active ban.
            AccountNotFound: No such account (worded as bad credentials).
            NotActivated: The account was never confirmed.
            BadCredentials: The password does not match.
        """
        if not username or not password:
            raise MissingField
        validate_username(username)

        now = self.clock.now()
        with self._storage("login", username=username):
            if await self.repository.is_banned(username, to_db_datetime(now)):
                self.logger.info("login_refused_banned", username=username)
                raise Banned

            digest = await self.repository.get_password_digest(username)
            if digest is None:
                raise AccountNotFound

            if await self.repository.get_activation(username) != Activation.CONFIRMED:
                raise NotActivated

            if not verify_password(password, digest):
                self.logger.info("login_failed", username=username)
                raise BadCredentials

            if check_needs_rehash(digest):
                await self.repository.update_password_digest(username, hash_password(password))

            flags = await self.repository.get_role_flags(username)
            await self.repository.record_login(username, now, ip)

        identity = Identity(
            username=username,
            is_admin=flags is not None and flags.admin > 0,
            is_tester=flags is not None and flags.tester > 0,
        )
        self.logger.info("login_succeeded", username=username, is_admin=identity.is_admin)
        return identity

    # -----------------------------------------------------------------------
    # Password reset
    # -----------------------------------------------------------------------

    async def request_password_reset(self, email: str) -> None:
        """
        Send a reset link to ``email``.

        Only the address format is checked; the answer never reveals
        whether an account uses it.
        """
        email = normalize_email(email)
        validate_email_address(email)
        now = self.clock.now()
        token = self.tokens.issue(email, now)
        link = build_action_link(self.public_api_url, RESET_PATH, email, token, now)
        if not await self.notifier.deliver(email, "password_reset", reset_url=link):
            raise NotificationFailed
        self.logger.info("password_reset_requested", email=email)

    def check_reset_link(self, email: str, signature: str, issued_at: int) -> None:
        """Validate a reset link before the new-password form is shown."""
        if not email or not signature:
            raise MissingField(messages.MISSING_TOKEN_PARAMS)
        validate_email_address(email)
        self.tokens.check(email, signature, issued_at, self.clock.now())

    async def reset_password(self, email: str, signature: str, issued_at: int, new_password: str) -> None:
        """
        Store a new password for the account behind a valid reset link.

        Sessions issued before the reset stay valid until they expire.
        """
        validate_password_strength(new_password)
        self.check_reset_link(email, signature, issued_at)

        with self._storage("reset_password", email=email):
            try:
                await self.repository.update_password(email, hash_password(new_password))
            except RowNotFound:
                raise AccountNotFound from None
        self.logger.info("password_reset", email=email)

    # -----------------------------------------------------------------------
    # Moderation
    # -----------------------------------------------------------------------

    async def is_banned(self, username: str) -> bool:
        with self._storage("is_banned", username=username):
            return await self.repository.is_banned(username, to_db_datetime(self.clock.now()))

    async def ban(self, admin: str, username: str, reason: str, days: int) -> None:
        """
        Ban ``username`` for ``days`` days (strictly between 0 and 30).

        The subject's last known IP is recorded with the ban.
        """
        if not admin or not username or not reason:
            raise MissingField
        if not 0 < days < MAX_BAN_DAYS:
            raise InvalidExpiry

        now = self.clock.now()
        with self._storage("ban", admin=admin, username=username):
            ip = await self.repository.get_account_ip(username)
            if not ip:
                raise SubjectNotFound
            await self.repository.insert_ban(
                ip=ip,
                username=username,
                banned_by=admin,
                reason=reason,
                date=to_db_datetime(now),
                expire=to_db_datetime(now + days * SECONDS_PER_DAY),
            )
        self.logger.info("account_banned", admin=admin, username=username, days=days)

    async def unban(self, admin: str, username: str) -> None:
        """Expire every ban on ``username``. Repeating it is harmless; a player never banned raises BanNotFound."""
        if not username:
            raise MissingField
        now = self.clock.now()
        with self._storage("unban", admin=admin, username=username):
            try:
                await self.repository.deactivate_ban(username, to_db_datetime(now - 1))
            except RowNotFound:
                raise BanNotFound from None
        self.logger.info("account_unbanned", admin=admin, username=username)

    async def ban_list(self) -> list[BanRecord]:
        with self._storage("ban_list"):
            return await self.repository.list_active_bans(to_db_datetime(self.clock.now()))

    async def ajail(self, admin: str, character: str, minutes: int, reason: str) -> None:
        """Put a character in admin jail for ``minutes`` minutes."""
        if not character or not reason or not minutes or minutes < 0:
            raise MissingField
        with self._storage("ajail", admin=admin, character=character):
            try:
                await self.repository.jail_character(character, minutes * 60, prisoned=0)
            except RowNotFound:
                raise NotFoundError(messages.JAIL_FAILED) from None
        self.logger.info("character_jailed", admin=admin, character=character, minutes=minutes, reason=reason)

    async def fetch_logs(self, category: str) -> list[LogRecord]:
        """Last records of one log category. Unknown categories are rejected."""
        try:
            log_category = LogCategory(category)
        except ValueError:
            raise ValidationError(messages.LOG_CATEGORY_INVALID) from None
        with self._storage("fetch_logs", category=category):
            return await self.repository.fetch_logs(log_category)

    # -----------------------------------------------------------------------
    # Statistics
    # -----------------------------------------------------------------------

    async def get_stats(self, username: str) -> AccountStats:
        with self._storage("get_stats", username=username):
            stats = await self.repository.get_account_stats(username)
        if stats is None:
            raise AccountNotFound
        return stats

    async def get_staff(self) -> list[StaffMember]:
        with self._storage("get_staff"):
            return await self.repository.list_staff()

    async def get_server_stats(self) -> ServerStats:
        with self._storage("get_server_stats"):
            return await self.repository.get_server_stats(to_db_datetime(self.clock.now()))
