"""
Data access over the game server's tables.

All SQL the UCP issues lives here. Reads return plain records, never ORM
instances. Every logical write is one unit of work on the request session:
it commits on success and rolls back on any failure, including a guarded
update that matched no row.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ColumnElement, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ucp.db.models import (
    LOG_TABLES,
    MAX_CHARACTERS,
    Account,
    Activation,
    Ban,
    Character,
    CharacterStatus,
    House,
    LogCategory,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

LOG_FETCH_LIMIT = 100


class StorageError(Exception):
    """The database could not complete an operation."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"storage failure during {action}")


class RowNotFound(StorageError):
    """A guarded write matched no row."""


class DuplicateRow(StorageError):
    """A unique constraint rejected an insert."""


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoleFlags:
    admin: int
    tester: int


@dataclass(frozen=True)
class CharacterRecord:
    owner: str
    name: str
    age: int
    gender: int
    origin: str
    skin: int
    status: int
    level: int = 1
    playing_hours: int = 0


@dataclass(frozen=True)
class AccountStats:
    username: str
    admin: int
    tester: int
    donate_rank: int
    characters: int
    last_login: int
    character_list: list[CharacterRecord] = field(default_factory=list)


@dataclass(frozen=True)
class StaffMember:
    username: str
    role: str
    admin: int
    tester: int


@dataclass(frozen=True)
class ServerStats:
    online: int
    bans: int
    houses: int
    staff: int
    accounts: int
    characters: int


@dataclass(frozen=True)
class BanRecord:
    username: str
    banned_by: str
    reason: str
    expire: datetime
    permanent: bool
    characters: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LogRecord:
    """One game log line. The IP column is never read."""

    id: int
    player: str | None
    details: str | None
    date: datetime | None


def _character_record(row: Character) -> CharacterRecord:
    return CharacterRecord(
        owner=row.username,
        name=row.name,
        age=row.age,
        gender=row.gender,
        origin=row.origin,
        skin=row.skin,
        status=row.created,
        level=row.level,
        playing_hours=row.playing_hours,
    )


class UcpRepository:
    """Repository bound to a single AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def _unit_of_work(self, action: str) -> AsyncIterator[AsyncSession]:
        """Commit on success, roll back and re-raise as a StorageError otherwise."""
        try:
            yield self._session
            await self._session.commit()
        except StorageError:
            await self._session.rollback()
            raise
        except IntegrityError as e:
            await self._session.rollback()
            raise DuplicateRow(action) from e
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StorageError(action) from e

    @asynccontextmanager
    async def _reading(self, action: str) -> AsyncIterator[AsyncSession]:
        try:
            yield self._session
        except SQLAlchemyError as e:
            raise StorageError(action) from e

    # -----------------------------------------------------------------------
    # Accounts
    # -----------------------------------------------------------------------

    async def account_exists(self, username: str, email: str) -> bool:
        """True if either the username or the email is taken."""
        async with self._reading("account_exists") as db:
            result = await db.execute(
                select(func.count())
                .select_from(Account)
                .where(or_(Account.username == username, Account.email == email))
            )
            return (result.scalar() or 0) > 0

    async def create_account(
        self,
        username: str,
        email: str,
        password_hash: str,
        registered_at: datetime,
        ip: str | None = None,
    ) -> None:
        async with self._unit_of_work("create_account") as db:
            db.add(
                Account(
                    username=username,
                    email=email,
                    password_hash=password_hash,
                    register_date=registered_at,
                    ip=ip,
                    activated=Activation.UNCONFIRMED,
                    characters=0,
                )
            )

    async def delete_unconfirmed_account(self, username: str) -> None:
        """Remove an account that never got confirmed. Confirmed rows are untouched."""
        async with self._unit_of_work("delete_unconfirmed_account") as db:
            await db.execute(
                delete(Account)
                .where(Account.username == username, Account.activated == Activation.UNCONFIRMED)
                .execution_options(synchronize_session=False)
            )

    async def set_activation(self, email: str, activation: Activation) -> None:
        """
        Move the account forward to ``activation``.

        Activation never goes backwards, so only rows below the target state
        match. Raises RowNotFound when nothing changed.
        """
        async with self._unit_of_work("set_activation") as db:
            result = await db.execute(
                update(Account)
                .where(Account.email == email, Account.activated < activation)
                .values(activated=activation)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise RowNotFound("set_activation")

    async def get_activation(self, username: str) -> int | None:
        async with self._reading("get_activation") as db:
            result = await db.execute(select(Account.activated).where(Account.username == username))
            return result.scalar_one_or_none()

    async def get_activation_by_email(self, email: str) -> int | None:
        async with self._reading("get_activation_by_email") as db:
            result = await db.execute(select(Account.activated).where(Account.email == email))
            return result.scalar_one_or_none()

    async def get_password_digest(self, username: str) -> str | None:
        async with self._reading("get_password_digest") as db:
            result = await db.execute(select(Account.password_hash).where(Account.username == username))
            return result.scalar_one_or_none()

    async def update_password_digest(self, username: str, password_hash: str) -> None:
        """Replace the digest by username (used for transparent rehashing)."""
        async with self._unit_of_work("update_password_digest") as db:
            await db.execute(
                update(Account)
                .where(Account.username == username)
                .values(password_hash=password_hash)
                .execution_options(synchronize_session=False)
            )

    async def update_password(self, email: str, password_hash: str) -> None:
        """Replace the digest by email. Raises RowNotFound if no account has that email."""
        async with self._unit_of_work("update_password") as db:
            result = await db.execute(
                update(Account)
                .where(Account.email == email)
                .values(password_hash=password_hash)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise RowNotFound("update_password")

    async def record_login(self, username: str, logged_in_at: int, ip: str | None) -> None:
        async with self._unit_of_work("record_login") as db:
            values: dict[str, object] = {"login_date": logged_in_at}
            if ip:
                values["ip"] = ip
            await db.execute(
                update(Account)
                .where(Account.username == username)
                .values(**values)
                .execution_options(synchronize_session=False)
            )

    async def get_role_flags(self, username: str) -> RoleFlags | None:
        async with self._reading("get_role_flags") as db:
            result = await db.execute(select(Account.admin, Account.tester).where(Account.username == username))
            row = result.one_or_none()
            if row is None:
                return None
            return RoleFlags(admin=row.admin or 0, tester=row.tester or 0)

    async def get_email(self, username: str) -> str | None:
        async with self._reading("get_email") as db:
            result = await db.execute(select(Account.email).where(Account.username == username))
            return result.scalar_one_or_none()

    async def get_account_ip(self, username: str) -> str | None:
        async with self._reading("get_account_ip") as db:
            result = await db.execute(select(Account.ip).where(Account.username == username))
            return result.scalar_one_or_none()

    # -----------------------------------------------------------------------
    # Characters
    # -----------------------------------------------------------------------

    async def get_character_count(self, username: str) -> int:
        """Number of characters the owner holds that have not expired."""
        async with self._reading("get_character_count") as db:
            result = await db.execute(
                select(func.count())
                .select_from(Character)
                .where(Character.username == username, Character.created >= CharacterStatus.PROPOSED)
            )
            return result.scalar() or 0

    async def character_exists(self, name: str) -> bool:
        async with self._reading("character_exists") as db:
            result = await db.execute(select(func.count()).select_from(Character).where(Character.name == name))
            return (result.scalar() or 0) > 0

    async def create_character(
        self,
        owner: str,
        name: str,
        age: int,
        gender: int,
        origin: str,
        skin: int,
    ) -> None:
        async with self._unit_of_work("create_character") as db:
            db.add(
                Character(
                    username=owner,
                    name=name,
                    level=1,
                    created=CharacterStatus.PROPOSED,
                    status=CharacterStatus.PROPOSED,
                    age=age,
                    gender=gender,
                    origin=origin,
                    skin=skin,
                    accepted_by="N/A",
                )
            )

    async def list_proposed_characters(self) -> list[CharacterRecord]:
        async with self._reading("list_proposed_characters") as db:
            result = await db.execute(
                select(Character).where(Character.created == CharacterStatus.PROPOSED).order_by(Character.id)
            )
            return [_character_record(row) for row in result.scalars().all()]

    async def accept_character(self, reviewer: str, owner: str, name: str) -> None:
        """
        Accept a proposed character and bump the owner's count, atomically.

        Both updates are guarded: the character must be proposed and owned by
        ``owner``, and the owner must be under the character cap. If either
        matches no row the whole unit rolls back with RowNotFound.
        """
        async with self._unit_of_work("accept_character") as db:
            result = await db.execute(
                update(Character)
                .where(
                    Character.name == name,
                    Character.username == owner,
                    Character.created == CharacterStatus.PROPOSED,
                )
                .values(created=CharacterStatus.ACCEPTED, status=CharacterStatus.ACCEPTED, accepted_by=reviewer)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise RowNotFound("accept_character")

            result = await db.execute(
                update(Account)
                .where(Account.username == owner, Account.characters < MAX_CHARACTERS)
                .values(characters=Account.characters + 1, accepted_by=reviewer, accepted=2)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise RowNotFound("accept_character")

    async def delete_proposed_character(self, owner: str, name: str) -> None:
        """Delete the row only while it is still proposed. Raises RowNotFound otherwise."""
        async with self._unit_of_work("delete_proposed_character") as db:
            result = await db.execute(
                delete(Character)
                .where(
                    Character.name == name,
                    Character.username == owner,
                    Character.created == CharacterStatus.PROPOSED,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise RowNotFound("delete_proposed_character")

    async def get_character(self, name: str) -> CharacterRecord | None:
        async with self._reading("get_character") as db:
            result = await db.execute(select(Character).where(Character.name == name))
            row = result.scalar_one_or_none()
            return _character_record(row) if row is not None else None

    async def jail_character(self, name: str, jail_seconds: int, prisoned: int) -> None:
        async with self._unit_of_work("jail_character") as db:
            result = await db.execute(
                update(Character)
                .where(Character.name == name)
                .values(jail_time=jail_seconds, prisoned=prisoned)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise RowNotFound("jail_character")

    async def purge_expired_characters(self) -> int:
        """Delete characters marked expired. Returns the number of rows removed."""
        async with self._unit_of_work("purge_expired_characters") as db:
            result = await db.execute(
                delete(Character)
                .where(Character.created == CharacterStatus.EXPIRED)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount or 0

    # -----------------------------------------------------------------------
    # Bans
    # -----------------------------------------------------------------------

    @staticmethod
    def _active_ban(now: datetime) -> ColumnElement[bool]:
        return or_(Ban.expire > now, Ban.perm == 1)

    async def is_banned(self, username: str, now: datetime) -> bool:
        async with self._reading("is_banned") as db:
            result = await db.execute(
                select(func.count()).select_from(Ban).where(Ban.username == username, self._active_ban(now))
            )
            return (result.scalar() or 0) > 0

    async def insert_ban(
        self,
        ip: str,
        username: str,
        banned_by: str,
        reason: str,
        date: datetime,
        expire: datetime,
    ) -> None:
        async with self._unit_of_work("insert_ban") as db:
            db.add(
                Ban(
                    ip=ip,
                    username=username,
                    banned_by=banned_by,
                    reason=reason,
                    perm=0,
                    date=date,
                    expire=expire,
                )
            )

    async def deactivate_ban(self, username: str, expire: datetime) -> None:
        """
        Move the expiry of every ban row on ``username`` to ``expire``.

        Rows are kept for history and already lifted bans are simply touched
        again. Raises RowNotFound only if the player was never banned.
        """
        async with self._unit_of_work("deactivate_ban") as db:
            result = await db.execute(
                update(Ban)
                .where(Ban.username == username)
                .values(expire=expire, perm=0)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise RowNotFound("deactivate_ban")

    async def list_active_bans(self, now: datetime) -> list[BanRecord]:
        """Active bans with each subject's accepted characters."""
        async with self._reading("list_active_bans") as db:
            bans = (await db.execute(select(Ban).where(self._active_ban(now)).order_by(Ban.expire))).scalars().all()
            records = []
            for ban in bans:
                names = await db.execute(
                    select(Character.name)
                    .where(Character.username == ban.username, Character.created == CharacterStatus.ACCEPTED)
                    .order_by(Character.name)
                )
                records.append(
                    BanRecord(
                        username=ban.username,
                        banned_by=ban.banned_by,
                        reason=ban.reason,
                        expire=ban.expire,
                        permanent=bool(ban.perm),
                        characters=list(names.scalars().all()),
                    )
                )
            return records

    # -----------------------------------------------------------------------
    # Statistics
    # -----------------------------------------------------------------------

    async def get_account_stats(self, username: str) -> AccountStats | None:
        async with self._reading("get_account_stats") as db:
            account = (await db.execute(select(Account).where(Account.username == username))).scalar_one_or_none()
            if account is None:
                return None
            rows = await db.execute(
                select(Character)
                .where(Character.username == username, Character.created >= CharacterStatus.PROPOSED)
                .order_by(Character.id)
            )
            character_list = [_character_record(row) for row in rows.scalars().all()]
            return AccountStats(
                username=account.username,
                admin=account.admin or 0,
                tester=account.tester or 0,
                donate_rank=account.donate_rank or 0,
                characters=len(character_list),
                last_login=account.login_date or 0,
                character_list=character_list,
            )

    async def list_staff(self) -> list[StaffMember]:
        """Admins first by level descending, then testers; ties by username."""
        async with self._reading("list_staff") as db:
            result = await db.execute(
                select(Account.username, Account.admin, Account.tester)
                .where(or_(Account.admin > 0, Account.tester > 0))
                .order_by(Account.admin.desc(), Account.tester.desc(), Account.username)
            )
            return [
                StaffMember(
                    username=row.username,
                    role="Admin" if row.admin > 0 else "Tester",
                    admin=row.admin,
                    tester=row.tester,
                )
                for row in result.all()
            ]

    async def get_server_stats(self, now: datetime) -> ServerStats:
        async with self._reading("get_server_stats") as db:

            async def count(model: type, *criteria: object) -> int:
                result = await db.execute(select(func.count()).select_from(model).where(*criteria))
                return result.scalar() or 0

            return ServerStats(
                online=await count(Character, Character.online == 1),
                bans=await count(Ban, self._active_ban(now)),
                houses=await count(House),
                staff=await count(Account, or_(Account.admin > 0, Account.tester > 0)),
                accounts=await count(Account, Account.activated == Activation.CONFIRMED),
                characters=await count(Character, Character.created > 0),
            )

    # -----------------------------------------------------------------------
    # Logs
    # -----------------------------------------------------------------------

    async def fetch_logs(self, category: LogCategory, limit: int = LOG_FETCH_LIMIT) -> list[LogRecord]:
        """Most recent records of one category, newest first."""
        table = LOG_TABLES[category]
        async with self._reading("fetch_logs") as db:
            result = await db.execute(
                select(table.c.ID, table.c.Player, table.c.Details, table.c.Date)
                .order_by(table.c.ID.desc())
                .limit(limit)
            )
            return [
                LogRecord(id=row.ID, player=row.Player, details=row.Details, date=row.Date) for row in result.all()
            ]
