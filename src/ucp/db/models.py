"""ORM models matching the game server's existing schema.

These tables are owned by the live game server; the UCP maps them and never
creates them in production. Attribute names are pythonic, column names keep
the game schema's spelling. Datetimes are naive UTC, as the game stores them.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from ucp.db.base import Base

MAX_CHARACTERS = 5


class Activation(enum.IntEnum):
    """Account activation state. Values in between are reserved."""

    UNCONFIRMED = 0
    CONFIRMED = 2


class CharacterStatus(enum.IntEnum):
    EXPIRED = -1
    PROPOSED = 0
    ACCEPTED = 1


class Gender(enum.IntEnum):
    FEMALE = 0
    MALE = 1


# Default skin per gender
DEFAULT_SKINS: dict[int, int] = {Gender.MALE: 98, Gender.FEMALE: 93}


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class Account(Base):
    """Maps to the 'accounts' table."""

    __tablename__ = "accounts"
    __table_args__ = {"extend_existing": True}  # noqa: RUF012

    id: Mapped[int] = mapped_column("ID", Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column("Username", String(24), unique=True, nullable=False)
    email: Mapped[str] = mapped_column("Email", String(128), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column("Password", String(256), nullable=False)
    register_date: Mapped[datetime | None] = mapped_column("RegisterDate", DateTime, nullable=True)
    login_date: Mapped[int] = mapped_column("LoginDate", BigInteger, default=0, server_default="0")
    ip: Mapped[str | None] = mapped_column("IP", String(45), nullable=True)
    characters: Mapped[int] = mapped_column("Characters", Integer, default=0, server_default="0")
    activated: Mapped[int] = mapped_column("Activated", Integer, default=0, server_default="0")
    admin: Mapped[int] = mapped_column("Admin", Integer, default=0, server_default="0")
    tester: Mapped[int] = mapped_column("Tester", Integer, default=0, server_default="0")
    donate_rank: Mapped[int] = mapped_column("DonateRank", Integer, default=0, server_default="0")
    accepted_by: Mapped[str | None] = mapped_column("AcceptedBy", String(24), nullable=True)
    accepted: Mapped[int] = mapped_column("Accepted", Integer, default=0, server_default="0")


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------


class Character(Base):
    """Maps to the 'characters' table. Owned by an account via username."""

    __tablename__ = "characters"
    __table_args__ = {"extend_existing": True}  # noqa: RUF012

    id: Mapped[int] = mapped_column("ID", Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column("Username", String(24), nullable=False, index=True)
    name: Mapped[str] = mapped_column("Character", String(24), unique=True, nullable=False)
    level: Mapped[int] = mapped_column("Level", Integer, default=1, server_default="1")
    created: Mapped[int] = mapped_column("Created", Integer, default=0, server_default="0")
    status: Mapped[int] = mapped_column("Status", Integer, default=0, server_default="0")
    age: Mapped[int] = mapped_column("Age", Integer, nullable=False)
    gender: Mapped[int] = mapped_column("Gender", Integer, nullable=False)
    origin: Mapped[str] = mapped_column("Origin", String(64), nullable=False)
    skin: Mapped[int] = mapped_column("Skin", Integer, nullable=False)
    accepted_by: Mapped[str] = mapped_column("AcceptedBy", String(24), default="N/A", server_default="N/A")
    playing_hours: Mapped[int] = mapped_column("PlayingHours", Integer, default=0, server_default="0")
    online: Mapped[int] = mapped_column("Online", Integer, default=0, server_default="0")
    jail_time: Mapped[int] = mapped_column("JailTime", Integer, default=0, server_default="0")
    prisoned: Mapped[int] = mapped_column("Prisoned", Integer, default=0, server_default="0")


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------


class Ban(Base):
    """Maps to the 'blacklist' table. Rows are never deleted; unban moves expiry into the past."""

    __tablename__ = "blacklist"
    __table_args__ = {"extend_existing": True}  # noqa: RUF012

    id: Mapped[int] = mapped_column("ID", Integer, primary_key=True, autoincrement=True)
    ip: Mapped[str] = mapped_column("IP", String(45), nullable=False)
    username: Mapped[str] = mapped_column("Username", String(24), nullable=False, index=True)
    banned_by: Mapped[str] = mapped_column("BannedBy", String(24), nullable=False)
    reason: Mapped[str] = mapped_column("Reason", String(128), nullable=False)
    perm: Mapped[int] = mapped_column("perm", Integer, default=0, server_default="0")
    date: Mapped[datetime] = mapped_column("Date", DateTime, nullable=False)
    expire: Mapped[datetime] = mapped_column("Expire", DateTime, nullable=False)


class House(Base):
    """Maps to the 'houses' table (counted for server stats only)."""

    __tablename__ = "houses"
    __table_args__ = {"extend_existing": True}  # noqa: RUF012

    id: Mapped[int] = mapped_column("ID", Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str | None] = mapped_column("Owner", String(24), nullable=True)


# ---------------------------------------------------------------------------
# Game logs (append-only, written by the game server)
# ---------------------------------------------------------------------------


class LogCategory(str, enum.Enum):
    """Known log categories. Each maps to one append-only table."""

    AJAIL = "logs_ajail"
    BAN = "logs_ban"
    WARN = "logs_warn"
    KICK = "logs_kick"
    UNBAN = "logs_unban"
    CHARITY = "logs_charity"
    HIT = "hit_logs"
    CK = "logs_ck"
    TRANSFER = "logs_transfer"
    GIVECASH = "logs_givecash"
    GIVEDRUG = "logs_givedrug"
    GIVEGUN = "logs_givegun"
    PAY = "logs_pay"
    ASK = "logs_ask"
    REPORT = "logs_report"
    NAMECHANGES = "namechanges"


def _log_table(category: LogCategory) -> Table:
    return Table(
        category.value,
        Base.metadata,
        Column("ID", Integer, primary_key=True, autoincrement=True),
        Column("Player", String(24), nullable=True),
        Column("Details", Text, nullable=True),
        Column("IP", String(45), nullable=True),
        Column("Date", DateTime, nullable=True),
        extend_existing=True,
    )


LOG_TABLES: dict[LogCategory, Table] = {category: _log_table(category) for category in LogCategory}
