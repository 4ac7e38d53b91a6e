"""Request/response schemas for account, statistics and moderation endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class CharacterStatsResponse(BaseModel):
    character_name: str
    character_status: int
    character_level: int
    playing_hours: int


class AccountStatsResponse(BaseModel):
    username: str
    admin: int
    tester: int
    donate_rank: int
    characters: int
    last_login: int
    character_list: list[CharacterStatsResponse]


class StaffMemberResponse(BaseModel):
    username: str
    role: str


class StaffListResponse(BaseModel):
    data: list[StaffMemberResponse]


class ServerStatsData(BaseModel):
    players_online: int
    total_bans: int
    total_houses: int
    total_staff: int
    total_accounts: int
    total_characters: int


class ServerStatsResponse(BaseModel):
    data: ServerStatsData


class PrivilegeResponse(BaseModel):
    user: str
    is_admin: bool
    is_tester: bool


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------


class BanRequest(BaseModel):
    username: str = ""
    expire: int = Field(0, description="Ban length in days, 1 to 29.")
    reason: str = ""


class UnbanRequest(BaseModel):
    username: str = ""


class BanResponse(BaseModel):
    username: str
    admin: str
    reason: str
    expire: datetime
    permanent: bool
    characters: list[str]


class AjailRequest(BaseModel):
    character: str = ""
    time: int = Field(0, description="Jail length in minutes.")
    reason: str = ""


class LogsRequest(BaseModel):
    type: str = ""


class LogEntryResponse(BaseModel):
    id: int
    player: str | None
    details: str | None
    timestamp: datetime | None


class LogsResponse(BaseModel):
    logs: list[LogEntryResponse]
