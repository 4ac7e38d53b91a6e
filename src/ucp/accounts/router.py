"""Account router: player statistics, staff list, server stats and moderation."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ucp.accounts.schemas import (
    AccountStatsResponse,
    AjailRequest,
    BanRequest,
    BanResponse,
    CharacterStatsResponse,
    LogEntryResponse,
    LogsRequest,
    LogsResponse,
    PrivilegeResponse,
    ServerStatsData,
    ServerStatsResponse,
    StaffListResponse,
    StaffMemberResponse,
    UnbanRequest,
)
from ucp.accounts.service import AccountService
from ucp.auth.dependencies import (
    get_account_service,
    get_identity,
    require_admin,
    require_privilege,
)
from ucp.auth.identity import Identity
from ucp.auth.schemas import MessageResponse

router = APIRouter(tags=["Accounts"])


@router.get("/get-data", response_model=AccountStatsResponse)
async def get_data(
    identity: Identity = Depends(get_identity),
    accounts: AccountService = Depends(get_account_service),
) -> AccountStatsResponse:
    """The caller's account and characters."""
    stats = await accounts.get_stats(identity.username)
    return AccountStatsResponse(
        username=stats.username,
        admin=stats.admin,
        tester=stats.tester,
        donate_rank=stats.donate_rank,
        characters=stats.characters,
        last_login=stats.last_login,
        character_list=[
            CharacterStatsResponse(
                character_name=c.name,
                character_status=c.status,
                character_level=c.level,
                playing_hours=c.playing_hours,
            )
            for c in stats.character_list
        ],
    )


@router.get("/get-staff", response_model=StaffListResponse)
async def get_staff(accounts: AccountService = Depends(get_account_service)) -> StaffListResponse:
    staff = await accounts.get_staff()
    return StaffListResponse(data=[StaffMemberResponse(username=s.username, role=s.role) for s in staff])


@router.get("/server-stats", response_model=ServerStatsResponse)
async def server_stats(accounts: AccountService = Depends(get_account_service)) -> ServerStatsResponse:
    stats = await accounts.get_server_stats()
    return ServerStatsResponse(
        data=ServerStatsData(
            players_online=stats.online,
            total_bans=stats.bans,
            total_houses=stats.houses,
            total_staff=stats.staff,
            total_accounts=stats.accounts,
            total_characters=stats.characters,
        )
    )


# ---------------------------------------------------------------------------
# Restricted: admins and testers
# ---------------------------------------------------------------------------


@router.get("/restricted/check", response_model=PrivilegeResponse)
async def check_privilege(identity: Identity = Depends(require_privilege)) -> PrivilegeResponse:
    return PrivilegeResponse(user=identity.username, is_admin=identity.is_admin, is_tester=identity.is_tester)


@router.post("/restricted/ajail", response_model=MessageResponse)
async def ajail(
    body: AjailRequest,
    identity: Identity = Depends(require_privilege),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.ajail(identity.username, body.character, body.time, body.reason)
    return MessageResponse()


@router.post("/restricted/logs", response_model=LogsResponse)
async def logs(
    body: LogsRequest,
    _identity: Identity = Depends(require_privilege),
    accounts: AccountService = Depends(get_account_service),
) -> LogsResponse:
    records = await accounts.fetch_logs(body.type)
    return LogsResponse(
        logs=[LogEntryResponse(id=r.id, player=r.player, details=r.details, timestamp=r.date) for r in records]
    )


# ---------------------------------------------------------------------------
# Restricted: admins only
# ---------------------------------------------------------------------------


@router.get("/restricted/ban-list", response_model=list[BanResponse])
async def ban_list(
    _identity: Identity = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> list[BanResponse]:
    bans = await accounts.ban_list()
    return [
        BanResponse(
            username=b.username,
            admin=b.banned_by,
            reason=b.reason,
            expire=b.expire,
            permanent=b.permanent,
            characters=b.characters,
        )
        for b in bans
    ]


@router.post("/restricted/ban", response_model=MessageResponse)
async def ban(
    body: BanRequest,
    identity: Identity = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.ban(identity.username, body.username, body.reason, body.expire)
    return MessageResponse()


@router.post("/restricted/unban", response_model=MessageResponse)
async def unban(
    body: UnbanRequest,
    identity: Identity = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.unban(identity.username, body.username)
    return MessageResponse()
