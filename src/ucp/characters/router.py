"""Character router: proposals and the review queue."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ucp.auth.dependencies import (
    get_character_service,
    get_identity,
    require_admin,
    require_privilege,
)
from ucp.auth.identity import Identity
from ucp.auth.schemas import MessageResponse
from ucp.characters.schemas import (
    CharacterRequest,
    CreateCharacterRequest,
    FetchCharacterResponse,
    RejectCharacterRequest,
    WaitingCharacterResponse,
)
from ucp.characters.service import CharacterService

router = APIRouter(tags=["Characters"])


@router.post("/create-character", response_model=MessageResponse, status_code=201)
async def create_character(
    body: CreateCharacterRequest,
    identity: Identity = Depends(get_identity),
    characters: CharacterService = Depends(get_character_service),
) -> MessageResponse:
    """Propose a character for the caller's account."""
    await characters.propose(
        identity.username,
        body.character_name,
        body.character_age,
        body.character_gender,
        body.character_origin,
    )
    return MessageResponse()


@router.get("/restricted/waiting-list", response_model=list[WaitingCharacterResponse])
async def waiting_list(
    _identity: Identity = Depends(require_privilege),
    characters: CharacterService = Depends(get_character_service),
) -> list[WaitingCharacterResponse]:
    waiting = await characters.list_waiting()
    return [
        WaitingCharacterResponse(
            username=c.owner,
            character_name=c.name,
            character_age=c.age,
            character_gender=c.gender,
            character_origin=c.origin,
        )
        for c in waiting
    ]


@router.post("/restricted/accept-character", response_model=MessageResponse)
async def accept_character(
    body: CharacterRequest,
    identity: Identity = Depends(require_privilege),
    characters: CharacterService = Depends(get_character_service),
) -> MessageResponse:
    await characters.accept(identity.username, body.username, body.character_name)
    return MessageResponse()


@router.post("/restricted/reject-character", response_model=MessageResponse)
async def reject_character(
    body: RejectCharacterRequest,
    identity: Identity = Depends(require_privilege),
    characters: CharacterService = Depends(get_character_service),
) -> MessageResponse:
    await characters.reject(identity.username, body.username, body.character_name, body.reason)
    return MessageResponse()


@router.post("/restricted/fetch-character", response_model=FetchCharacterResponse)
async def fetch_character(
    body: CharacterRequest,
    _identity: Identity = Depends(require_admin),
    characters: CharacterService = Depends(get_character_service),
) -> FetchCharacterResponse:
    record = await characters.fetch(body.character_name)
    return FetchCharacterResponse(username=record.owner, character_name=record.name)
