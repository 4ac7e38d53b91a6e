"""Request/response schemas for character endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class CreateCharacterRequest(BaseModel):
    character_name: str = ""
    character_age: int = 0
    character_gender: int = 0
    character_origin: str = ""


class CharacterRequest(BaseModel):
    """Identifies a character under review by owner and name."""

    username: str = ""
    character_name: str = ""


class RejectCharacterRequest(CharacterRequest):
    reason: str = ""


class WaitingCharacterResponse(BaseModel):
    username: str
    character_name: str
    character_age: int
    character_gender: int
    character_origin: str


class FetchCharacterResponse(BaseModel):
    username: str
    character_name: str
