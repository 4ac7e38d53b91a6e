"""
FastAPI dependencies: the session gate and the service factories.

Routers never build services themselves; they depend on the factories
below so tests can override the clock, the notifier or the session.
"""

from __future__ import annotations

import jwt
import structlog
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ucp.accounts.service import AccountService
from ucp.auth.identity import Identity
from ucp.auth.jwt import verify_token
from ucp.auth.tokens import TokenAuthority
from ucp.characters.service import CharacterService
from ucp.clock import Clock, SystemClock
from ucp.config import get_settings
from ucp.database import get_session
from ucp.db.repository import UcpRepository
from ucp.email.dispatch import NotificationDispatcher, get_dispatcher
from ucp.errors import AlreadyAuthenticated, InsufficientPrivilege, NotAuthenticated

_bearer = HTTPBearer(auto_error=False)
_system_clock = SystemClock()


def _decode(credentials: HTTPAuthorizationCredentials | None) -> Identity | None:
    if credentials is None:
        return None
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError:
        return None
    return Identity(
        username=payload["sub"],
        is_admin=bool(payload.get("is_admin", False)),
        is_tester=bool(payload.get("is_tester", False)),
    )


# ---------------------------------------------------------------------------
# Session gate
# ---------------------------------------------------------------------------


async def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> Identity | None:
    """The caller's identity, or None when no valid session is presented."""
    return _decode(credentials)


async def get_identity(identity: Identity | None = Depends(get_optional_identity)) -> Identity:
    """Require a valid session. Raises NotAuthenticated (401)."""
    if identity is None:
        raise NotAuthenticated
    return identity


async def ensure_logged_out(identity: Identity | None = Depends(get_optional_identity)) -> None:
    """Reject callers that already hold a valid session (register, login, links)."""
    if identity is not None:
        raise AlreadyAuthenticated


async def require_privilege(identity: Identity = Depends(get_identity)) -> Identity:
    """Admin or tester. Raises InsufficientPrivilege (403)."""
    if not identity.is_privileged:
        raise InsufficientPrivilege
    return identity


async def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    """Admin only. Raises InsufficientPrivilege (403)."""
    if not identity.is_admin:
        raise InsufficientPrivilege
    return identity


# ---------------------------------------------------------------------------
# Service factories
# ---------------------------------------------------------------------------


def get_clock() -> Clock:
    return _system_clock


def get_token_authority() -> TokenAuthority:
    return TokenAuthority(get_settings().action_token_secret)


def get_notifier() -> NotificationDispatcher:
    return get_dispatcher()


async def get_repository(db: AsyncSession = Depends(get_session)) -> UcpRepository:
    return UcpRepository(db)


async def get_account_service(
    repository: UcpRepository = Depends(get_repository),
    tokens: TokenAuthority = Depends(get_token_authority),
    notifier: NotificationDispatcher = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> AccountService:
    return AccountService(
        repository=repository,
        tokens=tokens,
        notifier=notifier,
        clock=clock,
        public_api_url=get_settings().public_api_url,
        logger=structlog.get_logger("ucp.accounts"),
    )


async def get_character_service(
    repository: UcpRepository = Depends(get_repository),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> CharacterService:
    return CharacterService(
        repository=repository,
        notifier=notifier,
        logger=structlog.get_logger("ucp.characters"),
    )
