"""Authentication router: registration, confirmation, sessions, password reset."""

from __future__ import annotations

from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from ucp.accounts.service import AccountService
from ucp.auth.dependencies import (
    ensure_logged_out,
    get_account_service,
    get_identity,
    get_optional_identity,
)
from ucp.auth.identity import Identity
from ucp.auth.jwt import create_access_token
from ucp.auth.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    SessionResponse,
    UpdatePasswordRequest,
)
from ucp.config import get_settings
from ucp.middleware.rate_limit import client_ip

router = APIRouter(tags=["Authentication"])


def _session(identity: Identity | None) -> SessionResponse:
    if identity is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True,
        user=identity.username,
        is_admin=identity.is_admin,
        is_tester=identity.is_tester,
    )


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=201,
    dependencies=[Depends(ensure_logged_out)],
)
async def register(
    body: RegisterRequest,
    request: Request,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Create an account and email its confirmation link."""
    await accounts.register(body.username, body.email, body.password, ip=client_ip(request))
    return MessageResponse()


@router.get("/confirm", dependencies=[Depends(ensure_logged_out)])
async def confirm(
    email: str = Query(...),
    token: str = Query(...),
    timestamp: int = Query(...),
    accounts: AccountService = Depends(get_account_service),
) -> RedirectResponse:
    """Activate an account from its emailed link, then send the player to the panel."""
    await accounts.confirm(email, token, timestamp)
    return RedirectResponse(f"{get_settings().frontend_base_url.rstrip('/')}/", status_code=302)


@router.get("/reset-request", response_model=MessageResponse, dependencies=[Depends(ensure_logged_out)])
async def reset_request(
    email: str = Query(...),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Email a password reset link."""
    await accounts.request_password_reset(email)
    return MessageResponse()


@router.get("/confirm-reset", dependencies=[Depends(ensure_logged_out)])
async def confirm_reset(
    email: str = Query(...),
    token: str = Query(...),
    timestamp: int = Query(...),
    accounts: AccountService = Depends(get_account_service),
) -> RedirectResponse:
    """Validate a reset link and forward it to the new-password form."""
    accounts.check_reset_link(email, token, timestamp)
    query = urlencode({"email": email, "token": token, "timestamp": timestamp})
    return RedirectResponse(
        f"{get_settings().frontend_base_url.rstrip('/')}/password-reset?{query}",
        status_code=302,
    )


@router.post("/update-password", response_model=MessageResponse, dependencies=[Depends(ensure_logged_out)])
async def update_password(
    body: UpdatePasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Set a new password using a valid reset link."""
    await accounts.reset_password(body.email, body.token, body.timestamp, body.new_password)
    return MessageResponse()


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(ensure_logged_out)])
async def login(
    body: LoginRequest,
    request: Request,
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    """Authenticate with username + password and issue a session token."""
    identity = await accounts.login(body.username, body.password, ip=client_ip(request))
    settings = get_settings()
    return LoginResponse(
        access_token=create_access_token(identity.username, identity.is_admin, identity.is_tester),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        session=_session(identity),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(_identity: Identity = Depends(get_identity)) -> MessageResponse:
    """Sessions are stateless; the client discards its token."""
    return MessageResponse()


@router.get("/check-auth", response_model=SessionResponse)
async def check_auth(identity: Identity | None = Depends(get_optional_identity)) -> SessionResponse:
    return _session(identity)
