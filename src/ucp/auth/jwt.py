"""
RS256 JWT session tokens.

The session is entirely carried by the token: username plus the role flags
captured at login. Nothing is stored server-side, so logout only drops the
token on the client and a password reset does not revoke live sessions.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, NamedTuple

import jwt

from ucp.config import get_settings

SESSION_TOKEN_TYPE = "access"


class KeyPair(NamedTuple):
    private: str
    public: str


@lru_cache(maxsize=1)
def _keys() -> KeyPair:
    """PEM keys named in settings, read once per process."""
    settings = get_settings()
    return KeyPair(
        private=Path(settings.jwt_private_key_path).read_text(),
        public=Path(settings.jwt_public_key_path).read_text(),
    )


def reset_keys() -> None:
    """Forget the cached key pair so the next call rereads the files."""
    _keys.cache_clear()


def create_access_token(username: str, is_admin: bool, is_tester: bool) -> str:
    """
    Create a session token (24 hours by default).

    Args:
        username: The account name.
        is_admin: Admin level > 0 at login time.
        is_tester: Tester level > 0 at login time.
    """
    settings = get_settings()
    issued = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": username,
        "is_admin": is_admin,
        "is_tester": is_tester,
        "type": SESSION_TOKEN_TYPE,
        "iss": settings.jwt_issuer,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    return jwt.encode(claims, _keys().private, algorithm=settings.jwt_algorithm)


def verify_token(token: str, expected_type: str = SESSION_TOKEN_TYPE) -> dict[str, Any]:
    """
    Decode ``token`` and check signature, issuer, expiry and type.

    Raises:
        jwt.InvalidTokenError: On any failure. Expiry is reported with its own message.
    """
    settings = get_settings()
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            _keys().public,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if claims.get("type") != expected_type:
        msg = f"Expected token type '{expected_type}', got '{claims.get('type')}'"
        raise jwt.InvalidTokenError(msg)
    return claims
