"""
Signed action tokens for out-of-band links (account confirmation, password reset).

A token is HMAC-SHA256 over ``"{email}:{issued_at}"`` keyed with the server
secret and rendered as lowercase hex. Nothing is stored server-side: a link
is valid iff the signature recomputes and it was issued at most
``TOKEN_WINDOW_SECONDS`` ago. Replays inside the window are accepted.
"""

from __future__ import annotations

import hashlib
import hmac
from urllib.parse import urlencode

from ucp.errors import InvalidToken, TokenExpired

TOKEN_WINDOW_SECONDS = 15 * 60
_DELIMITER = ":"


class TokenAuthority:
    """Issues and validates signed (subject, timestamp) pairs."""

    def __init__(self, secret: str) -> None:
        self._key = secret.encode("utf-8")

    def issue(self, subject: str, issued_at: int) -> str:
        """Return the hex signature for (subject, issued_at). Deterministic."""
        data = f"{subject}{_DELIMITER}{issued_at}".encode()
        return hmac.new(self._key, data, hashlib.sha256).hexdigest()

    def validate(self, subject: str, signature: str, issued_at: int) -> bool:
        """
        Check a presented signature in constant time.

        Never raises. Does NOT enforce the time window; see ``is_fresh``.
        """
        expected = self.issue(subject, issued_at)
        return hmac.compare_digest(expected.encode(), signature.encode("utf-8", "replace"))

    @staticmethod
    def is_fresh(issued_at: int, now: int) -> bool:
        """True while ``now - issued_at`` is within the 15 minute window."""
        return now - issued_at <= TOKEN_WINDOW_SECONDS

    def check(self, subject: str, signature: str, issued_at: int, now: int) -> None:
        """
        Validate signature and window together.

        Raises:
            InvalidToken: If the signature does not match.
            TokenExpired: If the link is older than the window.
        """
        if not self.validate(subject, signature, issued_at):
            raise InvalidToken
        if not self.is_fresh(issued_at, now):
            raise TokenExpired


def build_action_link(base_url: str, path: str, email: str, token: str, timestamp: int) -> str:
    """Render a confirm/reset link carrying ``email``, ``token`` and ``timestamp``."""
    query = urlencode({"email": email, "token": token, "timestamp": timestamp})
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}?{query}"
