"""The authenticated caller."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Who is calling, as captured in the session token at login."""

    username: str
    is_admin: bool = False
    is_tester: bool = False

    @property
    def is_privileged(self) -> bool:
        return self.is_admin or self.is_tester
