"""
PIN login and per-request session checks.

A single shared PIN guards the whole app. An empty PIN disables auth.
"""

import enum
import hmac
import logging
from typing import Optional

from shoplist.errors import AuthError
from shoplist.session_store import SessionStore

logger = logging.getLogger("shoplist_backend")


class Decision(enum.Enum):
    ADMIT = "admit"
    DENY = "deny"


class AuthGate:
    def __init__(self, sessions: SessionStore, pin: str = ""):
        self._sessions = sessions
        self._pin = pin or ""

    @property
    def enabled(self) -> bool:
        return bool(self._pin)

    def authenticate(self, pin: str) -> str:
        """Verify the PIN and open a session. Returns the session token."""
        supplied = (pin or "").encode("utf-8")
        if not self.enabled or not hmac.compare_digest(supplied, self._pin.encode("utf-8")):
            logger.info("[AUTH] Rejected login attempt")
            raise AuthError("Incorrect PIN")
        return self._sessions.create()

    def authorize(self, token: Optional[str]) -> Decision:
        if not self.enabled:
            return Decision.ADMIT
        if not token:
            return Decision.DENY
        # touch() refreshes the sliding expiry as a side effect
        return Decision.ADMIT if self._sessions.touch(token) else Decision.DENY

    def logout(self, token: Optional[str]) -> None:
        if token:
            self._sessions.revoke(token)
