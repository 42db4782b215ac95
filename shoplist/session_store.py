import secrets
import threading
import time
from typing import Callable


class SessionStore:
    """
    In-memory login sessions keyed by opaque token with:
    - sliding TTL (expires ttl_seconds after last touch)
    - lazy eviction (expired entries count as absent; no sweeper thread)
    - thread-safe operations (one request thread each)
    """

    def __init__(self, ttl_seconds: int = 24 * 3600, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # token -> expires_at (epoch seconds)
        self._sessions: dict[str, float] = {}

    def create(self) -> str:
        # 32 random bytes -> 256 bits, URL-safe base64
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._sessions[token] = self._clock() + self.ttl_seconds
        return token

    def touch(self, token: str) -> bool:
        if not token:
            return False
        with self._lock:
            expires_at = self._sessions.get(token)
            if expires_at is None:
                return False
            now = self._clock()
            if now >= expires_at:
                del self._sessions[token]
                return False
            self._sessions[token] = now + self.ttl_seconds
            return True

    def revoke(self, token: str) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def expires_at(self, token: str) -> float | None:
        with self._lock:
            return self._sessions.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def sweep_expired(self) -> int:
        """
        Delete expired sessions. Returns how many entries were removed.
        """
        now = self._clock()
        removed = 0
        with self._lock:
            expired = [k for k, v in self._sessions.items() if v <= now]
            for k in expired:
                del self._sessions[k]
                removed += 1
        return removed
