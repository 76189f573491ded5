"""
botsuite/services/session_service.py

Purpose: Server-side sessions

- Holds {uid, nickname} per session id in process memory
- Fixed expiry window, expired entries pruned lazily
- Signs session ids for the cookie (itsdangerous)
"""

import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from botsuite.core.config import settings
from botsuite.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SessionData:
    uid: str
    nickname: str = ""
    created_at: float = field(default_factory=time.time)


class SessionStore:
    """
    In-memory session table keyed by random session id.

    The cookie only carries the signed id; uid and nickname never leave the
    server. Sessions expire `max_age` seconds after login.
    """

    def __init__(self, secret: str, max_age: int, salt: str = "botsuite.session"):
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret, salt=salt)
        self._sessions: Dict[str, SessionData] = {}
        self._lock = threading.Lock()

    def _expired(self, session: SessionData, now: float) -> bool:
        return now - session.created_at > self.max_age

    def _prune(self, now: float):
        stale = [sid for sid, s in self._sessions.items() if self._expired(s, now)]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.debug(f"Pruned {len(stale)} expired session(s)")

    def create(self, uid: str, nickname: str = "") -> str:
        """Creates a session and returns its id."""
        sid = secrets.token_urlsafe(32)
        with self._lock:
            self._prune(time.time())
            self._sessions[sid] = SessionData(uid=uid, nickname=nickname or "")
        logger.info(f"Session created for {uid}")
        return sid

    def get(self, sid: Optional[str]) -> Optional[SessionData]:
        if not sid:
            return None
        with self._lock:
            session = self._sessions.get(sid)
            if session and self._expired(session, time.time()):
                del self._sessions[sid]
                return None
            return session

    def set_nickname(self, sid: str, nickname: str) -> bool:
        with self._lock:
            session = self._sessions.get(sid)
            if not session:
                return False
            session.nickname = nickname
            return True

    def destroy(self, sid: Optional[str]):
        if not sid:
            return
        with self._lock:
            session = self._sessions.pop(sid, None)
        if session:
            logger.info(f"Session destroyed for {session.uid}")

    def sign(self, sid: str) -> str:
        """Returns the cookie value for a session id."""
        return self._serializer.dumps(sid)

    def unsign(self, cookie_value: Optional[str]) -> Optional[str]:
        """Returns the session id carried by a cookie, or None if invalid/expired."""
        if not cookie_value:
            return None
        try:
            return self._serializer.loads(cookie_value, max_age=self.max_age)
        except (BadSignature, SignatureExpired):
            return None

    def __len__(self) -> int:
        return len(self._sessions)


# Global session store instance
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the global session store."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore(
            secret=settings.SESSION_SECRET,
            max_age=settings.SESSION_MAX_AGE_SECONDS,
        )
    return _session_store
