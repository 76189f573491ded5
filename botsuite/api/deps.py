"""
botsuite/api/deps.py

Purpose: Shared request dependencies

- Resolves the session cookie to a server-side session
- Rejects unauthenticated API calls with 401
- Sets and clears the session cookie
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request, Response

from botsuite.core.config import settings
from botsuite.core.exceptions import AuthenticationError
from botsuite.services.session_service import SessionStore, get_session_store
from botsuite.utils.constants import MSG_NOT_AUTHENTICATED


@dataclass
class SessionContext:
    sid: str
    uid: str
    nickname: str


def get_optional_session(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
) -> Optional[SessionContext]:
    """Current session, or None when the cookie is absent, forged or expired."""
    sid = sessions.unsign(request.cookies.get(settings.SESSION_COOKIE_NAME))
    session = sessions.get(sid)
    if session is None:
        return None
    return SessionContext(sid=sid, uid=session.uid, nickname=session.nickname)


def require_session(
    session: Optional[SessionContext] = Depends(get_optional_session),
) -> SessionContext:
    if session is None:
        raise AuthenticationError(MSG_NOT_AUTHENTICATED)
    return session


def set_session_cookie(response: Response, cookie_value: str):
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        cookie_value,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(
        settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
