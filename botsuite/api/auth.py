"""
botsuite/api/auth.py

Purpose: Session, login, logout and nickname endpoints

- Login checks the credential store and opens a server-side session
- Nickname updates persist to the store, then refresh the session
- Session endpoint reports what the browser is logged in as
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from starlette.concurrency import run_in_threadpool

from botsuite.api.deps import (
    SessionContext,
    get_optional_session,
    require_session,
    set_session_cookie,
    clear_session_cookie,
)
from botsuite.core.exceptions import AuthenticationError, ValidationError
from botsuite.core.logging import get_logger, LogContext
from botsuite.schemas.auth import (
    LoginRequest,
    LoginResponse,
    NicknameRequest,
    NicknameResponse,
    OkResponse,
    SessionResponse,
)
from botsuite.services.credential_store import CredentialStore, get_credential_store
from botsuite.services.session_service import SessionStore, get_session_store
from botsuite.utils.constants import (
    MSG_CREDENTIALS_REQUIRED,
    MSG_INVALID_CREDENTIALS,
    MSG_NICKNAME_REQUIRED,
)
from botsuite.utils.text_utils import clean_field

logger = get_logger(__name__)
router = APIRouter()


@router.get("/session", response_model=SessionResponse)
async def session_info(session: Optional[SessionContext] = Depends(get_optional_session)):
    if session is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True,
        uid=session.uid,
        nickname=session.nickname or None,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    response: Response,
    payload: Optional[LoginRequest] = None,
    current: Optional[SessionContext] = Depends(get_optional_session),
    store: CredentialStore = Depends(get_credential_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """
    Authenticates a uid/password pair and starts a session.

    Returns `needsNickname` so the browser can route to the nickname page.
    """
    payload = payload or LoginRequest()
    if not payload.uid or not payload.password:
        raise ValidationError(MSG_CREDENTIALS_REQUIRED)

    user = await run_in_threadpool(store.authenticate, payload.uid, payload.password)
    if not user:
        raise AuthenticationError(MSG_INVALID_CREDENTIALS)

    # Never reuse a session id across logins
    if current is not None:
        sessions.destroy(current.sid)

    nickname = user.get("nickname") or ""
    sid = sessions.create(user["uid"], nickname)
    set_session_cookie(response, sessions.sign(sid))

    return LoginResponse(ok=True, needs_nickname=not nickname)


@router.post("/logout", response_model=OkResponse)
async def logout(
    response: Response,
    current: Optional[SessionContext] = Depends(get_optional_session),
    sessions: SessionStore = Depends(get_session_store),
):
    if current is not None:
        sessions.destroy(current.sid)
    clear_session_cookie(response)
    return OkResponse()


@router.post("/nickname", response_model=NicknameResponse)
async def update_nickname(
    payload: Optional[NicknameRequest] = None,
    session: SessionContext = Depends(require_session),
    store: CredentialStore = Depends(get_credential_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """
    Saves the nickname to the credential store, then mirrors it into the
    session so /api/session reflects it immediately.
    """
    nickname = clean_field(payload.nickname if payload else None)
    if not nickname:
        raise ValidationError(MSG_NICKNAME_REQUIRED)

    with LogContext(uid=session.uid):
        await run_in_threadpool(store.update_nickname, session.uid, nickname)
        sessions.set_nickname(session.sid, nickname)
        logger.info("Session nickname refreshed")

    return NicknameResponse(ok=True, nickname=nickname)
