"""
botsuite/api/pages.py

Purpose: Static page serving with session gating

- login.html is always public
- nickname.html needs a session that has no nickname yet
- every other page needs a session with a nickname
"""

import re
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, RedirectResponse

from botsuite.api.deps import SessionContext, get_optional_session
from botsuite.core.config import settings

router = APIRouter(include_in_schema=False)

LOGIN_PAGE = "/login.html"
NICKNAME_PAGE = "/nickname.html"
HOME_PAGE = "/index.html"
PAGE_NAME = re.compile(r"^[A-Za-z0-9_-]+$")


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


def _page(name: str) -> FileResponse:
    path = Path(settings.PUBLIC_DIR) / f"{name}.html"
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(path, media_type="text/html")


def gate(session: Optional[SessionContext], page: str) -> Optional[str]:
    """
    Returns the redirect target for a page request, or None to serve it.
    """
    if page == "login":
        return None
    if session is None:
        return LOGIN_PAGE
    if page == "nickname":
        return HOME_PAGE if session.nickname else None
    if not session.nickname:
        return NICKNAME_PAGE
    return None


@router.get("/")
async def home(session: Optional[SessionContext] = Depends(get_optional_session)):
    target = gate(session, "index")
    if target:
        return _redirect(target)
    return _page("index")


@router.get("/{page}.html")
async def page(page: str, session: Optional[SessionContext] = Depends(get_optional_session)):
    if not PAGE_NAME.match(page):
        raise HTTPException(status_code=404, detail="Not Found")
    target = gate(session, page)
    if target:
        return _redirect(target)
    return _page(page)
