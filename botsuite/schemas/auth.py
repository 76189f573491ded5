"""
botsuite/schemas/auth.py

Purpose: Session and login payloads

- Login and nickname request bodies
- Session, login and nickname responses
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional


class LoginRequest(BaseModel):
    # Required-ness is checked by the endpoint so the error message stays fixed
    uid: Optional[str] = None
    password: Optional[str] = None


class NicknameRequest(BaseModel):
    nickname: Optional[str] = None


class SessionResponse(BaseModel):
    authenticated: bool
    uid: Optional[str] = None
    nickname: Optional[str] = None


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    needs_nickname: bool = Field(..., alias="needsNickname")


class NicknameResponse(BaseModel):
    ok: bool = True
    nickname: str


class OkResponse(BaseModel):
    ok: bool = True
