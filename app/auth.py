# app/auth.py
"""
Request identity.

Tokens are verified by the gateway in front of this service, which forwards the
caller's id and role as headers. An upstream middleware may instead put the id
on request.state.user_id; that value wins over the header.
"""

from typing import Literal, Optional

from fastapi import Depends, Request
from pydantic import BaseModel

from app.config import USER_ID_HEADER, USER_ROLE_HEADER
from app.errors import AuthenticationError, PermissionDeniedError


class CurrentUser(BaseModel):
    id: str
    role: Literal["client", "admin"] = "client"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def resolve_user_id(request: Request) -> Optional[str]:
    user_id = getattr(request.state, "user_id", None) or request.headers.get(USER_ID_HEADER)
    return user_id or None


def get_current_user(request: Request) -> CurrentUser:
    user_id = resolve_user_id(request)
    if not user_id:
        raise AuthenticationError()
    role = (request.headers.get(USER_ROLE_HEADER) or "client").lower()
    return CurrentUser(id=user_id, role="admin" if role == "admin" else "client")


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise PermissionDeniedError()
    return user
