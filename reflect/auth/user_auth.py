"""
Request Identity
================

Authentication happens upstream (session middleware / gateway). By the time a
request reaches a router, the caller's user id is either on
``request.state.user_id`` or in the ``X-User-ID`` header. This dependency
turns it into an AuthenticatedUser, checking the user exists and is active.

Resolved identities are cached for ``settings.auth_cache_ttl`` seconds
(300 by default). The cache is not invalidated on writes, so a user who is
deactivated keeps passing this check until their entry expires.
"""

import logging
from typing import Optional

from cachetools import TTLCache
from fastapi import Depends, Header, Request
from pydantic import BaseModel
from sqlmodel import Session

from reflect.config import settings
from reflect.core.database import get_session
from reflect.core.errors import ReflectError
from reflect.core.structured_logging import user_id_var
from reflect.models.user import User
from reflect.services.user_lookup import parse_id

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    user_id: int
    email: str


identity_cache: TTLCache = TTLCache(maxsize=1000, ttl=settings.auth_cache_ttl)


async def get_current_user(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_session),
) -> AuthenticatedUser:
    """FastAPI dependency: resolve the calling user or fail with 401."""
    raw = getattr(request.state, "user_id", None) or x_user_id
    user_pk = parse_id(raw)
    if user_pk is None:
        raise ReflectError("REF-SEC-001", detail="no user identity on request")

    cached = identity_cache.get(user_pk)
    if cached is None:
        user = db.get(User, user_pk)
        if user is None or not user.active:
            raise ReflectError("REF-SEC-001", detail=f"user {user_pk} unknown or inactive")
        cached = AuthenticatedUser(user_id=user.id, email=user.email)
        identity_cache[user_pk] = cached

    user_id_var.set(cached.user_id)
    return cached
