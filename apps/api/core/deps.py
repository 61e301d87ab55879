from __future__ import annotations

from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from reviewhub.db.crud import UserCRUD
from reviewhub.db.models import User, UserStatus
from reviewhub.db.session import SessionLocal
from reviewhub.services import Actor, PaginationParams, PaginationPolicy
from sqlalchemy.orm import Session

from .auth import decode_token
from .config import settings

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    with SessionLocal() as session:
        yield session


def _load_active_user(db: Session, token: str) -> User | None:
    user_id = decode_token(token)
    user = UserCRUD.get_by_id(db, user_id)
    if user is None or user.status != UserStatus.ACTIVE:
        return None
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        user = _load_active_user(db, credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def get_current_actor(current_user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(current_user)


def get_optional_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Actor | None:
    if credentials is None:
        return None
    try:
        user = _load_active_user(db, credentials.credentials)
    except jwt.PyJWTError:
        return None
    return Actor.from_user(user) if user is not None else None


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return actor


def get_pagination(
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    sortBy: str | None = Query(default=None),
    sortOrder: str | None = Query(default=None),
) -> PaginationParams:
    return PaginationPolicy(max_limit=settings.MAX_PAGE_LIMIT).resolve(page, limit, sortBy, sortOrder)
