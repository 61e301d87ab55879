"""User accounts and their role-specific profiles.

Every user owns exactly one profile whose variant follows the user's role:
``AdminProfile`` carries a contact number, ``GuestProfile`` an address.
"""

from __future__ import annotations

import logging
from typing import Union

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from reviewhub.db.crud import ProfileCRUD, UserCRUD
from reviewhub.db.models import AdminProfile, GuestProfile, User, UserRole, UserStatus
from reviewhub.errors import BadRequestError, NotFoundError

from .pagination import Page, PaginationParams, paginate

logger = logging.getLogger(__name__)

UserProfile = Union[AdminProfile, GuestProfile]

_VARIANT_FIELDS = {
    UserRole.ADMIN: "contact_number",
    UserRole.GUEST: "address",
}


def _variant_kwargs(role: UserRole, contact_number: str | None, address: str | None) -> dict:
    if role == UserRole.ADMIN and address is not None:
        raise BadRequestError("Admin profiles have no address", path="address")
    if role == UserRole.GUEST and contact_number is not None:
        raise BadRequestError("Guest profiles have no contact number", path="contactNumber")
    value = contact_number if role == UserRole.ADMIN else address
    return {_VARIANT_FIELDS[role]: value} if value is not None else {}


def register_user(
    session: Session,
    name: str,
    email: str,
    password_hash: str,
    role: UserRole = UserRole.GUEST,
    profile_photo: str | None = None,
    contact_number: str | None = None,
    address: str | None = None,
) -> User:
    """Create a user and its matching profile in the caller's transaction."""
    extra = _variant_kwargs(role, contact_number, address)
    user = UserCRUD.create(session, email=email, name=name, password_hash=password_hash, role=role)
    ProfileCRUD.create_for(session, user, profile_photo=profile_photo, **extra)
    logger.info(f"Registered {role.value.lower()} user {user.id}")
    return user


def get_active_user(session: Session, user_id: int) -> User:
    user = UserCRUD.get_by_id(session, user_id)
    if user is None or user.status != UserStatus.ACTIVE:
        raise NotFoundError("User not found")
    return user


def get_profile(session: Session, user_id: int) -> UserProfile:
    user = get_active_user(session, user_id)
    profile = ProfileCRUD.get_by_user_id(session, user.id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


def update_profile(
    session: Session,
    user_id: int,
    name: str | None = None,
    profile_photo: str | None = None,
    contact_number: str | None = None,
    address: str | None = None,
) -> UserProfile:
    """Update the user row and its profile row together."""
    profile = get_profile(session, user_id)
    user = profile.user
    extra = _variant_kwargs(user.role, contact_number, address)
    if name is not None:
        UserCRUD.update(session, user.id, name=name)
        profile.name = user.name
    if profile_photo is not None:
        profile.profile_photo = profile_photo
    for key, value in extra.items():
        setattr(profile, key, value)
    session.flush()
    return profile


def soft_delete_user(session: Session, user_id: int) -> User:
    user = UserCRUD.get_by_id(session, user_id)
    if user is None:
        raise NotFoundError("User not found")
    user.status = UserStatus.DELETED
    session.flush()
    logger.info(f"User {user_id} soft-deleted")
    return user


def list_users(
    session: Session,
    pagination: PaginationParams,
    search_term: str | None = None,
    role: UserRole | None = None,
) -> Page[User]:
    stmt = select(User).options(selectinload(User.profile)).where(User.status != UserStatus.DELETED)
    if role is not None:
        stmt = stmt.where(User.role == role)
    if search_term and search_term.strip():
        term = search_term.strip().lower()
        stmt = stmt.where(
            or_(func.lower(User.name).contains(term), func.lower(User.email).contains(term))
        )
    stmt = stmt.order_by(User.created_at.desc(), User.id.desc())
    users, meta = paginate(session, stmt, pagination)
    return Page(meta=meta, data=users)
