"""CRUD helpers aligned with the ReviewHub SQLAlchemy schema.

This module provides lightweight, explicit CRUD classes per model in
``reviewhub.db.models``. All methods work with a SQLAlchemy ``Session`` and
flush on writes so IDs and relationship rows are available immediately.
Domain rules (status transitions, vote toggling, tombstones) live in
``reviewhub.services``; this layer only validates column-level shape.
"""

from __future__ import annotations

import re

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from reviewhub.errors import BadRequestError, ConflictError

from .models import (
    AdminProfile,
    Category,
    Comment,
    GuestProfile,
    Profile,
    Review,
    User,
    UserRole,
    Vote,
    VoteType,
)

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _require_non_empty(value: str | None, field_name: str) -> str:
    """Validate that a string field is not None, empty, or whitespace-only."""
    if value is None:
        raise BadRequestError(f"{field_name} is required", path=field_name)
    value = str(value).strip()
    if not value:
        raise BadRequestError(f"{field_name} must not be empty", path=field_name)
    return value


def _validate_email(email: str) -> str:
    """Validate basic email format and return the stripped, lowercased value."""
    email = _require_non_empty(email, "email")
    if not _EMAIL_RE.match(email):
        raise BadRequestError(f"Invalid email format: {email!r}", path="email")
    return email.lower()


def _validate_rating(rating: int) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise BadRequestError(f"rating must be an integer, got {type(rating).__name__}", path="rating")
    if rating < 1 or rating > 5:
        raise BadRequestError(f"rating must be between 1 and 5, got {rating}", path="rating")
    return rating


def _check_unique(
    session: Session, model, field, value, label: str, exclude_id: int | None = None,
) -> None:
    """Pre-check a UNIQUE column, raising ConflictError on conflict."""
    stmt = select(model).where(field == value)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if session.scalar(stmt) is not None:
        raise ConflictError(f"{label} {value!r} is already taken", path=label)


class UserCRUD:
    @staticmethod
    def get_by_id(session: Session, user_id: int) -> User | None:
        return session.get(User, user_id)

    @staticmethod
    def get_by_email(session: Session, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        return session.scalar(stmt)

    @staticmethod
    def create(
        session: Session,
        email: str,
        name: str,
        password_hash: str,
        role: UserRole = UserRole.GUEST,
        **kwargs,
    ) -> User:
        email = _validate_email(email)
        name = _require_non_empty(name, "name")
        password_hash = _require_non_empty(password_hash, "password_hash")
        _check_unique(session, User, User.email, email, "email")
        user = User(email=email, name=name, password_hash=password_hash, role=role, **kwargs)
        session.add(user)
        session.flush()
        return user

    @staticmethod
    def update(session: Session, user_id: int, **kwargs) -> User:
        user = session.get(User, user_id)
        if not user:
            raise BadRequestError(f"User with id {user_id} not found")
        if "email" in kwargs:
            kwargs["email"] = _validate_email(kwargs["email"])
            _check_unique(session, User, User.email, kwargs["email"], "email", exclude_id=user_id)
        if "name" in kwargs:
            kwargs["name"] = _require_non_empty(kwargs["name"], "name")
        for key, value in kwargs.items():
            setattr(user, key, value)
        session.flush()
        return user


class ProfileCRUD:
    @staticmethod
    def get_by_user_id(session: Session, user_id: int) -> Profile | None:
        return session.get(Profile, user_id)

    @staticmethod
    def create_for(session: Session, user: User, **kwargs) -> Profile:
        profile_cls = AdminProfile if user.role == UserRole.ADMIN else GuestProfile
        profile = profile_cls(user_id=user.id, name=user.name, **kwargs)
        session.add(profile)
        session.flush()
        return profile


class CategoryCRUD:
    @staticmethod
    def get_by_id(session: Session, category_id: int) -> Category | None:
        return session.get(Category, category_id)

    @staticmethod
    def get_by_name_ci(session: Session, name: str, exclude_id: int | None = None) -> Category | None:
        stmt = select(Category).where(func.lower(Category.name) == name.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return session.scalar(stmt)

    @staticmethod
    def create(session: Session, name: str) -> Category:
        category = Category(name=_require_non_empty(name, "name"))
        session.add(category)
        session.flush()
        return category

    @staticmethod
    def count_reviews(session: Session, category_id: int) -> int:
        stmt = select(func.count()).select_from(Review).where(Review.category_id == category_id)
        return session.scalar(stmt) or 0

    @staticmethod
    def delete(session: Session, category: Category) -> None:
        session.delete(category)
        session.flush()


class ReviewCRUD:
    @staticmethod
    def get_by_id(session: Session, review_id: int) -> Review | None:
        return session.get(Review, review_id)

    @staticmethod
    def create(
        session: Session,
        user_id: int,
        category_id: int,
        title: str,
        description: str,
        rating: int,
        **kwargs,
    ) -> Review:
        review = Review(
            user_id=user_id,
            category_id=category_id,
            title=_require_non_empty(title, "title"),
            description=_require_non_empty(description, "description"),
            rating=_validate_rating(rating),
            **kwargs,
        )
        session.add(review)
        session.flush()
        return review

    @staticmethod
    def update(session: Session, review_id: int, **kwargs) -> Review:
        review = session.get(Review, review_id)
        if not review:
            raise BadRequestError(f"Review with id {review_id} not found")
        for field_name in ("title", "description"):
            if field_name in kwargs:
                kwargs[field_name] = _require_non_empty(kwargs[field_name], field_name)
        if "rating" in kwargs:
            kwargs["rating"] = _validate_rating(kwargs["rating"])
        for key, value in kwargs.items():
            setattr(review, key, value)
        session.flush()
        return review

    @staticmethod
    def delete_cascade(session: Session, review_id: int) -> dict[str, int]:
        """Bulk-delete a review with its votes and comments.

        Replies go before top-level comments so the self-referencing foreign
        key is never violated. Returns the number of rows removed per table.
        """
        votes = session.execute(delete(Vote).where(Vote.review_id == review_id)).rowcount
        replies = session.execute(
            delete(Comment).where(Comment.review_id == review_id, Comment.parent_id.is_not(None))
        ).rowcount
        top_level = session.execute(
            delete(Comment).where(Comment.review_id == review_id, Comment.parent_id.is_(None))
        ).rowcount
        reviews = session.execute(delete(Review).where(Review.id == review_id)).rowcount
        session.expire_all()
        return {
            "votes": votes,
            "comments": replies + top_level,
            "reviews": reviews,
        }


class VoteCRUD:
    @staticmethod
    def get(session: Session, review_id: int, user_id: int) -> Vote | None:
        stmt = select(Vote).where(Vote.review_id == review_id, Vote.user_id == user_id)
        return session.scalar(stmt)

    @staticmethod
    def create(session: Session, review_id: int, user_id: int, vote_type: VoteType) -> Vote:
        vote = Vote(review_id=review_id, user_id=user_id, type=vote_type)
        session.add(vote)
        session.flush()
        return vote

    @staticmethod
    def delete(session: Session, vote: Vote) -> None:
        session.delete(vote)
        session.flush()

    @staticmethod
    def count_by_type(session: Session, review_ids: list[int]) -> dict[int, dict[VoteType, int]]:
        if not review_ids:
            return {}
        stmt = (
            select(Vote.review_id, Vote.type, func.count())
            .where(Vote.review_id.in_(review_ids))
            .group_by(Vote.review_id, Vote.type)
        )
        counts: dict[int, dict[VoteType, int]] = {rid: {} for rid in review_ids}
        for review_id, vote_type, count in session.execute(stmt):
            counts[review_id][vote_type] = count
        return counts


class CommentCRUD:
    @staticmethod
    def get_by_id(session: Session, comment_id: int) -> Comment | None:
        return session.get(Comment, comment_id)

    @staticmethod
    def create(
        session: Session,
        review_id: int,
        user_id: int,
        content: str,
        parent_id: int | None = None,
    ) -> Comment:
        comment = Comment(
            review_id=review_id,
            user_id=user_id,
            content=_require_non_empty(content, "content"),
            parent_id=parent_id,
        )
        session.add(comment)
        session.flush()
        return comment

    @staticmethod
    def count_replies(session: Session, comment_id: int) -> int:
        stmt = select(func.count()).select_from(Comment).where(Comment.parent_id == comment_id)
        return session.scalar(stmt) or 0

    @staticmethod
    def count_by_review(session: Session, review_ids: list[int]) -> dict[int, int]:
        if not review_ids:
            return {}
        stmt = (
            select(Comment.review_id, func.count())
            .where(Comment.review_id.in_(review_ids))
            .group_by(Comment.review_id)
        )
        counts = {rid: 0 for rid in review_ids}
        for review_id, count in session.execute(stmt):
            counts[review_id] = count
        return counts

    @staticmethod
    def delete(session: Session, comment: Comment) -> None:
        session.delete(comment)
        session.flush()
