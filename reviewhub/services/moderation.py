"""Admin moderation: status changes with notes, the pending queue and stats."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from reviewhub.db.crud import ReviewCRUD
from reviewhub.db.models import Category, Review, ReviewStatus, User, UserRole, Vote, VoteType
from reviewhub.errors import BadRequestError, NotFoundError

from .pagination import Page, PaginationParams, paginate
from .reviews import (
    MODERATION_TARGETS,
    ReviewSummary,
    order_clause,
    summarize,
    transition_status,
    validate_premium,
)

logger = logging.getLogger(__name__)


class ModerationAction(str, Enum):
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"


_ACTION_TARGETS = {
    ModerationAction.PUBLISH: ReviewStatus.PUBLISHED,
    ModerationAction.UNPUBLISH: ReviewStatus.UNPUBLISHED,
}


@dataclass
class PremiumSettings:
    is_premium: bool
    premium_price: Decimal | float | str | None = None


@dataclass
class AdminReviewFilters:
    """``status=None`` lists every status."""

    status: ReviewStatus | None = None
    category_id: int | None = None
    user_id: int | None = None
    is_premium: bool | None = None
    search_term: str | None = None


@dataclass(frozen=True)
class ReviewStats:
    total: int
    published: int
    draft: int
    unpublished: int
    premium: int


@dataclass
class DashboardStats:
    users_by_role: dict[str, int]
    reviews: ReviewStats
    categories: int
    upvotes: int
    downvotes: int
    recent_reviews: list[ReviewSummary] = field(default_factory=list)
    popular_reviews: list[ReviewSummary] = field(default_factory=list)

    @property
    def total_users(self) -> int:
        return sum(self.users_by_role.values())

    @property
    def total_votes(self) -> int:
        return self.upvotes + self.downvotes


def _get_review(session: Session, review_id: int) -> Review:
    review = ReviewCRUD.get_by_id(session, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


def _coerce_action(action: ModerationAction | str) -> ModerationAction:
    if isinstance(action, ModerationAction):
        return action
    try:
        return ModerationAction(str(action).strip().lower())
    except ValueError:
        raise BadRequestError(
            f"Action must be 'publish' or 'unpublish', got {action!r}", path="action"
        ) from None


def moderate_review(
    session: Session,
    review_id: int,
    action: ModerationAction | str,
    note: str | None = None,
) -> Review:
    """Publish or unpublish a review and overwrite its moderation note.

    Omitting ``note`` clears any previous note.
    """
    action = _coerce_action(action)
    review = _get_review(session, review_id)
    transition_status(review, _ACTION_TARGETS[action])
    review.moderation_note = note.strip() if note and note.strip() else None
    session.flush()
    logger.info(f"Review {review_id} moderated: {action.value}")
    return review


def publish_review(session: Session, review_id: int, note: str | None = None) -> Review:
    return moderate_review(session, review_id, ModerationAction.PUBLISH, note)


def unpublish_review(session: Session, review_id: int, note: str | None = None) -> Review:
    return moderate_review(session, review_id, ModerationAction.UNPUBLISH, note)


def update_review_status(
    session: Session,
    review_id: int,
    status: ReviewStatus | str,
    premium: PremiumSettings | None = None,
    note: str | None = None,
) -> Review:
    try:
        status = ReviewStatus(status)
    except ValueError:
        raise BadRequestError(f"Invalid review status: {status!r}", path="status") from None
    if status not in MODERATION_TARGETS:
        raise BadRequestError(f"Cannot set review status to {status.value}", path="status")

    review = _get_review(session, review_id)
    if premium is not None:
        review.premium_price = validate_premium(premium.is_premium, premium.premium_price)
        review.is_premium = premium.is_premium
    transition_status(review, status)
    review.moderation_note = note.strip() if note and note.strip() else None
    session.flush()
    return review


def list_reviews(
    session: Session, filters: AdminReviewFilters, pagination: PaginationParams
) -> Page[ReviewSummary]:
    stmt = select(Review).options(selectinload(Review.user), selectinload(Review.category))
    if filters.status is not None:
        stmt = stmt.where(Review.status == filters.status)
    if filters.category_id is not None:
        stmt = stmt.where(Review.category_id == filters.category_id)
    if filters.user_id is not None:
        stmt = stmt.where(Review.user_id == filters.user_id)
    if filters.is_premium is not None:
        stmt = stmt.where(Review.is_premium == filters.is_premium)
    if filters.search_term and filters.search_term.strip():
        term = filters.search_term.strip().lower()
        stmt = stmt.where(
            or_(
                func.lower(Review.title).contains(term),
                func.lower(Review.description).contains(term),
            )
        )
    stmt = stmt.order_by(*order_clause(pagination))
    reviews, meta = paginate(session, stmt, pagination)
    return Page(meta=meta, data=summarize(session, reviews))


def get_pending_reviews(session: Session, pagination: PaginationParams) -> Page[ReviewSummary]:
    return list_reviews(session, AdminReviewFilters(status=ReviewStatus.DRAFT), pagination)


def get_review_stats(session: Session) -> ReviewStats:
    by_status = dict(
        session.execute(select(Review.status, func.count()).group_by(Review.status)).all()
    )
    premium = session.scalar(
        select(func.count()).select_from(Review).where(Review.is_premium.is_(True))
    ) or 0
    return ReviewStats(
        total=sum(by_status.values()),
        published=by_status.get(ReviewStatus.PUBLISHED, 0),
        draft=by_status.get(ReviewStatus.DRAFT, 0),
        unpublished=by_status.get(ReviewStatus.UNPUBLISHED, 0),
        premium=premium,
    )


def get_dashboard_stats(session: Session, sample_size: int = 5) -> DashboardStats:
    users_by_role = {role.value: 0 for role in UserRole}
    for role, count in session.execute(select(User.role, func.count()).group_by(User.role)):
        users_by_role[role.value] = count

    votes_by_type = dict(session.execute(select(Vote.type, func.count()).group_by(Vote.type)).all())
    categories = session.scalar(select(func.count()).select_from(Category)) or 0

    recent = session.scalars(
        select(Review).order_by(Review.created_at.desc(), Review.id.desc()).limit(sample_size)
    ).all()

    vote_count = (
        select(Vote.review_id, func.count(Vote.id).label("vote_count"))
        .group_by(Vote.review_id)
        .subquery()
    )
    popular = session.scalars(
        select(Review)
        .join(vote_count, vote_count.c.review_id == Review.id)
        .where(Review.status == ReviewStatus.PUBLISHED)
        .order_by(vote_count.c.vote_count.desc(), Review.id.desc())
        .limit(sample_size)
    ).all()

    return DashboardStats(
        users_by_role=users_by_role,
        reviews=get_review_stats(session),
        categories=categories,
        upvotes=votes_by_type.get(VoteType.UPVOTE, 0),
        downvotes=votes_by_type.get(VoteType.DOWNVOTE, 0),
        recent_reviews=summarize(session, list(recent)),
        popular_reviews=summarize(session, list(popular)),
    )
