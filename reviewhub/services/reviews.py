"""Review lifecycle: status machine, premium gating and the review read paths.

Status machine::

    DRAFT ──moderation──▶ PUBLISHED ◀──moderation──▶ UNPUBLISHED
                              │
                              └── non-admin edit ──▶ DRAFT

Admins create reviews directly as PUBLISHED; everyone else starts in DRAFT.
Any edit of a PUBLISHED review by its (non-admin) author sends it back to
DRAFT for re-moderation. There is no terminal state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from reviewhub.db.crud import CategoryCRUD, ReviewCRUD, VoteCRUD
from reviewhub.db.models import Comment, Review, ReviewStatus, Vote, VoteType
from reviewhub.errors import BadRequestError, ForbiddenError, NotFoundError

from . import comments as comment_thread
from . import votes as vote_ledger
from .pagination import Page, PaginationParams, paginate
from .principal import Actor

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100

SORT_FIELDS = {
    "createdAt": Review.created_at,
    "updatedAt": Review.updated_at,
    "rating": Review.rating,
    "title": Review.title,
}

# Same-state moves are always allowed so moderation can be repeated.
_VALID_TRANSITIONS: dict[ReviewStatus, set[ReviewStatus]] = {
    ReviewStatus.DRAFT: {ReviewStatus.PUBLISHED, ReviewStatus.UNPUBLISHED},
    ReviewStatus.PUBLISHED: {ReviewStatus.UNPUBLISHED, ReviewStatus.DRAFT},
    ReviewStatus.UNPUBLISHED: {ReviewStatus.PUBLISHED},
}

MODERATION_TARGETS = frozenset({ReviewStatus.PUBLISHED, ReviewStatus.UNPUBLISHED})


@dataclass
class ReviewDraft:
    title: str
    description: str
    rating: int
    category_id: int
    purchase_source: str | None = None
    is_premium: bool = False
    premium_price: Decimal | float | str | None = None


@dataclass
class ReviewPatch:
    """Partial update; ``None`` means "leave unchanged"."""

    title: str | None = None
    description: str | None = None
    rating: int | None = None
    category_id: int | None = None
    purchase_source: str | None = None
    is_premium: bool | None = None
    premium_price: Decimal | float | str | None = None
    status: ReviewStatus | None = None


@dataclass
class ReviewFilters:
    status: ReviewStatus | None = None
    category_id: int | None = None
    is_premium: bool | None = None
    title: str | None = None
    rating: int | None = None
    user_id: int | None = None


@dataclass(frozen=True)
class ReviewDeletion:
    review_id: int
    votes_removed: int
    comments_removed: int


@dataclass
class ReviewSummary:
    review: Review
    upvotes: int = 0
    downvotes: int = 0
    comment_count: int = 0

    @property
    def description_preview(self) -> str:
        return preview_description(self.review)


@dataclass
class ReviewDetail:
    review: Review
    votes: vote_ledger.VoteCounts
    viewer_vote: VoteType | None = None
    comments: list[comment_thread.ThreadEntry] = field(default_factory=list)


@dataclass
class FeaturedReviews:
    highest_rated: list[ReviewSummary]
    most_voted: list[ReviewSummary]


# ---------------------------------------------------------------------------
# Invariant helpers
# ---------------------------------------------------------------------------


def _to_price(value: Decimal | float | str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise BadRequestError(f"Invalid premium price: {value!r}", path="premiumPrice") from None
    return price


def validate_premium(is_premium: bool, premium_price: Decimal | float | str | None) -> Decimal | None:
    """Return the price to persist for the given premium flag.

    A premium review needs a strictly positive price; a regular review never
    stores one.
    """
    if not is_premium:
        return None
    price = _to_price(premium_price)
    if price is None or not price.is_finite() or price <= 0:
        raise BadRequestError(
            "Premium reviews must have a premium price greater than 0", path="premiumPrice"
        )
    return price


def transition_status(review: Review, target: ReviewStatus) -> None:
    current = review.status
    if target != current and target not in _VALID_TRANSITIONS[current]:
        raise BadRequestError(
            f"Cannot move review from {current.value} to {target.value}", path="status"
        )
    if target != current:
        logger.info(f"Review {review.id} status {current.value} -> {target.value}")
    review.status = target


def preview_description(review: Review) -> str:
    if review.is_premium and len(review.description) > PREVIEW_LENGTH:
        return review.description[:PREVIEW_LENGTH] + "..."
    return review.description


def _get_review(session: Session, review_id: int) -> Review:
    review = ReviewCRUD.get_by_id(session, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


def _authorize_owner_or_admin(review: Review, actor: Actor, verb: str) -> None:
    if review.user_id != actor.user_id and not actor.is_admin:
        logger.warning(f"User {actor.user_id} denied {verb} on review {review.id}")
        raise ForbiddenError(f"You are not allowed to {verb} this review")


def _require_category(session: Session, category_id: int) -> None:
    if CategoryCRUD.get_by_id(session, category_id) is None:
        raise NotFoundError("Category not found")


def _clean_images(images: list[str] | None) -> list[str]:
    return [url.strip() for url in images or [] if url and url.strip()]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def create_review(
    session: Session, actor: Actor, draft: ReviewDraft, images: list[str] | None = None
) -> Review:
    premium_price = validate_premium(draft.is_premium, draft.premium_price)
    _require_category(session, draft.category_id)
    status = ReviewStatus.PUBLISHED if actor.is_admin else ReviewStatus.DRAFT
    review = ReviewCRUD.create(
        session,
        user_id=actor.user_id,
        category_id=draft.category_id,
        title=draft.title,
        description=draft.description,
        rating=draft.rating,
        purchase_source=draft.purchase_source,
        is_premium=bool(draft.is_premium),
        premium_price=premium_price,
        images=_clean_images(images),
        status=status,
    )
    logger.info(f"Review {review.id} created by user {actor.user_id} as {status.value}")
    return review


def update_review(
    session: Session,
    review_id: int,
    actor: Actor,
    patch: ReviewPatch,
    new_images: list[str] | None = None,
) -> Review:
    review = _get_review(session, review_id)
    _authorize_owner_or_admin(review, actor, "update")

    changes: dict = {}
    for name in ("title", "description", "rating", "purchase_source"):
        value = getattr(patch, name)
        if value is not None:
            changes[name] = value
    if patch.category_id is not None:
        _require_category(session, patch.category_id)
        changes["category_id"] = patch.category_id

    is_premium = review.is_premium
    premium_price = review.premium_price
    if actor.is_admin:
        if patch.is_premium is not None:
            is_premium = patch.is_premium
        if patch.premium_price is not None:
            premium_price = patch.premium_price
    elif patch.is_premium is not None or patch.premium_price is not None:
        logger.debug(f"Ignoring premium fields from non-admin user {actor.user_id}")
    changes["is_premium"] = is_premium
    changes["premium_price"] = validate_premium(is_premium, premium_price)

    if new_images:
        changes["images"] = [*review.images, *_clean_images(new_images)]

    if patch.status is not None:
        if not actor.is_admin:
            logger.debug(f"Ignoring status change from non-admin user {actor.user_id}")
        elif patch.status not in MODERATION_TARGETS:
            raise BadRequestError(f"Cannot set review status to {patch.status.value}", path="status")

    review = ReviewCRUD.update(session, review_id, **changes)

    if actor.is_admin:
        if patch.status is not None:
            transition_status(review, patch.status)
    elif review.status == ReviewStatus.PUBLISHED:
        transition_status(review, ReviewStatus.DRAFT)
    session.flush()
    return review


def delete_review(session: Session, review_id: int, actor: Actor) -> ReviewDeletion:
    review = _get_review(session, review_id)
    _authorize_owner_or_admin(review, actor, "delete")
    try:
        removed = ReviewCRUD.delete_cascade(session, review_id)
    except SQLAlchemyError:
        logger.exception(f"Deleting review {review_id} failed, rolling back")
        session.rollback()
        raise
    logger.info(
        f"Review {review_id} deleted by user {actor.user_id} "
        f"({removed['votes']} votes, {removed['comments']} comments)"
    )
    return ReviewDeletion(review_id, removed["votes"], removed["comments"])


def remove_image(session: Session, review_id: int, actor: Actor, image_url: str) -> Review:
    review = _get_review(session, review_id)
    _authorize_owner_or_admin(review, actor, "update")
    images = list(review.images)
    if image_url in images:
        images.remove(image_url)
        review.images = images
        session.flush()
    return review


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def order_clause(pagination: PaginationParams):
    column = SORT_FIELDS.get(pagination.sort_by)
    if column is None:
        raise BadRequestError(
            f"Cannot sort reviews by {pagination.sort_by!r}; "
            f"expected one of {', '.join(SORT_FIELDS)}",
            path="sortBy",
        )
    if pagination.sort_order == "asc":
        return column.asc(), Review.id.asc()
    return column.desc(), Review.id.desc()


def summarize(session: Session, reviews: list[Review]) -> list[ReviewSummary]:
    ids = [review.id for review in reviews]
    vote_counts = vote_ledger.counts_for_reviews(session, ids)
    comment_counts = comment_thread.counts_for_reviews(session, ids)
    return [
        ReviewSummary(
            review=review,
            upvotes=vote_counts[review.id].upvotes,
            downvotes=vote_counts[review.id].downvotes,
            comment_count=comment_counts[review.id],
        )
        for review in reviews
    ]


def apply_filters(stmt, filters: ReviewFilters):
    if filters.status is not None:
        stmt = stmt.where(Review.status == filters.status)
    if filters.category_id is not None:
        stmt = stmt.where(Review.category_id == filters.category_id)
    if filters.is_premium is not None:
        stmt = stmt.where(Review.is_premium == filters.is_premium)
    if filters.title:
        stmt = stmt.where(func.lower(Review.title).contains(filters.title.strip().lower()))
    if filters.rating is not None:
        stmt = stmt.where(Review.rating == filters.rating)
    if filters.user_id is not None:
        stmt = stmt.where(Review.user_id == filters.user_id)
    return stmt


def get_all_reviews(
    session: Session,
    filters: ReviewFilters,
    pagination: PaginationParams,
    viewer: Actor | None = None,
) -> Page[ReviewSummary]:
    if viewer is None or not viewer.is_admin:
        filters = replace(filters, status=ReviewStatus.PUBLISHED)
    stmt = apply_filters(
        select(Review).options(selectinload(Review.user), selectinload(Review.category)),
        filters,
    ).order_by(*order_clause(pagination))
    reviews, meta = paginate(session, stmt, pagination)
    return Page(meta=meta, data=summarize(session, reviews))


def get_review_by_id(session: Session, review_id: int, viewer: Actor | None = None) -> ReviewDetail:
    review = ReviewCRUD.get_by_id(session, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    if review.status != ReviewStatus.PUBLISHED:
        allowed = viewer is not None and (viewer.is_admin or viewer.user_id == review.user_id)
        if not allowed:
            raise NotFoundError("Review not found")

    counts = vote_ledger.counts_for_reviews(session, [review.id])[review.id]
    viewer_vote = None
    if viewer is not None:
        vote = VoteCRUD.get(session, review.id, viewer.user_id)
        viewer_vote = vote.type if vote is not None else None

    stmt = (
        select(Comment)
        .where(Comment.review_id == review.id, Comment.parent_id.is_(None))
        .options(
            selectinload(Comment.user),
            selectinload(Comment.replies).selectinload(Comment.user),
        )
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    threads = [
        comment_thread.ThreadEntry(c, list(c.replies)) for c in session.scalars(stmt).all()
    ]
    return ReviewDetail(review=review, votes=counts, viewer_vote=viewer_vote, comments=threads)


def get_featured_reviews(session: Session, limit: int = 6) -> FeaturedReviews:
    half = max(limit // 2, 1)
    published = select(Review).where(Review.status == ReviewStatus.PUBLISHED)

    highest = session.scalars(
        published.order_by(Review.rating.desc(), Review.created_at.desc(), Review.id.desc()).limit(half)
    ).all()

    vote_count = (
        select(Vote.review_id, func.count(Vote.id).label("vote_count"))
        .group_by(Vote.review_id)
        .subquery()
    )
    most_voted = session.scalars(
        published.outerjoin(vote_count, vote_count.c.review_id == Review.id)
        .order_by(func.coalesce(vote_count.c.vote_count, 0).desc(), Review.id.desc())
        .limit(half)
    ).all()
    return FeaturedReviews(
        highest_rated=summarize(session, list(highest)),
        most_voted=summarize(session, list(most_voted)),
    )


def get_related_reviews(session: Session, review_id: int, limit: int = 4) -> list[ReviewSummary]:
    review = _get_review(session, review_id)
    stmt = (
        select(Review)
        .where(
            Review.category_id == review.category_id,
            Review.status == ReviewStatus.PUBLISHED,
            Review.id != review.id,
        )
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
    )
    return summarize(session, list(session.scalars(stmt).all()))


def get_user_reviews(session: Session, user_id: int, pagination: PaginationParams) -> Page[ReviewSummary]:
    stmt = (
        select(Review)
        .where(Review.user_id == user_id)
        .options(selectinload(Review.category))
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    reviews, meta = paginate(session, stmt, pagination)
    return Page(meta=meta, data=summarize(session, reviews))
