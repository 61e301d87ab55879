from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from reviewhub.db.models import ReviewStatus
from reviewhub.services import Actor, PaginationParams, reviews as review_lifecycle

from ..core.deps import get_current_actor, get_db, get_optional_actor, get_pagination
from ..core.serialize import (
    envelope,
    page_envelope,
    serialize_featured,
    serialize_review,
    serialize_review_deletion,
    serialize_review_detail,
    serialize_review_summary,
)
from ..schemas.review import CreateReviewRequest, RemoveImageRequest, UpdateReviewRequest

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("")
def list_reviews(
    status_filter: ReviewStatus | None = Query(default=None, alias="status"),
    categoryId: int | None = None,
    isPremium: bool | None = None,
    title: str | None = None,
    rating: int | None = Query(default=None, ge=1, le=5),
    userId: int | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    viewer: Actor | None = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    filters = review_lifecycle.ReviewFilters(
        status=status_filter,
        category_id=categoryId,
        is_premium=isPremium,
        title=title,
        rating=rating,
        user_id=userId,
    )
    page = review_lifecycle.get_all_reviews(db, filters, pagination, viewer=viewer)
    return page_envelope("Reviews retrieved successfully", page, serialize_review_summary)


@router.get("/featured")
def featured_reviews(
    limit: int = Query(default=6, ge=2, le=50),
    db: Session = Depends(get_db),
):
    featured = review_lifecycle.get_featured_reviews(db, limit=limit)
    return envelope("Featured reviews retrieved successfully", serialize_featured(featured))


@router.get("/mine")
def my_reviews(
    pagination: PaginationParams = Depends(get_pagination),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    page = review_lifecycle.get_user_reviews(db, actor.user_id, pagination)
    return page_envelope("Your reviews retrieved successfully", page, serialize_review_summary)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_review(
    body: CreateReviewRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    draft = review_lifecycle.ReviewDraft(
        title=body.title,
        description=body.description,
        rating=body.rating,
        category_id=body.categoryId,
        purchase_source=body.purchaseSource,
        is_premium=body.isPremium,
        premium_price=body.premiumPrice,
    )
    review = review_lifecycle.create_review(db, actor, draft, images=body.images)
    db.commit()
    return envelope("Review created successfully", serialize_review(review))


@router.get("/{review_id}")
def get_review(
    review_id: int,
    viewer: Actor | None = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    detail = review_lifecycle.get_review_by_id(db, review_id, viewer=viewer)
    return envelope("Review retrieved successfully", serialize_review_detail(detail))


@router.get("/{review_id}/related")
def related_reviews(
    review_id: int,
    limit: int = Query(default=4, ge=1, le=20),
    db: Session = Depends(get_db),
):
    related = review_lifecycle.get_related_reviews(db, review_id, limit=limit)
    return envelope(
        "Related reviews retrieved successfully",
        [serialize_review_summary(summary) for summary in related],
    )


@router.patch("/{review_id}")
def update_review(
    review_id: int,
    body: UpdateReviewRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    patch = review_lifecycle.ReviewPatch(
        title=body.title,
        description=body.description,
        rating=body.rating,
        category_id=body.categoryId,
        purchase_source=body.purchaseSource,
        is_premium=body.isPremium,
        premium_price=body.premiumPrice,
        status=body.status,
    )
    review = review_lifecycle.update_review(db, review_id, actor, patch, new_images=body.images)
    db.commit()
    return envelope("Review updated successfully", serialize_review(review))


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    result = review_lifecycle.delete_review(db, review_id, actor)
    db.commit()
    return envelope("Review deleted successfully", serialize_review_deletion(result))


@router.delete("/{review_id}/images")
def remove_image(
    review_id: int,
    body: RemoveImageRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    review = review_lifecycle.remove_image(db, review_id, actor, body.imageUrl)
    db.commit()
    return envelope("Image removed successfully", serialize_review(review))
