from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from reviewhub.db.models import ReviewStatus, UserRole
from reviewhub.errors import BadRequestError
from reviewhub.services import (
    Actor,
    PaginationParams,
    comments as comment_thread,
    moderation,
    profiles,
)

from ..core.auth import hash_password
from ..core.dashboard_cache import build_dashboard, invalidate_dashboard
from ..core.deps import get_db, get_pagination, require_admin
from ..core.serialize import (
    envelope,
    page_envelope,
    serialize_comment_deletion,
    serialize_review,
    serialize_review_stats,
    serialize_review_summary,
    serialize_user,
)
from ..schemas.admin import ModerateReviewRequest, UpdateReviewStatusRequest
from ..schemas.auth import CreateAdminRequest

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    return envelope("Dashboard statistics retrieved successfully", build_dashboard(db))


@router.get("/reviews")
def list_reviews(
    status_filter: str = Query(default="ALL", alias="status"),
    categoryId: int | None = None,
    userId: int | None = None,
    isPremium: bool | None = None,
    searchTerm: str | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    review_status = None
    if status_filter.upper() != "ALL":
        try:
            review_status = ReviewStatus(status_filter.upper())
        except ValueError:
            raise BadRequestError(f"Invalid review status: {status_filter!r}", path="status") from None
    filters = moderation.AdminReviewFilters(
        status=review_status,
        category_id=categoryId,
        user_id=userId,
        is_premium=isPremium,
        search_term=searchTerm,
    )
    page = moderation.list_reviews(db, filters, pagination)
    return page_envelope("Reviews retrieved successfully", page, serialize_review_summary)


@router.get("/reviews/pending")
def pending_reviews(
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    page = moderation.get_pending_reviews(db, pagination)
    return page_envelope("Pending reviews retrieved successfully", page, serialize_review_summary)


@router.get("/reviews/stats")
def review_stats(db: Session = Depends(get_db)):
    stats = moderation.get_review_stats(db)
    return envelope("Review statistics retrieved successfully", serialize_review_stats(stats))


@router.patch("/reviews/{review_id}/moderate")
def moderate_review(
    review_id: int,
    body: ModerateReviewRequest,
    db: Session = Depends(get_db),
):
    if body.action == "publish":
        review = moderation.publish_review(db, review_id, note=body.moderationNote)
    else:
        review = moderation.unpublish_review(db, review_id, note=body.moderationNote)
    db.commit()
    invalidate_dashboard()
    return envelope(f"Review {body.action}ed successfully", serialize_review(review))


@router.patch("/reviews/{review_id}/status")
def update_review_status(
    review_id: int,
    body: UpdateReviewStatusRequest,
    db: Session = Depends(get_db),
):
    premium = None
    if body.premiumSettings is not None:
        premium = moderation.PremiumSettings(
            is_premium=body.premiumSettings.isPremium,
            premium_price=body.premiumSettings.premiumPrice,
        )
    review = moderation.update_review_status(
        db, review_id, body.status, premium=premium, note=body.moderationNote
    )
    db.commit()
    invalidate_dashboard()
    return envelope("Review status updated successfully", serialize_review(review))


@router.delete("/comments/{comment_id}")
def remove_comment(
    comment_id: int,
    admin: Actor = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = comment_thread.delete_comment(db, comment_id, admin.user_id, requester_is_admin=True)
    db.commit()
    return envelope("Comment removed successfully", serialize_comment_deletion(result))


@router.get("/users")
def list_users(
    searchTerm: str | None = None,
    role: UserRole | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    page = profiles.list_users(db, pagination, search_term=searchTerm, role=role)
    return page_envelope("Users retrieved successfully", page, serialize_user)


@router.post("/admins", status_code=status.HTTP_201_CREATED)
def create_admin(body: CreateAdminRequest, db: Session = Depends(get_db)):
    user = profiles.register_user(
        db,
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=UserRole.ADMIN,
        profile_photo=body.profilePhoto,
        contact_number=body.contactNumber,
    )
    db.commit()
    return envelope("Admin created successfully", serialize_user(user))


@router.delete("/users/{user_id}")
def soft_delete_user(user_id: int, db: Session = Depends(get_db)):
    user = profiles.soft_delete_user(db, user_id)
    db.commit()
    return envelope("User deleted successfully", serialize_user(user))
