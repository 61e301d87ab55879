"""Helpers to serialize ORM rows and service results to API response dicts."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable

from reviewhub.db.models import Category, Comment, Profile, Review, User
from reviewhub.services import Page
from reviewhub.services.categories import CategoryEntry
from reviewhub.services.comments import CommentDeletion, ThreadEntry
from reviewhub.services.moderation import DashboardStats, ReviewStats
from reviewhub.services.reviews import FeaturedReviews, ReviewDeletion, ReviewDetail, ReviewSummary
from reviewhub.services.votes import VoteCounts, VoterChoice, VoteResult


def iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def _price(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def envelope(message: str, data: Any = None, meta: dict | None = None) -> dict:
    body = {"success": True, "message": message, "data": data}
    if meta is not None:
        body["meta"] = meta
    return body


def page_envelope(message: str, page: Page, item: Callable[[Any], dict]) -> dict:
    meta = {"page": page.meta.page, "limit": page.meta.limit, "total": page.meta.total}
    return envelope(message, [item(entry) for entry in page.data], meta)


def serialize_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "status": user.status.value,
        "hasSubscription": user.has_subscription,
    }


def serialize_author(user: User) -> dict:
    return {"id": str(user.id), "name": user.name}


def serialize_profile(profile: Profile) -> dict:
    data = {
        "kind": profile.kind,
        "userId": str(profile.user_id),
        "name": profile.name,
        "email": profile.user.email,
        "profilePhoto": profile.profile_photo,
    }
    if profile.kind == "ADMIN":
        data["contactNumber"] = profile.contact_number
    else:
        data["address"] = profile.address
    return data


def serialize_category(category: Category) -> dict:
    return {"id": str(category.id), "name": category.name}


def serialize_category_entry(entry: CategoryEntry) -> dict:
    data = serialize_category(entry.category)
    if entry.review_count is not None:
        data["reviewCount"] = entry.review_count
        data["publishedCount"] = entry.published_count
    return data


def serialize_review(review: Review, description: str | None = None) -> dict:
    return {
        "id": str(review.id),
        "title": review.title,
        "description": review.description if description is None else description,
        "rating": review.rating,
        "purchaseSource": review.purchase_source,
        "images": list(review.images or []),
        "status": review.status.value,
        "isPremium": review.is_premium,
        "premiumPrice": _price(review.premium_price),
        "moderationNote": review.moderation_note,
        "categoryId": str(review.category_id),
        "authorId": str(review.user_id),
        "createdAt": iso(review.created_at),
        "updatedAt": iso(review.updated_at),
    }


def serialize_review_summary(summary: ReviewSummary) -> dict:
    data = serialize_review(summary.review, description=summary.description_preview)
    data["upvotes"] = summary.upvotes
    data["downvotes"] = summary.downvotes
    data["commentCount"] = summary.comment_count
    return data


def serialize_comment(comment: Comment) -> dict:
    return {
        "id": str(comment.id),
        "content": comment.content,
        "reviewId": str(comment.review_id),
        "parentId": str(comment.parent_id) if comment.parent_id is not None else None,
        "author": serialize_author(comment.user),
        "createdAt": iso(comment.created_at),
        "updatedAt": iso(comment.updated_at),
    }


def serialize_thread(entry: ThreadEntry) -> dict:
    data = serialize_comment(entry.comment)
    data["replies"] = [serialize_comment(reply) for reply in entry.replies]
    data["replyCount"] = entry.reply_count
    return data


def serialize_comment_deletion(result: CommentDeletion) -> dict:
    return {
        "commentId": str(result.comment_id),
        "tombstoned": result.tombstoned,
        "retainedReplies": result.retained_replies,
    }


def serialize_vote_counts(counts: VoteCounts) -> dict:
    return {
        "upvotes": counts.upvotes,
        "downvotes": counts.downvotes,
        "total": counts.total,
        "score": counts.score,
    }


def serialize_vote_result(result: VoteResult) -> dict:
    return {
        "reviewId": str(result.review_id),
        "action": result.action.value,
        "voteType": result.vote_type.value.lower(),
    }


def serialize_voter_choice(choice: VoterChoice) -> dict:
    return {
        "reviewId": str(choice.review_id),
        "hasVoted": choice.has_voted,
        "voteType": choice.vote_type.value.lower() if choice.vote_type else None,
    }


def serialize_review_detail(detail: ReviewDetail) -> dict:
    data = serialize_review(detail.review)
    data["author"] = serialize_author(detail.review.user)
    data["category"] = serialize_category(detail.review.category)
    data["votes"] = {
        **serialize_vote_counts(detail.votes),
        "userVote": detail.viewer_vote.value.lower() if detail.viewer_vote else None,
    }
    data["comments"] = [serialize_thread(entry) for entry in detail.comments]
    return data


def serialize_review_deletion(result: ReviewDeletion) -> dict:
    return {
        "reviewId": str(result.review_id),
        "votesRemoved": result.votes_removed,
        "commentsRemoved": result.comments_removed,
    }


def serialize_featured(featured: FeaturedReviews) -> dict:
    return {
        "highestRated": [serialize_review_summary(s) for s in featured.highest_rated],
        "mostVoted": [serialize_review_summary(s) for s in featured.most_voted],
    }


def serialize_review_stats(stats: ReviewStats) -> dict:
    return {
        "total": stats.total,
        "published": stats.published,
        "draft": stats.draft,
        "unpublished": stats.unpublished,
        "premium": stats.premium,
    }


def serialize_dashboard(stats: DashboardStats) -> dict:
    return {
        "users": {"total": stats.total_users, **stats.users_by_role},
        "reviews": serialize_review_stats(stats.reviews),
        "categories": stats.categories,
        "votes": {
            "total": stats.total_votes,
            "upvotes": stats.upvotes,
            "downvotes": stats.downvotes,
        },
        "recentReviews": [serialize_review_summary(s) for s in stats.recent_reviews],
        "popularReviews": [serialize_review_summary(s) for s in stats.popular_reviews],
    }
