"""Comment threads on published reviews.

Threads are one level deep: a comment either starts a thread or replies to
a top-level comment of the same review. Deleting a top-level comment that
still has replies replaces its content with a tombstone so the replies keep
their parent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from reviewhub.db.crud import CommentCRUD, ReviewCRUD
from reviewhub.db.models import Comment, ReviewStatus
from reviewhub.errors import BadRequestError, ForbiddenError, NotFoundError

from .pagination import Page, PaginationParams, paginate

logger = logging.getLogger(__name__)

ADMIN_TOMBSTONE = "[removed by an administrator]"
USER_TOMBSTONE = "[deleted by the user]"


@dataclass(frozen=True)
class CommentDeletion:
    comment_id: int
    tombstoned: bool
    retained_replies: int = 0


@dataclass
class ThreadEntry:
    comment: Comment
    replies: list[Comment] = field(default_factory=list)

    @property
    def reply_count(self) -> int:
        return len(self.replies)


def get_comment(session: Session, comment_id: int) -> Comment:
    comment = CommentCRUD.get_by_id(session, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


def add_comment(
    session: Session,
    review_id: int,
    author_id: int,
    content: str,
    parent_id: int | None = None,
) -> Comment:
    review = ReviewCRUD.get_by_id(session, review_id)
    if review is None or review.status != ReviewStatus.PUBLISHED:
        raise NotFoundError("Review not found or not published")
    if content is None or not str(content).strip():
        raise BadRequestError("Comment content must not be empty", path="content")

    if parent_id is not None:
        parent = CommentCRUD.get_by_id(session, parent_id)
        if parent is None or parent.review_id != review_id:
            raise NotFoundError("Parent comment not found")
        if parent.parent_id is not None:
            raise BadRequestError(
                "Replies can only be made to top-level comments", path="parentId"
            )

    comment = CommentCRUD.create(session, review_id, author_id, content, parent_id=parent_id)
    logger.info(f"Comment {comment.id} added to review {review_id} by user {author_id}")
    return comment


def update_comment(session: Session, comment_id: int, requester_id: int, content: str) -> Comment:
    comment = get_comment(session, comment_id)
    # Admins may remove comments but never rewrite them.
    if comment.user_id != requester_id:
        raise ForbiddenError("You can only update your own comments")
    if content is None or not str(content).strip():
        raise BadRequestError("Comment content must not be empty", path="content")
    comment.content = str(content).strip()
    session.flush()
    return comment


def delete_comment(
    session: Session, comment_id: int, requester_id: int, requester_is_admin: bool = False
) -> CommentDeletion:
    comment = get_comment(session, comment_id)
    is_author = comment.user_id == requester_id
    if not is_author and not requester_is_admin:
        raise ForbiddenError("You can only delete your own comments")

    if comment.parent_id is None:
        reply_count = CommentCRUD.count_replies(session, comment.id)
        if reply_count > 0:
            comment.content = ADMIN_TOMBSTONE if requester_is_admin else USER_TOMBSTONE
            session.flush()
            logger.info(f"Comment {comment_id} tombstoned, {reply_count} replies retained")
            return CommentDeletion(comment_id, tombstoned=True, retained_replies=reply_count)

    CommentCRUD.delete(session, comment)
    logger.info(f"Comment {comment_id} deleted by user {requester_id}")
    return CommentDeletion(comment_id, tombstoned=False)


def get_review_comments(
    session: Session, review_id: int, pagination: PaginationParams
) -> Page[ThreadEntry]:
    if ReviewCRUD.get_by_id(session, review_id) is None:
        raise NotFoundError("Review not found")
    stmt = (
        select(Comment)
        .where(Comment.review_id == review_id, Comment.parent_id.is_(None))
        .options(
            selectinload(Comment.user),
            selectinload(Comment.replies).selectinload(Comment.user),
        )
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    comments, meta = paginate(session, stmt, pagination)
    return Page(meta=meta, data=[ThreadEntry(c, list(c.replies)) for c in comments])


def get_comment_replies(
    session: Session, comment_id: int, pagination: PaginationParams
) -> Page[Comment]:
    get_comment(session, comment_id)
    stmt = (
        select(Comment)
        .where(Comment.parent_id == comment_id)
        .options(selectinload(Comment.user))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    replies, meta = paginate(session, stmt, pagination)
    return Page(meta=meta, data=replies)


def counts_for_reviews(session: Session, review_ids: list[int]) -> dict[int, int]:
    return CommentCRUD.count_by_review(session, review_ids)
