from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from reviewhub.services import Actor, PaginationParams, comments as comment_thread

from ..core.deps import get_current_actor, get_db, get_pagination
from ..core.serialize import (
    envelope,
    page_envelope,
    serialize_comment,
    serialize_comment_deletion,
    serialize_thread,
)
from ..schemas.comment import CreateCommentRequest, UpdateCommentRequest

router = APIRouter(tags=["comments"])


@router.post("/reviews/{review_id}/comments", status_code=status.HTTP_201_CREATED)
def add_comment(
    review_id: int,
    body: CreateCommentRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    comment = comment_thread.add_comment(
        db, review_id, actor.user_id, body.content, parent_id=body.parentId
    )
    db.commit()
    return envelope("Comment added successfully", serialize_comment(comment))


@router.get("/reviews/{review_id}/comments")
def review_comments(
    review_id: int,
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    page = comment_thread.get_review_comments(db, review_id, pagination)
    return page_envelope("Comments retrieved successfully", page, serialize_thread)


@router.get("/comments/{comment_id}/replies")
def comment_replies(
    comment_id: int,
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    page = comment_thread.get_comment_replies(db, comment_id, pagination)
    return page_envelope("Replies retrieved successfully", page, serialize_comment)


@router.patch("/comments/{comment_id}")
def update_comment(
    comment_id: int,
    body: UpdateCommentRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    comment = comment_thread.update_comment(db, comment_id, actor.user_id, body.content)
    db.commit()
    return envelope("Comment updated successfully", serialize_comment(comment))


@router.delete("/comments/{comment_id}")
def delete_comment(
    comment_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    result = comment_thread.delete_comment(db, comment_id, actor.user_id, actor.is_admin)
    db.commit()
    return envelope("Comment deleted successfully", serialize_comment_deletion(result))
