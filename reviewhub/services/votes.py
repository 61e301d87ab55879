"""Vote ledger: one vote per (review, voter) with toggle semantics.

Casting the same type twice removes the vote, casting the other type flips
it in place. Votes are only accepted on published reviews.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reviewhub.db.crud import ReviewCRUD, VoteCRUD
from reviewhub.db.models import Review, ReviewStatus, Vote, VoteType
from reviewhub.errors import BadRequestError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class VoteAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


ACTION_MESSAGES = {
    VoteAction.CREATED: "Vote added",
    VoteAction.UPDATED: "Vote updated",
    VoteAction.REMOVED: "Vote removed",
}


@dataclass(frozen=True)
class VoteResult:
    review_id: int
    action: VoteAction
    vote_type: VoteType
    vote_id: int | None = None

    @property
    def message(self) -> str:
        return ACTION_MESSAGES[self.action]


@dataclass(frozen=True)
class VoteCounts:
    upvotes: int = 0
    downvotes: int = 0

    @property
    def total(self) -> int:
        return self.upvotes + self.downvotes

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


@dataclass(frozen=True)
class VoterChoice:
    review_id: int
    has_voted: bool
    vote_type: VoteType | None = None


def coerce_vote_type(value: VoteType | str) -> VoteType:
    if isinstance(value, VoteType):
        return value
    try:
        return VoteType(str(value).strip().upper())
    except ValueError:
        raise BadRequestError(
            f"Vote type must be either 'upvote' or 'downvote', got {value!r}", path="voteType"
        ) from None


def _require_published_review(session: Session, review_id: int) -> Review:
    review = ReviewCRUD.get_by_id(session, review_id)
    if review is None or review.status != ReviewStatus.PUBLISHED:
        raise NotFoundError("Review not found or not published")
    return review


def _require_review(session: Session, review_id: int) -> Review:
    review = ReviewCRUD.get_by_id(session, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


def _apply_toggle(session: Session, existing: Vote, vote_type: VoteType) -> VoteResult:
    if existing.type == vote_type:
        vote_id = existing.id
        VoteCRUD.delete(session, existing)
        return VoteResult(existing.review_id, VoteAction.REMOVED, vote_type, vote_id)
    existing.type = vote_type
    session.flush()
    return VoteResult(existing.review_id, VoteAction.UPDATED, vote_type, existing.id)


def cast_vote(
    session: Session, review_id: int, voter_id: int, vote_type: VoteType | str
) -> VoteResult:
    """Create, flip or remove the voter's vote on a published review.

    When two first votes from the same voter race, the loser's insert hits
    the ``(review_id, user_id)`` unique constraint. Only the savepoint around
    the insert is rolled back; the caller's pending work is kept and the
    toggle is applied once against the winning row.
    """
    vote_type = coerce_vote_type(vote_type)
    _require_published_review(session, review_id)

    existing = VoteCRUD.get(session, review_id, voter_id)
    if existing is not None:
        result = _apply_toggle(session, existing, vote_type)
        logger.info(f"Vote {result.action.value} on review {review_id} by user {voter_id}")
        return result

    try:
        with session.begin_nested():
            vote = VoteCRUD.create(session, review_id, voter_id, vote_type)
    except IntegrityError:
        logger.warning(
            f"Concurrent vote on review {review_id} by user {voter_id}; retrying as toggle"
        )
    else:
        logger.info(f"Vote created on review {review_id} by user {voter_id}")
        return VoteResult(review_id, VoteAction.CREATED, vote_type, vote.id)

    existing = VoteCRUD.get(session, review_id, voter_id)
    if existing is None:
        raise ConflictError("Vote could not be recorded, please retry")
    return _apply_toggle(session, existing, vote_type)


def counts_for_reviews(session: Session, review_ids: list[int]) -> dict[int, VoteCounts]:
    raw = VoteCRUD.count_by_type(session, review_ids)
    return {
        review_id: VoteCounts(
            upvotes=by_type.get(VoteType.UPVOTE, 0),
            downvotes=by_type.get(VoteType.DOWNVOTE, 0),
        )
        for review_id, by_type in raw.items()
    }


def get_vote_counts(session: Session, review_id: int) -> VoteCounts:
    _require_review(session, review_id)
    return counts_for_reviews(session, [review_id])[review_id]


def get_voter_choice(session: Session, review_id: int, voter_id: int) -> VoterChoice:
    _require_review(session, review_id)
    vote = VoteCRUD.get(session, review_id, voter_id)
    if vote is None:
        return VoterChoice(review_id=review_id, has_voted=False)
    return VoterChoice(review_id=review_id, has_voted=True, vote_type=vote.type)
