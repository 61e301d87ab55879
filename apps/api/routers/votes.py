from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from reviewhub.services import Actor, votes as vote_ledger

from ..core.deps import get_current_actor, get_db
from ..core.serialize import (
    envelope,
    serialize_vote_counts,
    serialize_vote_result,
    serialize_voter_choice,
)
from ..schemas.vote import VoteRequest

router = APIRouter(prefix="/reviews/{review_id}/votes", tags=["votes"])


@router.post("")
def cast_vote(
    review_id: int,
    body: VoteRequest,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    result = vote_ledger.cast_vote(db, review_id, actor.user_id, body.voteType)
    db.commit()
    return envelope(result.message, serialize_vote_result(result))


@router.get("")
def vote_counts(review_id: int, db: Session = Depends(get_db)):
    counts = vote_ledger.get_vote_counts(db, review_id)
    data = {"reviewId": str(review_id), **serialize_vote_counts(counts)}
    return envelope("Votes retrieved successfully", data)


@router.get("/me")
def my_vote(
    review_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    choice = vote_ledger.get_voter_choice(db, review_id, actor.user_id)
    return envelope("Vote status retrieved successfully", serialize_voter_choice(choice))
