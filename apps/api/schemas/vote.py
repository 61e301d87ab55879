from typing import Literal

from pydantic import BaseModel


class VoteRequest(BaseModel):
    voteType: Literal["upvote", "downvote"]
