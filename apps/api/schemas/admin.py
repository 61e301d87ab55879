from decimal import Decimal
from typing import Literal

from pydantic import BaseModel

from reviewhub.db.models import ReviewStatus


class ModerateReviewRequest(BaseModel):
    action: Literal["publish", "unpublish"]
    moderationNote: str | None = None


class PremiumSettingsRequest(BaseModel):
    isPremium: bool
    premiumPrice: Decimal | None = None


class UpdateReviewStatusRequest(BaseModel):
    status: ReviewStatus
    premiumSettings: PremiumSettingsRequest | None = None
    moderationNote: str | None = None
