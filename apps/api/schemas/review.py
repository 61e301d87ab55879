from decimal import Decimal

from pydantic import BaseModel, Field

from reviewhub.db.models import ReviewStatus


class CreateReviewRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    categoryId: int
    purchaseSource: str | None = None
    isPremium: bool = False
    premiumPrice: Decimal | None = None
    images: list[str] = []


class UpdateReviewRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    rating: int | None = Field(default=None, ge=1, le=5)
    categoryId: int | None = None
    purchaseSource: str | None = None
    isPremium: bool | None = None
    premiumPrice: Decimal | None = None
    status: ReviewStatus | None = None
    images: list[str] = []


class RemoveImageRequest(BaseModel):
    imageUrl: str = Field(min_length=1)
