from pydantic import BaseModel, Field


class CreateCommentRequest(BaseModel):
    content: str = Field(min_length=1)
    parentId: int | None = None


class UpdateCommentRequest(BaseModel):
    content: str = Field(min_length=1)
