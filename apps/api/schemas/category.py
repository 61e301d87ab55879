from pydantic import BaseModel, Field


class CategoryRequest(BaseModel):
    name: str = Field(min_length=2)
