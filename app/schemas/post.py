from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import UserSummary


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    overview: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    parent_id: Optional[int] = Field(None, gt=0, description="Comment on this post")


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    overview: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class PostSummary(BaseModel):
    id: int
    title: str
    overview: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class PostResponse(BaseModel):
    id: int
    user_id: int
    parent_id: Optional[int] = None
    title: str
    category: str
    overview: str
    description: str
    image_url: Optional[str] = None
    comments_count: int
    published: bool
    deleted: bool
    created_at: datetime
    user: Optional[UserSummary] = None
    comments: List[PostSummary] = Field(default_factory=list, validation_alias="visible_comments")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class PostListResponse(BaseModel):
    posts: List[PostResponse]
    total: int
    page: int
    size: int
    total_pages: int
