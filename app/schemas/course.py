# app/schemas/course.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import Difficulty
from app.schemas.common import UserSummary

# ==================== Tag Schemas ====================


class TagResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


# ==================== Course Schemas ====================


class CourseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    overview: str = Field(..., min_length=1)
    difficulty: Difficulty
    price: float = Field(..., ge=0)
    duration: int = Field(0, ge=0, description="Duration in minutes")
    image_url: Optional[str] = None


class CourseCreate(CourseBase):
    tags: List[str] = Field(default_factory=list)


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    overview: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None
    tags: Optional[List[str]] = None


class CourseResponse(CourseBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    submitted: bool
    approved: bool
    rating: Optional[int] = None
    reviews_count: int
    user_id: int
    instructor: Optional[UserSummary] = None
    tags: List[TagResponse] = []
    created_at: datetime
    updated_at: datetime


class CourseListResponse(BaseModel):
    courses: List[CourseResponse]
    total: int
    page: int
    size: int
    total_pages: int
