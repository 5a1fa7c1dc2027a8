# app/schemas/academy.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import Difficulty
from app.schemas.common import UserSummary
from app.schemas.course import TagResponse


class CourseInAcademy(BaseModel):
    id: int
    name: str
    duration: int

    model_config = ConfigDict(from_attributes=True)


class AcademyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    overview: str = Field(..., min_length=1)
    difficulty: Difficulty
    price: float = Field(..., gt=0)
    validity: int = Field(
        0, ge=0, le=365, description="Subscription period in days, 0 for one-off"
    )
    image_url: Optional[str] = None
    highlights: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)


class AcademyCreate(AcademyBase):
    tags: List[str] = Field(default_factory=list)
    courses: List[int] = Field(default_factory=list)


class AcademyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    overview: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    price: Optional[float] = Field(None, gt=0)
    validity: Optional[int] = Field(None, ge=0, le=365)
    image_url: Optional[str] = None
    highlights: Optional[List[str]] = None
    requirements: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    # Replaces the whole course list when given
    courses: Optional[List[int]] = None


class AcademyResponse(AcademyBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    duration: int
    ref: Optional[str] = None
    submitted: bool
    approved: bool
    deleted: bool
    rating: Optional[int] = None
    reviews_count: int
    user_id: int
    instructor: Optional[UserSummary] = None
    courses: List[CourseInAcademy] = []
    tags: List[TagResponse] = []
    created_at: datetime
    updated_at: datetime


class AcademyWriteResponse(BaseModel):
    academy: AcademyResponse
    courses_not_found: List[int] = []


class AcademyListResponse(BaseModel):
    academies: List[AcademyResponse]
    total: int
    page: int
    size: int
    total_pages: int
