# app/schemas/lesson.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LessonBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    overview: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    duration: int = Field(..., ge=0, description="Duration in minutes")
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    downloadable_url: Optional[str] = None


class LessonCreate(LessonBase):
    course_id: int = Field(..., gt=0)
    position: Optional[int] = Field(
        None, ge=1, description="Defaults to the end of the course"
    )


class LessonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    overview: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    downloadable_url: Optional[str] = None


class LessonResponse(LessonBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    position: int
    created_at: datetime
    updated_at: datetime


class LessonListResponse(BaseModel):
    lessons: List[LessonResponse]
    total: int
    page: int
    size: int
    total_pages: int
