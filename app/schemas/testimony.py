from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import UserSummary


class TestimonyCreate(BaseModel):
    statement: str = Field(..., min_length=1, max_length=2000)
    profession: str = Field(..., min_length=1, max_length=255)


class TestimonyUpdate(BaseModel):
    statement: Optional[str] = Field(None, min_length=1, max_length=2000)
    profession: Optional[str] = Field(None, min_length=1, max_length=255)


class TestimonyResponse(BaseModel):
    id: int
    user_id: int
    statement: str
    profession: str
    approved: bool
    created_at: datetime
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class TestimonyListResponse(BaseModel):
    testimonies: List[TestimonyResponse]
    total: int
    page: int
    size: int
    total_pages: int
