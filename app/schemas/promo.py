# app/schemas/promo.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import UserSummary


class PromoCreate(BaseModel):
    code: str = Field(..., min_length=3, max_length=50, examples=["SPRING10"])
    percentage: float = Field(..., ge=0, le=100, examples=[10])


class PromoResponse(BaseModel):
    id: int
    code: str
    percentage: Decimal
    promo_type: str
    validated: bool
    user_id: Optional[int] = None
    creator: Optional[UserSummary] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PromoListResponse(BaseModel):
    promos: List[PromoResponse]
    total: int
    page: int
    size: int
    total_pages: int
