from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SiteSettingsBase(BaseModel):
    banner_url: Optional[str] = None
    banner_caption: Optional[str] = Field(None, max_length=255)
    banner_text: Optional[str] = None


class SiteSettingsCreate(SiteSettingsBase):
    pass


class SiteSettingsUpdate(SiteSettingsBase):
    pass


class SiteSettingsResponse(SiteSettingsBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
