# src/schemas/shared_link.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Не больше 10 лет: дальше timedelta переполняет datetime
MAX_EXPIRES_IN_DAYS = 3650


class ShareCreate(BaseModel):
    expires_in_days: Optional[int] = Field(None, alias="expiresInDays", ge=1, le=MAX_EXPIRES_IN_DAYS, description="Срок жизни ссылки; None - бессрочно")

    class Config:
        populate_by_name = True


class SharedLinkOut(BaseModel):
    id: int
    menu_item_id: int
    share_token: str
    created_by: Optional[int] = None
    expires_at: Optional[datetime] = None
    view_count: int = 0
    created_at: datetime
    share_url: str
