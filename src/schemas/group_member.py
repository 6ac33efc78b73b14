from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .group import GroupRoleEnum


class MemberOut(BaseModel):
    id: int  # id пользователя
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    role: GroupRoleEnum
    joined_at: datetime

    class Config:
        from_attributes = True
