# src/schemas/user.py

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ThemeEnum(str, Enum):
    light = "light"
    dark = "dark"


class ExternalProfile(BaseModel):
    """Профиль от внешнего провайдера (Google) - вход для резолвера личности."""
    external_id: str = Field(..., min_length=1, description="Стабильный id у провайдера (sub)")
    email: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class GoogleLogin(BaseModel):
    credential: str = Field(..., min_length=1, description="Google ID token из Google Identity Services")


class PreferencesUpdate(BaseModel):
    theme_preference: ThemeEnum


class UserOut(BaseModel):
    id: int
    email: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    theme_preference: str = "light"
    active_group_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
