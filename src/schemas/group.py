# src/schemas/group.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: Group
# -----------------------------------------------------------------------------

from __future__ import annotations

from enum import Enum
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field


class GroupRoleEnum(str, Enum):
    owner = "owner"
    member = "member"


class GroupCreate(BaseModel):
    # пустую/пробельную строку пропускаем до сервиса - там ValidationError(400)
    name: str = Field(..., description="Название группы")


class ActiveGroupSwitch(BaseModel):
    # фронт исторически шлёт groupId
    group_id: int = Field(..., alias="groupId", description="ID группы, которую сделать активной")

    class Config:
        populate_by_name = True


class GroupOut(BaseModel):
    id: int = Field(..., description="ID группы")
    name: str = Field(..., description="Название группы")
    invite_code: str = Field(..., description="Текущий код приглашения")
    created_by: Optional[int] = Field(None, description="ID создателя")
    created_at: datetime

    class Config:
        from_attributes = True


class GroupWithRoleOut(GroupOut):
    role: GroupRoleEnum = Field(..., description="Роль текущего пользователя в группе")
    member_count: int = Field(..., description="Живое число участников")


class InviteCodeOut(BaseModel):
    invite_code: str


class JoinGroupOut(BaseModel):
    message: str
    group: GroupOut


class MessageOut(BaseModel):
    message: str
