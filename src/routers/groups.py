# src/routers/groups.py
# -----------------------------------------------------------------------------
# РОУТЕР: Группы (создание, список, активная группа)
# Участники - routers/group_members.py, инвайты - routers/group_invites.py
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from starlette import status
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.group import (
    ActiveGroupSwitch,
    GroupCreate,
    GroupOut,
    GroupWithRoleOut,
    MessageOut,
)
from src.services import group_membership
from src.utils.auth_dep import get_current_user

router = APIRouter()


@router.post("", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Создать группу. Создатель становится owner; если активной группы у него нет -
    новая становится активной. Пустое имя -> 400 name_required.
    """
    return group_membership.create_group(db, payload.name, current_user)


@router.get("", response_model=List[GroupWithRoleOut])
def list_my_groups(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Все группы пользователя с его ролью и живым числом участников."""
    return group_membership.list_groups(db, current_user)


@router.get("/active", response_model=Optional[GroupWithRoleOut])
def get_active_group(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return group_membership.get_active_group(db, current_user)


@router.put("/active", response_model=MessageOut)
def switch_active_group(
    payload: ActiveGroupSwitch,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Сменить активную группу. Не участник -> 403, указатель не меняется."""
    group_membership.switch_active_group(db, current_user, payload.group_id)
    return {"message": "Active group updated"}
