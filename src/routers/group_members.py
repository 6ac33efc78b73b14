# src/routers/group_members.py
# РОУТЕР УЧАСТНИКОВ ГРУППЫ
# -----------------------------------------------------------------------------
# Состав группы (только для участников) и удаление участника / самовыход.

from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.group import MessageOut
from src.schemas.group_member import MemberOut
from src.services import group_membership
from src.utils.auth_dep import get_current_user

router = APIRouter()


@router.get("/groups/{group_id}/members", response_model=List[MemberOut])
def get_members_for_group(
    group_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Состав группы виден только участникам. Порядок: владельцы, затем по дате вступления.
    """
    return group_membership.list_members(db, group_id, current_user)


@router.delete("/groups/{group_id}/members/{member_id}", response_model=MessageOut)
def remove_group_member(
    group_id: int = Path(..., ge=1),
    member_id: int = Path(..., ge=1, description="ID пользователя-участника"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Удаление участника:
      • себя - любой участник (выход из группы);
      • другого - только owner группы, иначе 403.
    Если у удаляемого эта группа была активной - указатель обнуляется.
    """
    group_membership.remove_member(db, group_id, member_id, current_user)
    return {"message": "Member removed"}
