# src/routers/group_invites.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.group import GroupOut, InviteCodeOut, JoinGroupOut
from src.services import group_membership
from src.utils.auth_dep import get_current_user

router = APIRouter()


# join объявлен раньше /{group_id}/invite, чтобы код "invite" не уехал в чужой маршрут
@router.post("/groups/join/{code}", response_model=JoinGroupOut)
def join_group(
    code: str = Path(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Вступить в группу по коду. Повторное вступление - не ошибка:
    возвращаем ту же группу с message="Already a member".
    Неизвестный код -> 404 invalid_invite_code.
    """
    group, joined = group_membership.join_group(db, current_user, code)
    return {
        "message": "Joined group" if joined else "Already a member",
        "group": GroupOut.model_validate(group),
    }


@router.post("/groups/{group_id}/invite", response_model=InviteCodeOut)
def regenerate_group_invite(
    group_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Перевыпустить код приглашения (только owner). Старый код сразу перестаёт работать.
    Ссылку фронт собирает сам: {origin}/join/{invite_code}.
    """
    code = group_membership.regenerate_invite_code(db, group_id, current_user)
    return {"invite_code": code}
