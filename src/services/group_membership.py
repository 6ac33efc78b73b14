# src/services/group_membership.py
# -----------------------------------------------------------------------------
# ЧЛЕНСТВО В ГРУППАХ: создание групп, коды приглашения, вступление/выход,
# роли owner|member и указатель активной группы пользователя.
#
# Правила:
#   • Запись в users.active_group_id, groups.invite_code и group_members - только отсюда.
#   • Многошаговые записи идут одним unit_of_work: группа без owner-членства
#     никогда не видна снаружи.
#   • Проверки прав/валидации - до любой мутации.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple, Any

from sqlalchemy import select, update, func, case
from sqlalchemy.orm import Session, aliased

from src.db import unit_of_work
from src.models.group import Group
from src.models.group_member import GroupMember, GroupRole
from src.models.user import User
from src.services.errors import Forbidden, NotFound, ValidationError
from src.services.invite_code import generate_unique_invite_code, normalize_invite_code

log = logging.getLogger(__name__)


# =========================
# ЧТЕНИЕ ЧЛЕНСТВА / ГАРДЫ
# =========================

def get_membership(db: Session, group_id: int, user_id: int) -> Optional[GroupMember]:
    return db.scalar(
        select(GroupMember).where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
        )
    )


def is_member(db: Session, group_id: int, user_id: int) -> bool:
    return get_membership(db, group_id, user_id) is not None


def require_member(db: Session, group_id: int, user_id: int) -> GroupMember:
    membership = get_membership(db, group_id, user_id)
    if membership is None:
        raise Forbidden("not_group_member", "You are not a member of this group")
    return membership


def require_owner(db: Session, group_id: int, user_id: int) -> GroupMember:
    membership = get_membership(db, group_id, user_id)
    if membership is None or membership.role != GroupRole.owner:
        raise Forbidden("not_group_owner", "Only group owners can perform this action")
    return membership


def _member_count_subquery():
    # Отдельный алиас: внешний запрос уже джойнит group_members (членство текущего юзера)
    gm = aliased(GroupMember)
    return (
        select(func.count(gm.id))
        .where(gm.group_id == Group.id)
        .correlate(Group)
        .scalar_subquery()
    )


def _group_with_role(group: Group, role: GroupRole, member_count: int) -> Dict[str, Any]:
    return {
        "id": group.id,
        "name": group.name,
        "invite_code": group.invite_code,
        "created_by": group.created_by,
        "created_at": group.created_at,
        "role": role.value,
        "member_count": int(member_count or 0),
    }


# =========================
# ШАГИ ЗАПИСИ (без commit)
# =========================

def _create_group(db: Session, name: str, created_by: int) -> Group:
    group = Group(
        name=name,
        invite_code=generate_unique_invite_code(db),
        created_by=created_by,
    )
    db.add(group)
    db.flush()
    return group


def _add_membership(db: Session, group_id: int, user_id: int, role: GroupRole) -> GroupMember:
    membership = GroupMember(group_id=group_id, user_id=user_id, role=role)
    db.add(membership)
    db.flush()
    return membership


def _activate_if_unset(db: Session, user: User, group_id: int) -> None:
    """Условный UPDATE: ставим активную группу, только если её нет."""
    db.execute(
        update(User)
        .where(User.id == user.id, User.active_group_id.is_(None))
        .values(active_group_id=group_id)
    )


def create_group_with_owner(db: Session, name: str, user: User) -> Group:
    """
    Группа + owner-членство создателя. НЕ делает commit - вызывается внутри
    чужого unit_of_work (create_group, резолвер личности при первом входе).
    """
    group = _create_group(db, name, user.id)
    _add_membership(db, group.id, user.id, GroupRole.owner)
    return group


# =========================
# ОПЕРАЦИИ
# =========================

def create_group(db: Session, name: Optional[str], user: User) -> Group:
    clean = (name or "").strip()
    if not clean:
        raise ValidationError("name_required", "Group name is required")

    with unit_of_work(db):
        group = create_group_with_owner(db, clean, user)
        _activate_if_unset(db, user, group.id)

    db.refresh(group)
    log.info("group created: group_id=%s owner_id=%s", group.id, user.id)
    return group


def list_groups(db: Session, user: User) -> List[Dict[str, Any]]:
    rows = db.execute(
        select(Group, GroupMember.role, _member_count_subquery().label("member_count"))
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user.id)
        .order_by(Group.created_at.asc(), Group.id.asc())
    ).all()
    return [_group_with_role(g, role, cnt) for g, role, cnt in rows]


def get_active_group(db: Session, user: User) -> Optional[Dict[str, Any]]:
    """
    Активная группа с ролью текущего пользователя.
    Если указатель пуст или членства уже нет - None.
    """
    if user.active_group_id is None:
        return None
    row = db.execute(
        select(Group, GroupMember.role, _member_count_subquery().label("member_count"))
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(Group.id == user.active_group_id, GroupMember.user_id == user.id)
    ).first()
    if row is None:
        return None
    g, role, cnt = row
    return _group_with_role(g, role, cnt)


def switch_active_group(db: Session, user: User, group_id: int) -> None:
    # check-then-write: под конкурентным выходом из группы не перепроверяем (приемлемо для семьи)
    require_member(db, group_id, user.id)
    with unit_of_work(db):
        db.execute(update(User).where(User.id == user.id).values(active_group_id=group_id))
    log.info("active group switched: user_id=%s group_id=%s", user.id, group_id)


def list_members(db: Session, group_id: int, user: User) -> List[Dict[str, Any]]:
    """Участники группы: сначала владельцы, затем по времени вступления."""
    require_member(db, group_id, user.id)

    owners_first = case((GroupMember.role == GroupRole.owner, 0), else_=1)
    rows = db.execute(
        select(GroupMember, User)
        .join(User, GroupMember.user_id == User.id)
        .where(GroupMember.group_id == group_id)
        .order_by(owners_first, GroupMember.joined_at.asc(), GroupMember.id.asc())
    ).all()
    return [
        {
            "id": u.id,
            "name": u.name,
            "email": u.email,
            "avatar_url": u.avatar_url,
            "role": gm.role.value,
            "joined_at": gm.joined_at,
        }
        for gm, u in rows
    ]


def regenerate_invite_code(db: Session, group_id: int, user: User) -> str:
    require_owner(db, group_id, user.id)
    group = db.get(Group, group_id)
    if group is None:
        raise NotFound("group_not_found", "Group not found")

    with unit_of_work(db):
        group.invite_code = generate_unique_invite_code(db)
        db.add(group)

    log.info("invite code regenerated: group_id=%s by user_id=%s", group_id, user.id)
    return group.invite_code


def join_group(db: Session, user: User, invite_code: Optional[str]) -> Tuple[Group, bool]:
    """
    Вступление по коду. Идемпотентно: повторный вызов возвращает ту же группу
    без второй записи.

    Возвращает (group, joined): joined=False - пользователь уже был участником.
    """
    code = normalize_invite_code(invite_code)

    with unit_of_work(db):
        group = db.scalar(select(Group).where(Group.invite_code == code)) if code else None
        if group is None:
            raise NotFound("invalid_invite_code", "Invalid invite code")

        if is_member(db, group.id, user.id):
            joined = False
        else:
            _add_membership(db, group.id, user.id, GroupRole.member)
            _activate_if_unset(db, user, group.id)
            joined = True

    db.refresh(group)
    if joined:
        log.info("member joined: group_id=%s user_id=%s", group.id, user.id)
    return group, joined


def remove_member(db: Session, group_id: int, target_user_id: int, user: User) -> bool:
    """
    Удаление участника или самовыход.
      • Чужого может удалить только owner группы.
      • Если у удаляемого эта группа активна - указатель обнуляется в той же транзакции.
      • Удаление неучастника - no-op (возвращает False).
    """
    if target_user_id != user.id:
        require_owner(db, group_id, user.id)

    with unit_of_work(db):
        membership = get_membership(db, group_id, target_user_id)
        if membership is None:
            return False
        db.delete(membership)
        db.execute(
            update(User)
            .where(User.id == target_user_id, User.active_group_id == group_id)
            .values(active_group_id=None)
        )

    log.info("member removed: group_id=%s user_id=%s by user_id=%s", group_id, target_user_id, user.id)
    return True
