# src/services/identity.py
# -----------------------------------------------------------------------------
# РЕЗОЛВЕР ЛИЧНОСТИ: профиль внешнего провайдера -> User.
#
#   • Новый пользователь: User + группа "<имя>'s Menu" + owner-членство +
#     активная группа - одной транзакцией.
#   • Существующий: обновляем name/avatar_url/updated_at.
#   • Путь миграции: у существующего нет active_group_id -> берём самое раннее
#     членство; если членств нет - создаём группу по умолчанию, как новому.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.db import unit_of_work
from src.models.group_member import GroupMember
from src.models.user import User
from src.schemas.user import ExternalProfile
from src.services.group_membership import create_group_with_owner
from src.utils.user import get_display_name, default_group_name

log = logging.getLogger(__name__)


def _create_default_group(db: Session, user: User) -> None:
    group = create_group_with_owner(db, default_group_name(user.name), user)
    user.active_group_id = group.id
    db.add(user)
    log.info("default group created: group_id=%s user_id=%s", group.id, user.id)


def _adopt_or_create_group(db: Session, user: User) -> None:
    first_group_id: Optional[int] = db.scalar(
        select(GroupMember.group_id)
        .where(GroupMember.user_id == user.id)
        .order_by(GroupMember.joined_at.asc(), GroupMember.id.asc())
        .limit(1)
    )
    if first_group_id is not None:
        user.active_group_id = first_group_id
        db.add(user)
        return
    _create_default_group(db, user)


def resolve_identity(db: Session, profile: ExternalProfile) -> User:
    """
    Находит/создаёт пользователя по external_id. Любая ошибка по пути откатывает
    всю последовательность (TransactionFailure из unit_of_work).
    """
    display_name = get_display_name(profile.name, profile.email, profile.external_id)

    with unit_of_work(db):
        user: Optional[User] = db.scalar(select(User).where(User.google_id == profile.external_id))

        if user is None:
            user = User(
                google_id=profile.external_id,
                email=profile.email,
                name=display_name,
                avatar_url=profile.avatar_url,
            )
            db.add(user)
            db.flush()
            _create_default_group(db, user)
            log.info("user created: user_id=%s", user.id)
        else:
            user.name = display_name
            user.avatar_url = profile.avatar_url
            user.updated_at = datetime.utcnow()
            db.add(user)
            if user.active_group_id is None:
                _adopt_or_create_group(db, user)

    db.refresh(user)
    return user
