# src/services/sharing.py
# -----------------------------------------------------------------------------
# ПУБЛИЧНЫЕ ССЫЛКИ НА БЛЮДА
#
# Токен: 12 случайных байт в base64url -> 16 символов.
# Открыть ссылку может кто угодно; просроченная ссылка ведёт себя как несуществующая.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import os
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from src.models.menu_item import MenuItem
from src.models.shared_link import SharedLink
from src.models.user import User
from src.services.catalog import build_item_detail, get_visible_item
from src.services.errors import NotFound

log = logging.getLogger(__name__)

SHARE_TOKEN_BYTES = 12


def _client_url() -> str:
    return (os.getenv("CLIENT_URL") or "http://localhost:3001").rstrip("/")


def share_url(token: str) -> str:
    return f"{_client_url()}/shared/{token}"


def _link_out(link: SharedLink) -> Dict[str, Any]:
    return {
        "id": link.id,
        "menu_item_id": link.menu_item_id,
        "share_token": link.share_token,
        "created_by": link.created_by,
        "expires_at": link.expires_at,
        "view_count": int(link.view_count or 0),
        "created_at": link.created_at,
        "share_url": share_url(link.share_token),
    }


def create_share(
    db: Session,
    menu_item_id: int,
    user: Optional[User],
    expires_in_days: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Вошедший пользователь делится только блюдом из своей области видимости;
    анонимный - любым существующим блюдом (created_by остаётся NULL).
    """
    if user is not None:
        item = get_visible_item(db, menu_item_id, user)
    else:
        item = db.get(MenuItem, menu_item_id)
        if item is None:
            raise NotFound("menu_item_not_found", "Menu item not found")

    expires_at = None
    if expires_in_days:
        expires_at = datetime.utcnow() + timedelta(days=expires_in_days)

    link = SharedLink(
        menu_item_id=item.id,
        share_token=secrets.token_urlsafe(SHARE_TOKEN_BYTES),
        created_by=user.id if user is not None else None,
        expires_at=expires_at,
        view_count=0,
    )
    db.add(link)
    db.commit()
    db.refresh(link)
    log.info("share link created: link_id=%s item_id=%s", link.id, item.id)
    return _link_out(link)


def open_share(db: Session, token: str) -> Dict[str, Any]:
    link = db.scalar(select(SharedLink).where(SharedLink.share_token == token))
    if link is None or (link.expires_at is not None and link.expires_at < datetime.utcnow()):
        raise NotFound("share_not_found", "Shared link not found or expired")

    # инкремент в SQL, чтобы параллельные открытия не терялись
    db.execute(
        update(SharedLink)
        .where(SharedLink.id == link.id)
        .values(view_count=SharedLink.view_count + 1)
    )
    db.commit()
    return build_item_detail(db, link.menu_item)


def list_shares(db: Session, menu_item_id: int, user: User) -> List[Dict[str, Any]]:
    item = get_visible_item(db, menu_item_id, user)
    links = db.scalars(
        select(SharedLink)
        .where(SharedLink.menu_item_id == item.id)
        .order_by(SharedLink.created_at.desc(), SharedLink.id.desc())
    ).all()
    return [_link_out(link) for link in links]


def delete_share(db: Session, share_id: int, user: User) -> None:
    link = db.get(SharedLink, share_id)
    if link is None or (link.created_by is not None and link.created_by != user.id):
        raise NotFound("share_not_found", "Shared link not found")
    db.delete(link)
    db.commit()
