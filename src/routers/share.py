# src/routers/share.py
# -----------------------------------------------------------------------------
# РОУТЕР: Публичные ссылки на блюда (/api/share)
# -----------------------------------------------------------------------------

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path
from starlette import status
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.group import MessageOut
from src.schemas.menu_item import MenuItemDetailOut
from src.schemas.shared_link import ShareCreate, SharedLinkOut
from src.services import sharing
from src.utils.auth_dep import get_current_user, get_optional_user

router = APIRouter()


@router.get("/shared/{token}", response_model=MenuItemDetailOut)
def open_shared_item(token: str, db: Session = Depends(get_db)):
    """Публичная карточка блюда по токену. Без авторизации."""
    return sharing.open_share(db, token)


@router.delete("/shares/{share_id}", response_model=MessageOut)
def delete_share(
    share_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sharing.delete_share(db, share_id, current_user)
    return {"message": "Share link deleted"}


@router.post("/{menu_item_id}/share", response_model=SharedLinkOut, status_code=status.HTTP_201_CREATED)
def create_share(
    menu_item_id: int = Path(..., ge=1),
    payload: Optional[ShareCreate] = Body(None),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    expires = payload.expires_in_days if payload is not None else None
    return sharing.create_share(db, menu_item_id, current_user, expires)


@router.get("/{menu_item_id}/shares", response_model=List[SharedLinkOut])
def list_shares(
    menu_item_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return sharing.list_shares(db, menu_item_id, current_user)
