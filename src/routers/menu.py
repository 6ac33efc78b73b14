# src/routers/menu.py
# -----------------------------------------------------------------------------
# РОУТЕР: Каталог блюд (/api/menu)
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from starlette import status
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.group import MessageOut
from src.schemas.menu_item import (
    IngredientOut,
    MenuItemCreate,
    MenuItemDetailOut,
    MenuItemOut,
    MenuItemUpdate,
    RatingIn,
    RatingOut,
    TagOut,
)
from src.services import catalog
from src.utils.auth_dep import get_current_user

router = APIRouter()


@router.get("/items", response_model=List[MenuItemOut])
def list_menu_items(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Поиск по названию и описанию"),
    tag: Optional[str] = Query(None),
    favorites: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Блюда активной группы со средней оценкой, числом оценок и тегами."""
    return catalog.list_items(
        db,
        current_user,
        category=category,
        search=search,
        tag=tag,
        favorites=favorites,
    )


@router.get("/items/{item_id}", response_model=MenuItemDetailOut)
def get_menu_item(
    item_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return catalog.get_item(db, item_id, current_user)


@router.post("/items", response_model=MenuItemDetailOut, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    payload: MenuItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Создать блюдо в активной группе. Рецепт, ингредиенты и теги пишутся той же транзакцией;
    ингредиенты и теги заводятся по имени, если их ещё нет.
    """
    return catalog.create_item(db, payload, current_user)


@router.put("/items/{item_id}", response_model=MenuItemDetailOut)
def update_menu_item(
    payload: MenuItemUpdate,
    item_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return catalog.update_item(db, item_id, payload, current_user)


@router.delete("/items/{item_id}", response_model=MessageOut)
def delete_menu_item(
    item_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    catalog.delete_item(db, item_id, current_user)
    return {"message": "Menu item deleted successfully"}


@router.post("/items/{item_id}/favorite", response_model=MenuItemOut)
def toggle_favorite(
    item_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return catalog.toggle_favorite(db, item_id, current_user)


@router.post("/items/{item_id}/rating", response_model=RatingOut, status_code=status.HTTP_201_CREATED)
def rate_menu_item(
    payload: RatingIn,
    item_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return catalog.rate_item(db, item_id, current_user, payload.rating, payload.review)


@router.get("/tags", response_model=List[TagOut])
def list_tags(db: Session = Depends(get_db)):
    return catalog.list_tags(db)


@router.get("/ingredients", response_model=List[IngredientOut])
def list_ingredients(db: Session = Depends(get_db)):
    return catalog.list_ingredients(db)
