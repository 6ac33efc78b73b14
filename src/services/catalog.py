# src/services/catalog.py
# -----------------------------------------------------------------------------
# КАТАЛОГ БЛЮД: CRUD блюд с рецептом, ингредиентами, тегами; избранное и оценки.
#
# Область видимости: активная группа пользователя; если её нет - только свои блюда.
# Каталог только ЧИТАЕТ users.active_group_id, никогда его не пишет.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session, selectinload

from src.db import unit_of_work
from src.models.ingredient import Ingredient
from src.models.menu_item import MenuItem, MenuItemIngredient, RecipeStep
from src.models.rating import Rating
from src.models.tag import Tag
from src.models.user import User
from src.schemas.menu_item import IngredientIn, MenuItemCreate, MenuItemUpdate, RecipeStepIn
from src.services.errors import NotFound, ValidationError

log = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "description",
    "price",
    "image_url",
    "contributor",
    "prep_time_minutes",
    "cook_time_minutes",
    "servings",
    "difficulty",
    "cuisine_type",
)


# =========================
# ОБЛАСТЬ ВИДИМОСТИ
# =========================

def scope_condition(user: User):
    if user.active_group_id is not None:
        return MenuItem.group_id == user.active_group_id
    return MenuItem.user_id == user.id


def get_visible_item(db: Session, item_id: int, user: User) -> MenuItem:
    item = db.scalar(select(MenuItem).where(MenuItem.id == item_id, scope_condition(user)))
    if item is None:
        raise NotFound("menu_item_not_found", "Menu item not found")
    return item


# =========================
# СЕРИАЛИЗАЦИЯ
# =========================

def _rating_stats(db: Session, item_ids: Iterable[int]) -> Dict[int, Tuple[float, int]]:
    ids = list(item_ids)
    if not ids:
        return {}
    rows = db.execute(
        select(Rating.menu_item_id, func.avg(Rating.rating), func.count(Rating.id))
        .where(Rating.menu_item_id.in_(ids))
        .group_by(Rating.menu_item_id)
    ).all()
    return {mid: (float(avg or 0), int(cnt or 0)) for mid, avg, cnt in rows}


def _item_summary(item: MenuItem, stats: Optional[Tuple[float, int]] = None) -> Dict[str, Any]:
    avg, cnt = stats or (0.0, 0)
    out: Dict[str, Any] = {f: getattr(item, f) for f in SCALAR_FIELDS}
    out["price"] = float(item.price) if item.price is not None else None
    out.update(
        id=item.id,
        name=item.name,
        category=item.category,
        is_favorite=bool(item.is_favorite),
        user_id=item.user_id,
        group_id=item.group_id,
        created_at=item.created_at,
        updated_at=item.updated_at,
        avg_rating=round(avg, 2),
        rating_count=cnt,
        tags=[{"id": t.id, "name": t.name} for t in item.tags],
    )
    return out


def build_item_detail(db: Session, item: MenuItem) -> Dict[str, Any]:
    """Полная карточка блюда. Без проверки области видимости - это делает вызывающий."""
    out = _item_summary(item, _rating_stats(db, [item.id]).get(item.id))
    out["recipes"] = [
        {"id": r.id, "instructions": r.instructions, "step_number": r.step_number}
        for r in item.recipes
    ]
    out["ingredients"] = [
        {
            "id": mii.ingredient.id,
            "name": mii.ingredient.name,
            "category": mii.ingredient.category,
            "quantity": mii.quantity,
            "unit": mii.unit,
            "notes": mii.notes,
        }
        for mii in item.ingredients
    ]
    reviews = db.execute(
        select(Rating, User.name)
        .outerjoin(User, Rating.user_id == User.id)
        .where(Rating.menu_item_id == item.id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    ).all()
    out["reviews"] = [
        {
            "id": r.id,
            "rating": r.rating,
            "review": r.review,
            "user_name": user_name,
            "created_at": r.created_at,
        }
        for r, user_name in reviews
    ]
    return out


# =========================
# СПРАВОЧНИКИ (get-or-create)
# =========================

def _get_or_create_ingredient(db: Session, name: str, category: Optional[str]) -> Ingredient:
    ing = db.scalar(select(Ingredient).where(Ingredient.name == name))
    if ing is None:
        ing = Ingredient(name=name, category=(category or "").strip() or "Other")
        db.add(ing)
        db.flush()
    return ing


def _get_or_create_tag(db: Session, name: str) -> Tag:
    tag = db.scalar(select(Tag).where(Tag.name == name))
    if tag is None:
        tag = Tag(name=name)
        db.add(tag)
        db.flush()
    return tag


def _replace_recipes(item: MenuItem, steps: List[RecipeStepIn]) -> None:
    texts = [(s.instructions or "").strip() for s in steps]
    texts = [t for t in texts if t]
    item.recipes = [RecipeStep(instructions=t, step_number=i) for i, t in enumerate(texts, start=1)]


def _replace_ingredients(db: Session, item: MenuItem, ingredients: List[IngredientIn]) -> None:
    rows: List[MenuItemIngredient] = []
    for ing in ingredients:
        name = (ing.name or "").strip()
        if not name:
            continue
        ref = _get_or_create_ingredient(db, name, ing.category)
        rows.append(
            MenuItemIngredient(ingredient=ref, quantity=ing.quantity, unit=ing.unit, notes=ing.notes)
        )
    item.ingredients = rows


def _replace_tags(db: Session, item: MenuItem, tags: List[str]) -> None:
    seen, out = set(), []
    for raw in tags:
        name = (raw or "").strip()
        if not name or name in seen:
            continue
        seen.add(name)
        out.append(_get_or_create_tag(db, name))
    item.tags = out


def _require_text(value: Optional[str], code: str, message: str) -> str:
    clean = (value or "").strip()
    if not clean:
        raise ValidationError(code, message)
    return clean


# =========================
# ОПЕРАЦИИ
# =========================

def list_items(
    db: Session,
    user: User,
    *,
    category: Optional[str] = None,
    search: Optional[str] = None,
    tag: Optional[str] = None,
    favorites: bool = False,
) -> List[Dict[str, Any]]:
    stmt = (
        select(MenuItem)
        .where(scope_condition(user))
        .options(selectinload(MenuItem.tags))
        .order_by(MenuItem.category.asc(), MenuItem.name.asc())
    )
    if category:
        stmt = stmt.where(MenuItem.category == category)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(MenuItem.name.ilike(pattern), MenuItem.description.ilike(pattern)))
    if tag:
        stmt = stmt.where(MenuItem.tags.any(Tag.name == tag))
    if favorites:
        stmt = stmt.where(MenuItem.is_favorite.is_(True))

    items = list(db.scalars(stmt).all())
    stats = _rating_stats(db, [i.id for i in items])
    return [_item_summary(i, stats.get(i.id)) for i in items]


def get_item(db: Session, item_id: int, user: User) -> Dict[str, Any]:
    return build_item_detail(db, get_visible_item(db, item_id, user))


def create_item(db: Session, data: MenuItemCreate, user: User) -> Dict[str, Any]:
    name = _require_text(data.name, "name_required", "Name is required")
    category = _require_text(data.category, "category_required", "Category is required")

    with unit_of_work(db):
        item = MenuItem(
            name=name,
            category=category,
            user_id=user.id,
            group_id=user.active_group_id,
            **{f: getattr(data, f) for f in SCALAR_FIELDS},
        )
        db.add(item)
        db.flush()
        _replace_recipes(item, data.recipes)
        _replace_ingredients(db, item, data.ingredients)
        _replace_tags(db, item, data.tags)

    db.refresh(item)
    log.info("menu item created: item_id=%s group_id=%s user_id=%s", item.id, item.group_id, user.id)
    return build_item_detail(db, item)


def update_item(db: Session, item_id: int, data: MenuItemUpdate, user: User) -> Dict[str, Any]:
    item = get_visible_item(db, item_id, user)
    changes = data.model_dump(exclude_unset=True, exclude={"recipes", "ingredients", "tags"})

    if "name" in changes:
        changes["name"] = _require_text(changes["name"], "name_required", "Name is required")
    if "category" in changes:
        changes["category"] = _require_text(changes["category"], "category_required", "Category is required")
    if changes.get("is_favorite", False) is None:
        changes.pop("is_favorite")

    with unit_of_work(db):
        for field, value in changes.items():
            setattr(item, field, value)
        if data.recipes is not None:
            _replace_recipes(item, data.recipes)
        if data.ingredients is not None:
            _replace_ingredients(db, item, data.ingredients)
        if data.tags is not None:
            _replace_tags(db, item, data.tags)
        item.updated_at = datetime.utcnow()
        db.add(item)

    db.refresh(item)
    return build_item_detail(db, item)


def delete_item(db: Session, item_id: int, user: User) -> None:
    item = get_visible_item(db, item_id, user)
    with unit_of_work(db):
        db.delete(item)
    log.info("menu item deleted: item_id=%s by user_id=%s", item_id, user.id)


def toggle_favorite(db: Session, item_id: int, user: User) -> Dict[str, Any]:
    item = get_visible_item(db, item_id, user)
    item.is_favorite = not bool(item.is_favorite)
    db.add(item)
    db.commit()
    db.refresh(item)
    return _item_summary(item, _rating_stats(db, [item.id]).get(item.id))


def rate_item(db: Session, item_id: int, user: User, rating: int, review: Optional[str]) -> Rating:
    """Оценка пользователя: одна на блюдо, повторная перезаписывает."""
    item = get_visible_item(db, item_id, user)

    with unit_of_work(db):
        row = db.scalar(
            select(Rating).where(Rating.menu_item_id == item.id, Rating.user_id == user.id)
        )
        if row is None:
            row = Rating(menu_item_id=item.id, user_id=user.id)
        row.rating = rating
        row.review = review
        row.created_at = datetime.utcnow()
        db.add(row)

    db.refresh(row)
    return row


def list_tags(db: Session) -> List[Tag]:
    return list(db.scalars(select(Tag).order_by(Tag.name.asc())).all())


def list_ingredients(db: Session) -> List[Ingredient]:
    return list(db.scalars(select(Ingredient).order_by(Ingredient.name.asc())).all())
