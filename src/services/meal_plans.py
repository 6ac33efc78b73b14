# src/services/meal_plans.py
# -----------------------------------------------------------------------------
# ПЛАН ПИТАНИЯ И СПИСКИ ПОКУПОК
#
# Планы личные (user_id), хотя каталог живёт в группе: блюдо в план можно
# поставить только из видимого пользователю каталога.
# Список покупок = SUM(quantity) по (ингредиент, единица) по всем планам
# пользователя в диапазоне дат, включительно с обеих сторон.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session, aliased

from src.db import unit_of_work
from src.models.ingredient import Ingredient
from src.models.meal_plan import MealPlan, MealType
from src.models.menu_item import MenuItem, MenuItemIngredient
from src.models.shopping_list import ShoppingList, ShoppingListItem
from src.models.user import User
from src.schemas.meal_plan import MealPlanCreate, MealPlanUpdate
from src.services.catalog import get_visible_item
from src.services.errors import NotFound, ValidationError

log = logging.getLogger(__name__)

# Порядок приёмов пищи внутри дня
_MEAL_ORDER = case(
    (MealPlan.meal_type == MealType.breakfast, 0),
    (MealPlan.meal_type == MealType.lunch, 1),
    (MealPlan.meal_type == MealType.dinner, 2),
    else_=3,
)


def _plan_out(plan: MealPlan, item: MenuItem) -> Dict[str, Any]:
    return {
        "id": plan.id,
        "user_id": plan.user_id,
        "menu_item_id": plan.menu_item_id,
        "planned_date": plan.planned_date,
        "meal_type": plan.meal_type.value,
        "notes": plan.notes,
        "completed": bool(plan.completed),
        "created_at": plan.created_at,
        "updated_at": plan.updated_at,
        "meal_name": item.name,
        "image_url": item.image_url,
        "category": item.category,
        "prep_time_minutes": item.prep_time_minutes,
        "cook_time_minutes": item.cook_time_minutes,
    }


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("invalid_date_range", "end_date must not be before start_date")


def _get_own_plan(db: Session, plan_id: int, user: User) -> MealPlan:
    plan = db.scalar(select(MealPlan).where(MealPlan.id == plan_id, MealPlan.user_id == user.id))
    if plan is None:
        raise NotFound("meal_plan_not_found", "Meal plan not found")
    return plan


def _get_own_list(db: Session, list_id: int, user: User) -> ShoppingList:
    sl = db.scalar(select(ShoppingList).where(ShoppingList.id == list_id, ShoppingList.user_id == user.id))
    if sl is None:
        raise NotFound("shopping_list_not_found", "Shopping list not found")
    return sl


# =========================
# ПЛАНЫ
# =========================

def list_plans(db: Session, user: User, start: date, end: date) -> List[Dict[str, Any]]:
    _check_range(start, end)
    rows = db.execute(
        select(MealPlan, MenuItem)
        .join(MenuItem, MealPlan.menu_item_id == MenuItem.id)
        .where(
            MealPlan.user_id == user.id,
            MealPlan.planned_date >= start,
            MealPlan.planned_date <= end,
        )
        .order_by(MealPlan.planned_date.asc(), _MEAL_ORDER, MealPlan.id.asc())
    ).all()
    return [_plan_out(p, i) for p, i in rows]


def day_plans(db: Session, user: User, day: date) -> List[Dict[str, Any]]:
    return list_plans(db, user, day, day)


def add_plan(db: Session, user: User, data: MealPlanCreate) -> Dict[str, Any]:
    item = get_visible_item(db, data.menu_item_id, user)
    plan = MealPlan(
        user_id=user.id,
        menu_item_id=item.id,
        planned_date=data.planned_date,
        meal_type=MealType(data.meal_type.value),
        notes=data.notes,
    )
    db.add(plan)
    db.commit()
    db.refresh(plan)
    return _plan_out(plan, item)


def update_plan(db: Session, user: User, plan_id: int, data: MealPlanUpdate) -> Dict[str, Any]:
    plan = _get_own_plan(db, plan_id, user)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("menu_item_id") is not None:
        plan.menu_item_id = get_visible_item(db, changes["menu_item_id"], user).id
    if changes.get("planned_date") is not None:
        plan.planned_date = changes["planned_date"]
    if changes.get("meal_type") is not None:
        plan.meal_type = MealType(changes["meal_type"].value)
    if "notes" in changes:
        plan.notes = changes["notes"]
    if changes.get("completed") is not None:
        plan.completed = changes["completed"]

    db.add(plan)
    db.commit()
    db.refresh(plan)
    return _plan_out(plan, db.get(MenuItem, plan.menu_item_id))


def delete_plan(db: Session, user: User, plan_id: int) -> None:
    plan = _get_own_plan(db, plan_id, user)
    db.delete(plan)
    db.commit()


# =========================
# СПИСКИ ПОКУПОК
# =========================

def generate_shopping_list(
    db: Session,
    user: User,
    start: date,
    end: date,
    name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Создаёт список и позиции одной транзакцией: либо список целиком, либо ничего.
    """
    _check_range(start, end)
    title = (name or "").strip() or f"Shopping List {date.today():%m/%d/%Y}"

    totals = (
        select(
            MenuItemIngredient.ingredient_id,
            MenuItemIngredient.unit,
            func.sum(MenuItemIngredient.quantity).label("total_quantity"),
        )
        .join(MealPlan, MealPlan.menu_item_id == MenuItemIngredient.menu_item_id)
        .where(
            MealPlan.user_id == user.id,
            MealPlan.planned_date >= start,
            MealPlan.planned_date <= end,
        )
        .group_by(MenuItemIngredient.ingredient_id, MenuItemIngredient.unit)
        .order_by(MenuItemIngredient.ingredient_id.asc())
    )

    with unit_of_work(db):
        sl = ShoppingList(user_id=user.id, name=title)
        db.add(sl)
        db.flush()
        for ingredient_id, unit, total in db.execute(totals).all():
            db.add(
                ShoppingListItem(
                    shopping_list_id=sl.id,
                    ingredient_id=ingredient_id,
                    quantity=float(total) if total is not None else None,
                    unit=unit,
                )
            )

    log.info("shopping list generated: list_id=%s user_id=%s", sl.id, user.id)
    return get_shopping_list(db, user, sl.id)


def _counts_subqueries():
    cnt = aliased(ShoppingListItem)
    chk = aliased(ShoppingListItem)
    item_count = (
        select(func.count(cnt.id))
        .where(cnt.shopping_list_id == ShoppingList.id)
        .correlate(ShoppingList)
        .scalar_subquery()
    )
    checked_count = (
        select(func.count(chk.id))
        .where(chk.shopping_list_id == ShoppingList.id, chk.checked.is_(True))
        .correlate(ShoppingList)
        .scalar_subquery()
    )
    return item_count, checked_count


def _list_out(sl: ShoppingList, item_count: int, checked_count: int) -> Dict[str, Any]:
    return {
        "id": sl.id,
        "user_id": sl.user_id,
        "name": sl.name,
        "created_at": sl.created_at,
        "item_count": int(item_count or 0),
        "checked_count": int(checked_count or 0),
    }


def list_shopping_lists(db: Session, user: User) -> List[Dict[str, Any]]:
    item_count, checked_count = _counts_subqueries()
    rows = db.execute(
        select(ShoppingList, item_count, checked_count)
        .where(ShoppingList.user_id == user.id)
        .order_by(ShoppingList.created_at.desc(), ShoppingList.id.desc())
    ).all()
    return [_list_out(sl, ic, cc) for sl, ic, cc in rows]


def get_shopping_list(db: Session, user: User, list_id: int) -> Dict[str, Any]:
    sl = _get_own_list(db, list_id, user)
    rows = db.execute(
        select(ShoppingListItem, Ingredient)
        .join(Ingredient, ShoppingListItem.ingredient_id == Ingredient.id)
        .where(ShoppingListItem.shopping_list_id == sl.id)
        .order_by(Ingredient.category.asc(), Ingredient.name.asc(), ShoppingListItem.id.asc())
    ).all()
    items = [
        {
            "id": it.id,
            "shopping_list_id": it.shopping_list_id,
            "ingredient_id": it.ingredient_id,
            "quantity": it.quantity,
            "unit": it.unit,
            "checked": bool(it.checked),
            "ingredient_name": ing.name,
            "ingredient_category": ing.category,
        }
        for it, ing in rows
    ]
    out = _list_out(sl, len(items), sum(1 for i in items if i["checked"]))
    out["items"] = items
    return out


def toggle_shopping_item(db: Session, user: User, list_id: int, item_id: int) -> Dict[str, Any]:
    _get_own_list(db, list_id, user)
    item = db.scalar(
        select(ShoppingListItem).where(
            ShoppingListItem.id == item_id,
            ShoppingListItem.shopping_list_id == list_id,
        )
    )
    if item is None:
        raise NotFound("item_not_found", "Item not found")
    item.checked = not bool(item.checked)
    db.add(item)
    db.commit()
    db.refresh(item)
    return {
        "id": item.id,
        "shopping_list_id": item.shopping_list_id,
        "ingredient_id": item.ingredient_id,
        "quantity": item.quantity,
        "unit": item.unit,
        "checked": bool(item.checked),
        "ingredient_name": item.ingredient.name,
        "ingredient_category": item.ingredient.category,
    }


def delete_shopping_list(db: Session, user: User, list_id: int) -> None:
    sl = _get_own_list(db, list_id, user)
    db.delete(sl)
    db.commit()
