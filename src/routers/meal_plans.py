# src/routers/meal_plans.py
# -----------------------------------------------------------------------------
# РОУТЕР: План питания и списки покупок (/api/meals)
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Path, Query
from starlette import status
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.group import MessageOut
from src.schemas.meal_plan import (
    MealPlanCreate,
    MealPlanOut,
    MealPlanUpdate,
    ShoppingListDetailOut,
    ShoppingListGenerate,
    ShoppingListItemOut,
    ShoppingListOut,
)
from src.services import meal_plans
from src.utils.auth_dep import get_current_user

router = APIRouter()


# ===== Планы ==================================================================

@router.get("/plans", response_model=List[MealPlanOut])
def get_meal_plans(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Планы пользователя в диапазоне дат (включительно)."""
    return meal_plans.list_plans(db, current_user, start_date, end_date)


@router.get("/plans/day/{day}", response_model=List[MealPlanOut])
def get_day_plan(
    day: date,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return meal_plans.day_plans(db, current_user, day)


@router.post("/plans", response_model=MealPlanOut, status_code=status.HTTP_201_CREATED)
def add_meal_plan(
    payload: MealPlanCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return meal_plans.add_plan(db, current_user, payload)


# ===== Списки покупок =========================================================
# shopping-list объявлен раньше /plans/{plan_id}

@router.post("/plans/shopping-list", response_model=ShoppingListDetailOut, status_code=status.HTTP_201_CREATED)
def generate_shopping_list(
    payload: ShoppingListGenerate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Собрать список покупок из планов за период: количества одного ингредиента
    в одной единице измерения суммируются.
    """
    return meal_plans.generate_shopping_list(
        db, current_user, payload.start_date, payload.end_date, payload.name
    )


@router.put("/plans/{plan_id}", response_model=MealPlanOut)
def update_meal_plan(
    payload: MealPlanUpdate,
    plan_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return meal_plans.update_plan(db, current_user, plan_id, payload)


@router.delete("/plans/{plan_id}", response_model=MessageOut)
def delete_meal_plan(
    plan_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    meal_plans.delete_plan(db, current_user, plan_id)
    return {"message": "Meal plan deleted successfully"}


@router.get("/shopping-lists", response_model=List[ShoppingListOut])
def get_shopping_lists(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return meal_plans.list_shopping_lists(db, current_user)


@router.get("/shopping-lists/{list_id}", response_model=ShoppingListDetailOut)
def get_shopping_list(
    list_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return meal_plans.get_shopping_list(db, current_user, list_id)


@router.patch("/shopping-lists/{list_id}/items/{item_id}", response_model=ShoppingListItemOut)
def toggle_shopping_list_item(
    list_id: int = Path(..., ge=1),
    item_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return meal_plans.toggle_shopping_item(db, current_user, list_id, item_id)


@router.delete("/shopping-lists/{list_id}", response_model=MessageOut)
def delete_shopping_list(
    list_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    meal_plans.delete_shopping_list(db, current_user, list_id)
    return {"message": "Shopping list deleted"}
