# src/schemas/meal_plan.py

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class MealTypeEnum(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class MealPlanCreate(BaseModel):
    menu_item_id: int
    planned_date: date
    meal_type: MealTypeEnum = MealTypeEnum.dinner
    notes: Optional[str] = None


class MealPlanUpdate(BaseModel):
    menu_item_id: Optional[int] = None
    planned_date: Optional[date] = None
    meal_type: Optional[MealTypeEnum] = None
    notes: Optional[str] = None
    completed: Optional[bool] = None


class MealPlanOut(BaseModel):
    id: int
    user_id: int
    menu_item_id: int
    planned_date: date
    meal_type: MealTypeEnum
    notes: Optional[str] = None
    completed: bool = False
    created_at: datetime
    updated_at: datetime

    # денормализованные поля блюда для календаря
    meal_name: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None


class ShoppingListGenerate(BaseModel):
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    name: Optional[str] = None

    class Config:
        populate_by_name = True


class ShoppingListItemOut(BaseModel):
    id: int
    shopping_list_id: int
    ingredient_id: int
    quantity: Optional[float] = None
    unit: Optional[str] = None
    checked: bool = False
    ingredient_name: Optional[str] = None
    ingredient_category: Optional[str] = None


class ShoppingListOut(BaseModel):
    id: int
    user_id: int
    name: str
    created_at: datetime
    item_count: int = 0
    checked_count: int = 0


class ShoppingListDetailOut(ShoppingListOut):
    items: List[ShoppingListItemOut] = Field(default_factory=list)
