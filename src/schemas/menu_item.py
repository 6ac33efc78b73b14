# src/schemas/menu_item.py
# -----------------------------------------------------------------------------
# СХЕМЫ Pydantic: каталог блюд (MenuItem + рецепт, ингредиенты, теги, оценки)
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RecipeStepIn(BaseModel):
    instructions: Optional[str] = None


class IngredientIn(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = Field(None, description="Категория справочника; по умолчанию Other")
    quantity: Optional[float] = None
    unit: Optional[str] = None
    notes: Optional[str] = None


class MenuItemBase(BaseModel):
    description: Optional[str] = None
    price: Optional[float] = None
    image_url: Optional[str] = None
    contributor: Optional[str] = None
    prep_time_minutes: Optional[int] = Field(None, ge=0)
    cook_time_minutes: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=0)
    difficulty: Optional[str] = None
    cuisine_type: Optional[str] = None


class MenuItemCreate(MenuItemBase):
    # name/category проверяет сервис (400 name_required / category_required)
    name: Optional[str] = None
    category: Optional[str] = None
    recipes: List[RecipeStepIn] = Field(default_factory=list)
    ingredients: List[IngredientIn] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class MenuItemUpdate(MenuItemBase):
    """
    Частичное обновление: применяем только переданные поля.
    recipes/ingredients/tags = None - не трогаем; список (даже пустой) - заменяем целиком.
    """
    name: Optional[str] = None
    category: Optional[str] = None
    is_favorite: Optional[bool] = None
    recipes: Optional[List[RecipeStepIn]] = None
    ingredients: Optional[List[IngredientIn]] = None
    tags: Optional[List[str]] = None


class TagOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class IngredientOut(BaseModel):
    id: int
    name: str
    category: str

    class Config:
        from_attributes = True


class RecipeStepOut(BaseModel):
    id: int
    instructions: str
    step_number: int

    class Config:
        from_attributes = True


class MenuItemIngredientOut(BaseModel):
    id: int  # id ингредиента в справочнике
    name: str
    category: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    notes: Optional[str] = None


class ReviewOut(BaseModel):
    id: int
    rating: int
    review: Optional[str] = None
    user_name: Optional[str] = None
    created_at: datetime


class MenuItemOut(MenuItemBase):
    id: int
    name: str
    category: str
    is_favorite: bool = False
    user_id: Optional[int] = None
    group_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    avg_rating: float = 0.0
    rating_count: int = 0
    tags: List[TagOut] = Field(default_factory=list)


class MenuItemDetailOut(MenuItemOut):
    recipes: List[RecipeStepOut] = Field(default_factory=list)
    ingredients: List[MenuItemIngredientOut] = Field(default_factory=list)
    reviews: List[ReviewOut] = Field(default_factory=list)


class RatingIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = None


class RatingOut(BaseModel):
    id: int
    menu_item_id: int
    user_id: int
    rating: int
    review: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
