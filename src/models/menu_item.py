# src/models/menu_item.py
# -----------------------------------------------------------------------------
# МОДЕЛИ КАТАЛОГА: MenuItem (блюдо), RecipeStep (шаг рецепта),
# MenuItemIngredient (ингредиент блюда с количеством)
# -----------------------------------------------------------------------------

from __future__ import annotations

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Numeric,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..db import Base
from .tag import menu_item_tags


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(64), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=True)
    image_url = Column(String(1024), nullable=True)
    contributor = Column(String(255), nullable=True)

    prep_time_minutes = Column(Integer, nullable=True)
    cook_time_minutes = Column(Integer, nullable=True)
    servings = Column(Integer, nullable=True)
    difficulty = Column(String(32), nullable=True)
    cuisine_type = Column(String(64), nullable=True)

    # Флаг общий для блюда (виден всей группе), не персональный
    is_favorite = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    # Область видимости каталога - активная группа автора на момент создания
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    recipes = relationship(
        "RecipeStep",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="RecipeStep.step_number",
    )
    ingredients = relationship(
        "MenuItemIngredient",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="MenuItemIngredient.id",
    )
    tags = relationship("Tag", secondary=menu_item_tags, order_by="Tag.name")
    ratings = relationship("Rating", back_populates="menu_item", cascade="all, delete-orphan")
    meal_plans = relationship("MealPlan", back_populates="menu_item", cascade="all, delete-orphan")
    shared_links = relationship("SharedLink", back_populates="menu_item", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_menu_items_group_category", "group_id", "category"),
        Index("ix_menu_items_user_id", "user_id"),
    )

    def __repr__(self):
        return f"<MenuItem(id={self.id}, name={self.name}, group_id={self.group_id})>"


class RecipeStep(Base):
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True)
    instructions = Column(Text, nullable=False)
    step_number = Column(Integer, nullable=False)

    menu_item = relationship("MenuItem", back_populates="recipes")


class MenuItemIngredient(Base):
    __tablename__ = "menu_item_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)
    quantity = Column(Float, nullable=True)
    unit = Column(String(32), nullable=True)
    notes = Column(String(255), nullable=True)

    menu_item = relationship("MenuItem", back_populates="ingredients")
    ingredient = relationship("Ingredient")
