# src/models/meal_plan.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: MealPlan - блюдо, поставленное в календарь пользователя
# -----------------------------------------------------------------------------

from __future__ import annotations

import enum

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..db import Base


class MealType(enum.Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class MealPlan(Base):
    __tablename__ = "meal_plans"

    id = Column(Integer, primary_key=True, index=True)
    # План личный: привязан к пользователю, а не к группе
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False)
    planned_date = Column(Date, nullable=False)
    meal_type = Column(
        Enum(MealType, name="meal_type"),
        nullable=False,
        default=MealType.dinner,
        server_default=text("'dinner'"),
    )
    notes = Column(String(512), nullable=True)
    completed = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    menu_item = relationship("MenuItem", back_populates="meal_plans")

    __table_args__ = (
        Index("ix_meal_plans_user_date", "user_id", "planned_date"),
    )
