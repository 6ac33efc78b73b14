# src/models/shopping_list.py

from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, text, func
from sqlalchemy.orm import relationship
from src.db import Base


class ShoppingList(Base):
    """
    Список покупок, собранный из планов питания пользователя за диапазон дат.
    Позиции - сумма количеств по паре (ингредиент, единица измерения).
    """
    __tablename__ = "shopping_lists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=func.now())

    items = relationship(
        "ShoppingListItem",
        back_populates="shopping_list",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<ShoppingList(id={self.id}, user_id={self.user_id}, name={self.name})>"


class ShoppingListItem(Base):
    __tablename__ = "shopping_list_items"

    id = Column(Integer, primary_key=True, index=True)
    shopping_list_id = Column(
        Integer,
        ForeignKey("shopping_lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False)
    quantity = Column(Float, nullable=True)
    unit = Column(String(32), nullable=True)
    checked = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    shopping_list = relationship("ShoppingList", back_populates="items")
    ingredient = relationship("Ingredient")
