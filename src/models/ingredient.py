# src/models/ingredient.py

from sqlalchemy import Column, Integer, String
from src.db import Base


class Ingredient(Base):
    """
    Общий справочник ингредиентов. Заводится лениво по имени при сохранении блюда
    (get-or-create), категория нужна для группировки в списке покупок.
    """
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    category = Column(String(64), nullable=False, default="Other", server_default="Other")

    def __repr__(self):
        return f"<Ingredient(id={self.id}, name={self.name}, category={self.category})>"
