# src/models/rating.py

from sqlalchemy import Column, Integer, Text, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from src.db import Base


class Rating(Base):
    """
    Оценка блюда пользователем (1..5) с необязательным отзывом.
    Одна запись на пару (menu_item_id, user_id): повторная оценка перезаписывает старую.
    """
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    review = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=func.now())

    __table_args__ = (
        UniqueConstraint("menu_item_id", "user_id", name="uq_ratings_item_user"),
    )

    menu_item = relationship("MenuItem", back_populates="ratings")
    user = relationship("User")

    def __repr__(self):
        return f"<Rating(menu_item_id={self.menu_item_id}, user_id={self.user_id}, rating={self.rating})>"
