# src/models/shared_link.py

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, text, func
from sqlalchemy.orm import relationship
from src.db import Base


class SharedLink(Base):
    """
    Публичная ссылка на одно блюдо.
    expires_at = NULL - бессрочная; view_count растёт на каждом открытии.
    created_by = NULL - ссылку создал анонимный пользователь.
    """
    __tablename__ = "shared_links"

    id = Column(Integer, primary_key=True, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True)
    share_token = Column(String(64), unique=True, index=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    expires_at = Column(DateTime, nullable=True)
    view_count = Column(Integer, nullable=False, default=0, server_default=text("0"))
    created_at = Column(DateTime, nullable=False, default=func.now())

    menu_item = relationship("MenuItem", back_populates="shared_links")

    def __repr__(self):
        return f"<SharedLink(id={self.id}, menu_item_id={self.menu_item_id}, token={self.share_token})>"
