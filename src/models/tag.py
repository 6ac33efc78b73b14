# src/models/tag.py

from sqlalchemy import Column, Integer, String, ForeignKey, Table
from src.db import Base


# Связка блюдо <-> тег (многие-ко-многим)
menu_item_tags = Table(
    "menu_item_tags",
    Base.metadata,
    Column("menu_item_id", Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(64), unique=True, nullable=False, index=True)

    def __repr__(self):
        return f"<Tag(id={self.id}, name={self.name})>"
