# src/models/group.py
# -----------------------------------------------------------------------------
# МОДЕЛЬ: Group (SQLAlchemy)
# -----------------------------------------------------------------------------

from __future__ import annotations

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship

from ..db import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    invite_code = Column(
        String(32),
        unique=True,
        nullable=False,
        index=True,
        comment="Код приглашения; перевыпускается владельцем, старый перестаёт работать",
    )

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    creator = relationship("User", foreign_keys=[created_by])

    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now())

    members = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Group(id={self.id}, name={self.name}, created_by={self.created_by})>"
