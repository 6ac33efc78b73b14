# src/models/user.py

from sqlalchemy import Column, Integer, String, DateTime, Index, func
from src.db import Base


class User(Base):
    """
    Пользователь, заведённый по профилю внешнего провайдера (Google).

    active_group_id - указатель на «активную» группу. FK намеренно нет:
    согласованность с group_members держит сервис членства
    (проверка членства перед переключением, очистка при удалении).
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    google_id = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True, index=True)
    name = Column(String, nullable=True)  # Отображаемое имя
    avatar_url = Column(String(1024), nullable=True)
    theme_preference = Column(String(16), nullable=False, default="light", server_default="light")

    active_group_id = Column(Integer, nullable=True, comment="Текущая активная группа (без FK)")

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_users_active_group_id", "active_group_id"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, google_id={self.google_id}, name={self.name}, active_group_id={self.active_group_id})>"
