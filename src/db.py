# src/db.py
# Инициализация SQLAlchemy: движок, сессии, Base, unit-of-work и явные импорты моделей.

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set")

log = logging.getLogger(__name__)

if DATABASE_URL.startswith("sqlite"):
    # Локальная разработка и тесты: одно соединение на процесс
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=20,
        max_overflow=20,
        pool_timeout=60,
        pool_recycle=1800,
        pool_pre_ping=True,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

from src.models import (  # noqa: E402
    user,
    group,
    group_member,
    ingredient,
    tag,
    menu_item,
    rating,
    meal_plan,
    shopping_list,
    shared_link,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Всё или ничего: commit в конце блока, rollback при любом исключении.

    Ошибки стора (SQLAlchemyError) превращаются в TransactionFailure без
    текста драйвера; доменные ошибки (Forbidden, NotFound, ...) пробрасываются как есть.
    """
    from src.services.errors import TransactionFailure

    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("unit of work rolled back: %s", e.__class__.__name__)
        raise TransactionFailure() from e
    except Exception:
        db.rollback()
        raise
