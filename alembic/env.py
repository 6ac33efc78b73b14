# alembic/env.py

import sys
import os

from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from alembic import context
from dotenv import load_dotenv

# --- Загрузка переменных окружения из .env ---
load_dotenv()

# --- Корень репозитория в sys.path, чтобы импортировался пакет src ---
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# --- Импортируем Base; src.db сам подтягивает ВСЕ модели ---
from src.db import Base  # noqa: E402

# --- Конфигурируем Alembic ---
config = context.config

# --- Логирование Alembic ---
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# --- Берём строку подключения к БД (DATABASE_URL) ---
db_url = os.getenv("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL is not set!")

# SQLite не умеет ALTER ... ADD CONSTRAINT: нужен batch-режим
render_as_batch = db_url.startswith("sqlite")


def run_migrations_offline():
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = create_engine(
        db_url,
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=render_as_batch,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
