# src/services/invite_code.py
# Генерация кодов приглашения в группу.
#
# Код - случайные байты в base64url (по умолчанию 6 байт -> 8 символов).
# Коллизия маловероятна, но возможна: перед выдачей проверяем уникальность
# по groups.invite_code и пробуем заново (плюс UNIQUE-индекс на колонке).

from __future__ import annotations

import os
import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.models.group import Group
from src.services.errors import TransactionFailure

MAX_ATTEMPTS = 5


def _code_bytes() -> int:
    raw = os.environ.get("INVITE_CODE_BYTES") or "6"
    try:
        n = int(raw)
    except ValueError:
        raise RuntimeError("INVITE_CODE_BYTES must be an integer")
    if n < 4:
        raise RuntimeError("INVITE_CODE_BYTES must be >= 4")
    return n


def generate_invite_code() -> str:
    return secrets.token_urlsafe(_code_bytes())


def normalize_invite_code(raw: Optional[str]) -> Optional[str]:
    """Срезаем пробелы и хвост полной ссылки вида https://host/join/<code>."""
    if not raw:
        return None
    t = raw.strip()
    if "/join/" in t:
        t = t.rsplit("/join/", 1)[1]
    t = t.strip("/")
    return t or None


def generate_unique_invite_code(db: Session) -> str:
    for _ in range(MAX_ATTEMPTS):
        code = generate_invite_code()
        taken = db.scalar(select(Group.id).where(Group.invite_code == code))
        if taken is None:
            return code
    raise TransactionFailure("invite_code_exhausted", "Could not allocate a unique invite code")
