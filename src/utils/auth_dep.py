# src/utils/auth_dep.py
"""
FastAPI-зависимости текущего пользователя.

После входа (/api/auth/google) в подписанной session-cookie лежит только user_id.
Каждая защищённая ручка получает User явно через Depends и передаёт его в сервисы
параметром - никакого глобального состояния запроса в сервисном слое.
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.services.errors import Unauthorized

SESSION_USER_KEY = "user_id"


def login_session(request: Request, user: User) -> None:
    request.session[SESSION_USER_KEY] = user.id


def logout_session(request: Request) -> None:
    request.session.clear()


def _session_user(request: Request, db: Session) -> Optional[User]:
    user_id = request.session.get(SESSION_USER_KEY)
    if not isinstance(user_id, int):
        return None
    user = db.get(User, user_id)
    if user is None:
        # пользователя больше нет - чистим протухшую сессию
        request.session.pop(SESSION_USER_KEY, None)
    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Зависимость для защищённых ручек: 401 до любой бизнес-логики."""
    user = _session_user(request, db)
    if user is None:
        raise Unauthorized("not_authenticated", "Not authenticated")
    return user


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """То же, но без ошибки: для ручек, где вход необязателен."""
    return _session_user(request, db)
