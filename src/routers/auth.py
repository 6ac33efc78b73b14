# src/routers/auth.py
"""
Роутер авторизации через Google.
Проверяет ID token, создаёт (если нет) или обновляет пользователя, кладёт user_id в сессию.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, Depends
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.group import MessageOut
from src.schemas.user import GoogleLogin, PreferencesUpdate, UserOut
from src.services.errors import TransactionFailure
from src.services.identity import resolve_identity
from src.utils.auth_dep import get_current_user, login_session, logout_session
from src.utils.google_auth import verify_google_credential

log = logging.getLogger(__name__)

router = APIRouter()


@router.post("/google", response_model=UserOut)
def auth_via_google(payload: GoogleLogin, request: Request, db: Session = Depends(get_db)) -> User:
    """
    Точка входа для фронта (/api/auth/google).
    Принимает JSON: { "credential": "<Google ID token>" }
    """
    profile = verify_google_credential(payload.credential)

    # Первый вход: пользователь + группа по умолчанию; иначе обновляем профиль.
    try:
        user = resolve_identity(db, profile)
    except TransactionFailure:
        raise HTTPException(status_code=401, detail={"code": "auth_failed", "message": "Authentication failed"})

    login_session(request, user)
    return user


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.post("/logout", response_model=MessageOut)
def logout(request: Request):
    logout_session(request)
    return {"message": "Logged out successfully"}


@router.patch("/preferences", response_model=UserOut)
def update_preferences(
    payload: PreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    current_user.theme_preference = payload.theme_preference.value
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return current_user
