# src/utils/google_auth.py
"""
Проверка Google ID token (credential из Google Identity Services) и перевод
claims в ExternalProfile для резолвера личности.
"""

import logging
import os

from fastapi import HTTPException
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from src.schemas.user import ExternalProfile

log = logging.getLogger(__name__)


def _client_id() -> str:
    cid = os.environ.get("GOOGLE_CLIENT_ID")
    if not cid:
        raise RuntimeError("GOOGLE_CLIENT_ID is not set")
    return cid


def profile_from_claims(claims: dict) -> ExternalProfile:
    sub = claims.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail={"code": "auth_failed", "message": "No subject in token"})
    return ExternalProfile(
        external_id=str(sub),
        email=claims.get("email"),
        name=claims.get("name"),
        avatar_url=claims.get("picture"),
    )


def verify_google_credential(credential: str) -> ExternalProfile:
    """
    Валидирует подпись/срок/аудиторию токена. Любая ошибка проверки -> 401.
    Причина отказа остаётся в логе, клиенту уходит только код.
    """
    client_id = _client_id()
    try:
        claims = id_token.verify_oauth2_token(credential, google_requests.Request(), client_id)
    except ValueError as e:
        log.warning("google token rejected: %s", e)
        raise HTTPException(status_code=401, detail={"code": "auth_failed", "message": "Authentication failed"})
    return profile_from_claims(claims)
