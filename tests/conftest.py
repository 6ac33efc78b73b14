# tests/conftest.py
# Общие фикстуры: SQLite в памяти, одна сессия на тест, вход через подменённый Google.

import os

# До импорта src.db: движок создаётся при импорте модуля
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")

import pytest  # noqa: E402
from fastapi import HTTPException  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.db import Base, SessionLocal, engine, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.models.user import User  # noqa: E402
from src.schemas.user import ExternalProfile  # noqa: E402
from src.services.identity import resolve_identity  # noqa: E402


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    def _get_db_override():
        yield session

    app.dependency_overrides[get_db] = _get_db_override
    try:
        yield session
    finally:
        app.dependency_overrides.pop(get_db, None)
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    """Пользователь после первого входа: с группой "<имя>'s Menu"."""

    def _make(name: str, external_id: str = None, email: str = None) -> User:
        profile = ExternalProfile(
            external_id=external_id or f"google-{name.lower()}",
            email=email,
            name=name,
        )
        return resolve_identity(db, profile)

    return _make


@pytest.fixture
def login(db, monkeypatch):
    """
    Вход через POST /api/auth/google. Credential = external_id; проверка
    подписи Google подменена. Возвращает (client, user_json) - свой клиент
    (и своя cookie) на каждого пользователя.
    """
    profiles = {}

    def _fake_verify(credential: str) -> ExternalProfile:
        profile = profiles.get(credential)
        if profile is None:
            raise HTTPException(status_code=401, detail={"code": "auth_failed", "message": "Invalid token"})
        return profile

    monkeypatch.setattr("src.routers.auth.verify_google_credential", _fake_verify)

    def _login(name: str, external_id: str = None, email: str = None):
        ext = external_id or f"google-{name.lower()}"
        profiles[ext] = ExternalProfile(external_id=ext, email=email, name=name)
        client = TestClient(app)
        resp = client.post("/api/auth/google", json={"credential": ext})
        assert resp.status_code == 200, resp.text
        return client, resp.json()

    return _login


@pytest.fixture
def anon_client(db):
    return TestClient(app)
