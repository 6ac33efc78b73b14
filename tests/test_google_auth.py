# tests/test_google_auth.py

import pytest
from fastapi import HTTPException

from src.utils import google_auth


def test_rejected_token_does_not_leak_verifier_message(monkeypatch):
    def _reject(*args, **kwargs):
        raise ValueError("Token expired, 1712345678 < 1712349999")

    monkeypatch.setattr(google_auth.id_token, "verify_oauth2_token", _reject)

    with pytest.raises(HTTPException) as exc:
        google_auth.verify_google_credential("expired-token")

    assert exc.value.status_code == 401
    assert exc.value.detail == {"code": "auth_failed", "message": "Authentication failed"}


def test_claims_map_to_profile():
    profile = google_auth.profile_from_claims(
        {"sub": "1234", "email": "priya@example.com", "name": "Priya", "picture": "https://img.example.com/p.png"}
    )

    assert profile.external_id == "1234"
    assert profile.avatar_url == "https://img.example.com/p.png"


def test_claims_without_subject_are_rejected():
    with pytest.raises(HTTPException) as exc:
        google_auth.profile_from_claims({"email": "x@example.com"})

    assert exc.value.status_code == 401
