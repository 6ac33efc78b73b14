# tests/test_share_api.py
# Публичные ссылки на блюда.

from datetime import datetime, timedelta

from sqlalchemy import select

from src.models.shared_link import SharedLink


def _item(client):
    resp = client.post(
        "/api/menu/items",
        json={"name": "Lasagna", "category": "Dinner", "recipes": [{"instructions": "Layer"}]},
    )
    assert resp.status_code == 201
    return resp.json()


def test_share_link_opens_without_login_and_counts_views(login, anon_client):
    alice, user = login("Alice")
    item = _item(alice)

    resp = alice.post(f"/api/share/{item['id']}/share", json={"expires_in_days": 7})
    assert resp.status_code == 201
    link = resp.json()
    assert len(link["share_token"]) == 16
    assert link["share_url"] == f"http://localhost:3001/shared/{link['share_token']}"
    assert link["created_by"] == user["id"]
    assert link["expires_at"] is not None

    for _ in range(2):
        opened = anon_client.get(f"/api/share/shared/{link['share_token']}")
        assert opened.status_code == 200
        assert opened.json()["name"] == "Lasagna"
        assert opened.json()["recipes"][0]["instructions"] == "Layer"

    shares = alice.get(f"/api/share/{item['id']}/shares").json()
    assert shares[0]["view_count"] == 2


def test_unknown_and_expired_links_are_404(login, anon_client, db):
    alice, _ = login("Alice")
    item = _item(alice)
    token = alice.post(f"/api/share/{item['id']}/share").json()["share_token"]

    assert anon_client.get("/api/share/shared/nope").status_code == 404

    link = db.scalar(select(SharedLink).where(SharedLink.share_token == token))
    link.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    resp = anon_client.get(f"/api/share/shared/{token}")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "share_not_found"


def test_anonymous_share_and_unknown_item(login, anon_client):
    alice, _ = login("Alice")
    item = _item(alice)

    anon = anon_client.post(f"/api/share/{item['id']}/share")
    assert anon.status_code == 201
    assert anon.json()["created_by"] is None
    assert anon.json()["expires_at"] is None

    assert anon_client.post("/api/share/9999/share").status_code == 404


def test_listing_and_deleting_shares_requires_login(login, anon_client):
    alice, _ = login("Alice")
    eve, _ = login("Eve")
    item = _item(alice)
    link = alice.post(f"/api/share/{item['id']}/share").json()

    assert anon_client.get(f"/api/share/{item['id']}/shares").status_code == 401
    assert anon_client.delete(f"/api/share/shares/{link['id']}").status_code == 401

    # чужую ссылку удалить нельзя
    assert eve.delete(f"/api/share/shares/{link['id']}").status_code == 404

    assert alice.delete(f"/api/share/shares/{link['id']}").status_code == 200
    assert alice.get(f"/api/share/{item['id']}/shares").json() == []


def test_expiry_beyond_ten_years_is_rejected(login):
    alice, _ = login("Alice")
    item = _item(alice)

    huge = alice.post(f"/api/share/{item['id']}/share", json={"expires_in_days": 999999999})
    assert huge.status_code == 422

    longest = alice.post(f"/api/share/{item['id']}/share", json={"expires_in_days": 3650})
    assert longest.status_code == 201
